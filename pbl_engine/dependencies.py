"""FastAPI 依赖注入工具。"""

from datetime import datetime, timezone


def get_now() -> datetime:
    """当前 UTC 时间。测试中可通过 ``dependency_overrides`` 固定。"""

    return datetime.now(timezone.utc)
