"""时间工具：统一按带时区的 UTC 时间处理。"""

from datetime import datetime, timezone
from typing import Optional


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """无时区的时间视为 UTC；带时区的原样返回。"""

    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
