"""应用配置管理。

使用 Pydantic Settings 统一读取环境变量。这里只保存默认值，
引擎函数本身不读取配置，由 API 层显式传入。
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """核心配置项。

    - ``default_team_size``：分组时每队默认人数。
    - ``stuck_days_threshold``：判定学生"卡住"的无活动天数。
    - ``upcoming_window_days``：即将到期任务的前瞻窗口。
    - ``xp_per_task`` / ``xp_per_phase``：经验值常量。
    """

    default_team_size: int = Field(default=4, ge=1, description="默认小组人数")
    stuck_days_threshold: float = Field(
        default=3, gt=0, description="无活动超过该天数且有待审任务即视为卡住"
    )
    upcoming_window_days: int = Field(default=7, ge=0, description="截止提醒窗口（天）")
    xp_per_task: int = Field(default=50, ge=0, description="每完成一个任务的经验值")
    xp_per_phase: int = Field(default=500, ge=0, description="每完成一个阶段的经验值")
    export_filename: str = Field(
        default="student_analytics.csv", description="CSV 导出文件名"
    )
    log_level: str = Field(default="INFO", description="日志级别")

    model_config = {
        "env_prefix": "PBL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """缓存后的全局配置实例。"""

    return Settings()
