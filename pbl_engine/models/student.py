"""学生模型定义 - 能力评分与活动日志。"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from pbl_engine.models.badge import Badge
from pbl_engine.models.enums import ActivityAction
from pbl_engine.utils.dates import ensure_utc


class MasteryScores(BaseModel):
    """四项能力分，均为 0-100。"""

    math: float = Field(default=0, ge=0, le=100)
    science: float = Field(default=0, ge=0, le=100)
    creativity: float = Field(default=0, ge=0, le=100)
    leadership: float = Field(default=0, ge=0, le=100)

    model_config = {"frozen": True}

    def average(self) -> float:
        return round((self.math + self.science + self.creativity + self.leadership) / 4, 1)


class ActivityLog(BaseModel):
    """活动日志条目，只追加不修改。"""

    id: str
    timestamp: datetime
    action: ActivityAction
    task_id: Optional[str] = None
    phase_id: Optional[str] = None
    details: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class Student(BaseModel):
    """学生快照。

    ``average_score`` 仅在创建时由四项能力分计算，之后修改 ``scores``
    不会自动重算。
    """

    id: str
    name: str
    avatar: str = ""
    scores: MasteryScores = Field(default_factory=MasteryScores)
    average_score: float = 0
    personal_xp: int = Field(default=0, ge=0)
    personal_badges: Tuple[Badge, ...] = ()
    activity_log: Tuple[ActivityLog, ...] = ()
    joined_at: datetime

    model_config = {"frozen": True}

    @field_validator("joined_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @classmethod
    def create(
        cls,
        id: str,
        name: str,
        scores: MasteryScores,
        joined_at: datetime,
        avatar: str = "",
    ) -> "Student":
        """导入名单时使用的构造入口，负责派生平均分。"""

        return cls(
            id=id,
            name=name,
            avatar=avatar,
            scores=scores,
            average_score=scores.average(),
            joined_at=joined_at,
        )
