"""HTTP 接口的请求/响应模型。

接口无状态：请求携带完整快照，响应返回新的完整快照。
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pbl_engine.models import (
    ActivityAction,
    Badge,
    Student,
    SubmissionStatus,
    SubmissionType,
    Team,
    Urgency,
)


class BalanceTeamsRequest(BaseModel):
    """分组入参；``team_size`` 缺省时使用配置中的默认值。"""

    students: list[Student] = Field(default_factory=list)
    team_size: Optional[int] = None


class AssignProjectRequest(BaseModel):
    teams: list[Team] = Field(default_factory=list)
    topic: str


class TeamsRequest(BaseModel):
    teams: list[Team] = Field(default_factory=list)


class ToggleTaskRequest(TeamsRequest):
    team_id: str
    phase_id: str
    task_id: str


class SubmitEvidenceRequest(TeamsRequest):
    team_id: str
    phase_id: str
    task_id: str
    type: SubmissionType
    url: str
    student_id: Optional[str] = None


class ReviewSubmissionRequest(TeamsRequest):
    team_id: str
    phase_id: str
    task_id: str
    decision: SubmissionStatus
    comment: str = ""
    rubric_score: Optional[float] = Field(default=None, ge=0)


class ActivityRequest(TeamsRequest):
    team_id: str
    student_id: str
    action: ActivityAction
    task_id: Optional[str] = None
    phase_id: Optional[str] = None
    details: Optional[str] = None


class StuckStudentsRequest(TeamsRequest):
    days_threshold: Optional[float] = Field(default=None, gt=0)


class UpcomingDeadlinesRequest(BaseModel):
    team: Team
    days_ahead: Optional[int] = Field(default=None, ge=0)


class ClassUpdateResponse(BaseModel):
    """操作后的班级快照，以及可用于一次性通知的新徽章。"""

    teams: list[Team]
    new_badge: Optional[Badge] = None


class DeadlineInfo(BaseModel):
    task_id: str
    title: str
    deadline: datetime
    urgency: Urgency
    remaining: str
    label: str
