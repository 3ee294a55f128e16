"""项目模型定义 - 项目 / 阶段 / 任务 / 提交 的树形结构。

整棵树由小组独占，所有层级都是不可变快照；可选的下级节点显式
声明为 ``Optional``，消费者必须自行处理缺失情况。
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from pbl_engine.models.enums import PhaseStatus, SubmissionStatus, SubmissionType, TaskState
from pbl_engine.utils.dates import ensure_utc


class Feedback(BaseModel):
    """教师反馈，可附带量规得分。"""

    id: str
    teacher_comment: str = ""
    rubric_score: Optional[float] = Field(default=None, ge=0)
    created_at: datetime

    model_config = {"frozen": True}

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class Submission(BaseModel):
    """任务的完成证据。"""

    id: str
    type: SubmissionType
    url: str
    status: SubmissionStatus = SubmissionStatus.PENDING
    feedback: Optional[Feedback] = None
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    revision_count: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @field_validator("submitted_at", "reviewed_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class RubricCriteria(BaseModel):
    id: str
    name: str
    description: str = ""
    max_points: float = Field(ge=0)

    model_config = {"frozen": True}


class Rubric(BaseModel):
    """Ordered scoring criteria with an overall maximum."""

    id: str
    criteria: Tuple[RubricCriteria, ...] = ()
    max_score: float = Field(ge=0)

    model_config = {"frozen": True}


class Task(BaseModel):
    """阶段内的最小工作单元。"""

    id: str
    title: str
    completed: bool = False
    submission: Optional[Submission] = None
    deadline: Optional[datetime] = None
    is_overdue: bool = False
    rubric: Optional[Rubric] = None

    model_config = {"frozen": True}

    @field_validator("deadline")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def state(self) -> TaskState:
        if self.completed:
            return TaskState.COMPLETED
        if self.submission is None:
            return TaskState.NOT_STARTED
        if self.submission.status == SubmissionStatus.NEEDS_REVISION:
            return TaskState.NEEDS_REVISION
        if self.submission.status == SubmissionStatus.REJECTED:
            return TaskState.REJECTED
        # approved 但未完成只会出现在手工构造的数据里，按待审处理
        return TaskState.PENDING_REVIEW


class Phase(BaseModel):
    """项目中的顺序阶段。"""

    id: str
    title: str
    description: str = ""
    tasks: Tuple[Task, ...] = ()
    status: PhaseStatus = PhaseStatus.LOCKED
    deadline: Optional[datetime] = None

    model_config = {"frozen": True}

    @field_validator("deadline")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class Resource(BaseModel):
    title: str
    uri: str

    model_config = {"frozen": True}


class Project(BaseModel):
    """小组项目：驱动性问题 + 有序阶段。"""

    topic: str
    driving_question: str
    description: str = ""
    phases: Tuple[Phase, ...] = ()
    resources: Tuple[Resource, ...] = ()

    model_config = {"frozen": True}

    def iter_tasks(self) -> Iterator[Task]:
        for phase in self.phases:
            yield from phase.tasks
