"""小组模型定义。"""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, Field

from pbl_engine.models.badge import Badge
from pbl_engine.models.enums import ProjectStatus
from pbl_engine.models.project import Project
from pbl_engine.models.student import Student


class Team(BaseModel):
    """协作单元，独占一个项目实例。

    成员在分组后不再变化；``badges`` 按获得顺序排列且不重复。
    """

    id: str
    name: str
    members: Tuple[Student, ...] = ()
    project: Optional[Project] = None
    project_status: ProjectStatus = ProjectStatus.PENDING_TOPIC
    progress: int = Field(default=0, ge=0, le=100)
    xp: int = Field(default=0, ge=0)
    badges: Tuple[Badge, ...] = ()

    model_config = {"frozen": True}

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name={self.name}, progress={self.progress})>"
