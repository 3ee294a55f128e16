"""不可变领域模型。"""

from pbl_engine.models.badge import BADGES, BADGES_BY_ID, Badge
from pbl_engine.models.enums import (
    ActivityAction,
    PhaseStatus,
    ProjectStatus,
    SubmissionStatus,
    SubmissionType,
    TaskState,
    Urgency,
)
from pbl_engine.models.project import (
    Feedback,
    Phase,
    Project,
    Resource,
    Rubric,
    RubricCriteria,
    Submission,
    Task,
)
from pbl_engine.models.student import ActivityLog, MasteryScores, Student
from pbl_engine.models.team import Team

__all__ = [
    "BADGES",
    "BADGES_BY_ID",
    "ActivityAction",
    "ActivityLog",
    "Badge",
    "Feedback",
    "MasteryScores",
    "Phase",
    "PhaseStatus",
    "Project",
    "ProjectStatus",
    "Resource",
    "Rubric",
    "RubricCriteria",
    "Student",
    "Submission",
    "SubmissionStatus",
    "SubmissionType",
    "Task",
    "TaskState",
    "Team",
    "Urgency",
]
