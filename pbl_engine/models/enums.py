"""领域枚举定义 - 阶段状态、提交状态、活动类型等。"""

import enum


class ProjectStatus(str, enum.Enum):
    """小组项目状态。"""
    PENDING_TOPIC = "pending_topic"  # 已分组，等待分配主题
    ACTIVE = "active"                # 项目进行中


class PhaseStatus(str, enum.Enum):
    """阶段状态机。

    locked -> active -> completed；进入 active 后不会再回到 locked。
    """
    LOCKED = "locked"
    ACTIVE = "active"
    COMPLETED = "completed"


class SubmissionType(str, enum.Enum):
    """提交证据类型。"""
    GITHUB = "github"
    IMAGE = "image"


class SubmissionStatus(str, enum.Enum):
    """提交审核状态。"""
    PENDING = "pending"                  # 待审核
    APPROVED = "approved"                # 已通过
    REJECTED = "rejected"                # 已驳回
    NEEDS_REVISION = "needs_revision"    # 需修改


class TaskState(str, enum.Enum):
    """任务的派生状态，由 completed 标记与提交状态共同决定。"""
    NOT_STARTED = "not_started"
    PENDING_REVIEW = "pending_review"
    COMPLETED = "completed"
    NEEDS_REVISION = "needs_revision"
    REJECTED = "rejected"


class ActivityAction(str, enum.Enum):
    """学生活动日志的事件类型。"""
    TASK_STARTED = "task_started"
    TASK_COMPLETED = "task_completed"
    SUBMISSION_MADE = "submission_made"
    PHASE_UNLOCKED = "phase_unlocked"


class Urgency(str, enum.Enum):
    """截止时间紧迫程度。"""
    NONE = "none"        # 无截止时间
    OVERDUE = "overdue"  # 已逾期
    HIGH = "high"        # 不足 1 天
    MEDIUM = "medium"    # 1-3 天
    LOW = "low"          # 3 天以上
