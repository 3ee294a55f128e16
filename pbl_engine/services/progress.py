"""Progress State Machine.

任务状态：not_started -> pending_review -> completed，或被退回到
needs_revision / rejected 后重新提交。引擎直接执行的转换有三类：

- ``toggle_task``：教师切换完成标记；有提交时提交状态同步为
  approved / pending。
- ``submit_evidence``：学生提交证据，任务进入待审。
- ``review_submission``：教师审核，通过 / 需修改 / 驳回。

完成标记变化后，在同一个快照内重新计算所在阶段的状态、解锁下一
阶段并更新小组进度。未知的阶段或任务 ID 不报错，直接返回原快照。
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterator, Optional

from pbl_engine.models import (
    ActivityAction,
    ActivityLog,
    Feedback,
    Phase,
    PhaseStatus,
    Project,
    Student,
    Submission,
    SubmissionStatus,
    SubmissionType,
    Task,
    Team,
)
from pbl_engine.utils.numbers import percentage

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = frozenset(
    {SubmissionStatus.APPROVED, SubmissionStatus.NEEDS_REVISION, SubmissionStatus.REJECTED}
)
RETURNED_STATUSES = frozenset({SubmissionStatus.NEEDS_REVISION, SubmissionStatus.REJECTED})

TaskTransform = Callable[[Task], Task]


def _millis(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def iter_tasks(project: Optional[Project]) -> Iterator[Task]:
    if project is None:
        return iter(())
    return project.iter_tasks()


def compute_progress(project: Optional[Project]) -> int:
    """全项目（所有阶段）的完成百分比。"""

    tasks = list(iter_tasks(project))
    return percentage(sum(1 for task in tasks if task.completed), len(tasks))


def find_task(team: Team, phase_id: str, task_id: str) -> Optional[Task]:
    if team.project is None:
        return None
    for phase in team.project.phases:
        if phase.id != phase_id:
            continue
        for task in phase.tasks:
            if task.id == task_id:
                return task
    return None


def cascade_phases(phases: tuple[Phase, ...], phase_index: int) -> tuple[Phase, ...]:
    """重新计算指定阶段的状态，完成时解锁紧随其后的 locked 阶段。"""

    # 未全部完成即为 active，锁定阶段内的任务被切换时该阶段也随之解锁
    phase = phases[phase_index]
    all_complete = all(task.completed for task in phase.tasks)
    status = PhaseStatus.COMPLETED if all_complete else PhaseStatus.ACTIVE

    updated = list(phases)
    if phase.status != status:
        updated[phase_index] = phase.model_copy(update={"status": status})

    next_index = phase_index + 1
    if status == PhaseStatus.COMPLETED and next_index < len(updated):
        next_phase = updated[next_index]
        if next_phase.status == PhaseStatus.LOCKED:
            updated[next_index] = next_phase.model_copy(update={"status": PhaseStatus.ACTIVE})
            logger.info("phase_unlocked phase_id=%s", next_phase.id)
    return tuple(updated)


def _update_task(
    team: Team,
    phase_id: str,
    task_id: str,
    transform: TaskTransform,
    cascade: bool,
) -> Team:
    project = team.project
    if project is None:
        logger.debug("task_update_skipped team_id=%s reason=no_project", team.id)
        return team

    for phase_index, phase in enumerate(project.phases):
        if phase.id != phase_id:
            continue
        for task_index, task in enumerate(phase.tasks):
            if task.id != task_id:
                continue
            new_task = transform(task)
            if new_task is task:
                return team

            tasks = phase.tasks[:task_index] + (new_task,) + phase.tasks[task_index + 1:]
            phases = (
                project.phases[:phase_index]
                + (phase.model_copy(update={"tasks": tasks}),)
                + project.phases[phase_index + 1:]
            )
            if cascade:
                phases = cascade_phases(phases, phase_index)
            new_project = project.model_copy(update={"phases": phases})
            return team.model_copy(
                update={"project": new_project, "progress": compute_progress(new_project)}
            )

    logger.debug(
        "task_update_skipped team_id=%s phase_id=%s task_id=%s reason=not_found",
        team.id,
        phase_id,
        task_id,
    )
    return team


def toggle_task(
    team: Team, phase_id: str, task_id: str, now: Optional[datetime] = None
) -> Team:
    """切换任务完成标记，完成与审核通过视为同一个操作。"""

    def transform(task: Task) -> Task:
        completed = not task.completed
        update: dict = {"completed": completed}
        if task.submission is not None:
            if completed:
                reviewed_at = now or task.submission.reviewed_at
                status = SubmissionStatus.APPROVED
            else:
                reviewed_at = None
                status = SubmissionStatus.PENDING
            update["submission"] = task.submission.model_copy(
                update={"status": status, "reviewed_at": reviewed_at}
            )
        return task.model_copy(update=update)

    return _update_task(team, phase_id, task_id, transform, cascade=True)


def submit_evidence(
    team: Team,
    phase_id: str,
    task_id: str,
    submission_type: SubmissionType,
    url: str,
    now: datetime,
    submission_id: Optional[str] = None,
) -> Team:
    """为任务挂上待审提交；已完成的任务保持不变。"""

    def transform(task: Task) -> Task:
        if task.completed:
            return task
        previous = task.submission
        revision_count = 0
        if previous is not None:
            revision_count = previous.revision_count
            if previous.status in RETURNED_STATUSES:
                revision_count += 1
        submission = Submission(
            id=submission_id or f"sub-{_millis(now)}",
            type=submission_type,
            url=url,
            status=SubmissionStatus.PENDING,
            submitted_at=now,
            revision_count=revision_count,
        )
        return task.model_copy(update={"submission": submission})

    return _update_task(team, phase_id, task_id, transform, cascade=False)


def review_submission(
    team: Team,
    phase_id: str,
    task_id: str,
    decision: SubmissionStatus,
    now: datetime,
    comment: str = "",
    rubric_score: Optional[float] = None,
    feedback_id: Optional[str] = None,
) -> Team:
    """教师审核：approved 完成任务，needs_revision / rejected 退回任务。"""

    decision = SubmissionStatus(decision)
    if decision not in REVIEW_DECISIONS:
        raise ValueError(f"unsupported review decision: {decision.value}")

    def transform(task: Task) -> Task:
        if task.submission is None:
            return task
        feedback = Feedback(
            id=feedback_id or f"fb-{_millis(now)}",
            teacher_comment=comment,
            rubric_score=rubric_score,
            created_at=now,
        )
        submission = task.submission.model_copy(
            update={"status": decision, "feedback": feedback, "reviewed_at": now}
        )
        return task.model_copy(
            update={
                "completed": decision == SubmissionStatus.APPROVED,
                "submission": submission,
            }
        )

    return _update_task(team, phase_id, task_id, transform, cascade=True)


def record_activity(
    student: Student,
    action: ActivityAction,
    now: datetime,
    task_id: Optional[str] = None,
    phase_id: Optional[str] = None,
    details: Optional[str] = None,
) -> Student:
    """在活动日志末尾追加一条记录，返回新的学生快照。"""

    entry = ActivityLog(
        id=f"{student.id}-log-{len(student.activity_log) + 1}",
        timestamp=now,
        action=action,
        task_id=task_id,
        phase_id=phase_id,
        details=details,
    )
    return student.model_copy(update={"activity_log": student.activity_log + (entry,)})
