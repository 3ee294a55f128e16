"""班级快照流水线。

把状态机、游戏化两个步骤组合成一次原子替换：调用方拿到的小组
快照里，阶段级联、进度、经验值和徽章总是相互一致的。
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, NamedTuple, Optional, Sequence

from pbl_engine.models import ActivityAction, Badge, Student, SubmissionStatus, SubmissionType, Team
from pbl_engine.services import progress
from pbl_engine.services.balancer import form_balanced_teams
from pbl_engine.services.gamification import XP_PER_PHASE, XP_PER_TASK, apply_gamification
from pbl_engine.services.projects import assign_project, build_project_template

logger = logging.getLogger(__name__)


class TeamUpdate(NamedTuple):
    team: Team
    new_badge: Optional[Badge] = None


class ClassUpdate(NamedTuple):
    teams: list[Team]
    new_badge: Optional[Badge] = None


def setup_class(students: Sequence[Student], team_size: int = 4) -> list[Team]:
    return form_balanced_teams(students, team_size)


def launch_project(teams: Sequence[Team], topic: str) -> list[Team]:
    return assign_project(teams, build_project_template(topic))


def _finalize(
    before: Team, after: Team, xp_per_task: int, xp_per_phase: int
) -> TeamUpdate:
    if after is before:
        return TeamUpdate(before)
    team, latest = apply_gamification(after, xp_per_task=xp_per_task, xp_per_phase=xp_per_phase)
    return TeamUpdate(team, latest)


def apply_task_toggle(
    team: Team,
    phase_id: str,
    task_id: str,
    now: Optional[datetime] = None,
    xp_per_task: int = XP_PER_TASK,
    xp_per_phase: int = XP_PER_PHASE,
) -> TeamUpdate:
    toggled = progress.toggle_task(team, phase_id, task_id, now=now)
    return _finalize(team, toggled, xp_per_task, xp_per_phase)


def apply_review(
    team: Team,
    phase_id: str,
    task_id: str,
    decision: SubmissionStatus,
    now: datetime,
    comment: str = "",
    rubric_score: Optional[float] = None,
    xp_per_task: int = XP_PER_TASK,
    xp_per_phase: int = XP_PER_PHASE,
) -> TeamUpdate:
    reviewed = progress.review_submission(
        team, phase_id, task_id, decision, now, comment=comment, rubric_score=rubric_score
    )
    return _finalize(team, reviewed, xp_per_task, xp_per_phase)


def record_member_activity(
    team: Team,
    student_id: str,
    action: ActivityAction,
    now: datetime,
    task_id: Optional[str] = None,
    phase_id: Optional[str] = None,
    details: Optional[str] = None,
) -> Team:
    """替换指定成员的学生快照；成员集合本身不变。"""

    for index, member in enumerate(team.members):
        if member.id != student_id:
            continue
        updated = progress.record_activity(
            member, action, now, task_id=task_id, phase_id=phase_id, details=details
        )
        members = team.members[:index] + (updated,) + team.members[index + 1:]
        return team.model_copy(update={"members": members})
    return team


def apply_submission(
    team: Team,
    phase_id: str,
    task_id: str,
    submission_type: SubmissionType,
    url: str,
    now: datetime,
    student_id: Optional[str] = None,
) -> TeamUpdate:
    """挂上提交，并在提交人的活动日志中记录 submission_made。"""

    submitted = progress.submit_evidence(team, phase_id, task_id, submission_type, url, now)
    if submitted is team:
        return TeamUpdate(team)
    if student_id is not None:
        submitted = record_member_activity(
            submitted,
            student_id,
            ActivityAction.SUBMISSION_MADE,
            now,
            task_id=task_id,
            phase_id=phase_id,
        )
    return TeamUpdate(submitted)


def update_team(
    teams: Sequence[Team], team_id: str, operation: Callable[[Team], TeamUpdate]
) -> ClassUpdate:
    """对班级中的一个小组执行操作；未知小组 ID 时原样返回。"""

    for index, team in enumerate(teams):
        if team.id != team_id:
            continue
        result = operation(team)
        updated = list(teams)
        updated[index] = result.team
        return ClassUpdate(updated, result.new_badge)

    logger.debug("team_update_skipped team_id=%s reason=not_found", team_id)
    return ClassUpdate(list(teams))
