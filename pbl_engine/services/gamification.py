"""Gamification Engine：由进度快照派生经验值与徽章。

徽章只增不减：即使条件之后不再满足（例如取消了某个任务的完成
标记），已经获得的徽章也会保留。
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence

from pbl_engine.models import Badge, BADGES_BY_ID, PhaseStatus, Team
from pbl_engine.models.badge import CHAMPION, FIRST_STEP, HALFWAY, MOMENTUM, PHASE_MASTER

logger = logging.getLogger(__name__)

XP_PER_TASK = 50
XP_PER_PHASE = 500


class BadgeAward(NamedTuple):
    badges: tuple[Badge, ...]
    new_badges: tuple[Badge, ...]

    @property
    def latest(self) -> Optional[Badge]:
        """最近追加的新徽章，用于一次性通知。"""

        return self.new_badges[-1] if self.new_badges else None


def compute_xp(team: Team, xp_per_task: int = XP_PER_TASK, xp_per_phase: int = XP_PER_PHASE) -> int:
    if team.project is None:
        return 0
    xp = 0
    for phase in team.project.phases:
        if phase.status == PhaseStatus.COMPLETED:
            xp += xp_per_phase
        xp += sum(1 for task in phase.tasks if task.completed) * xp_per_task
    return xp


def qualifying_badge_ids(team: Team) -> list[str]:
    """按目录顺序返回当前快照满足条件的徽章 ID。"""

    if team.project is None:
        return []
    phases = team.project.phases
    tasks = [task for phase in phases for task in phase.tasks]
    completed_tasks = sum(1 for task in tasks if task.completed)
    completed_phases = sum(1 for phase in phases if phase.status == PhaseStatus.COMPLETED)
    fraction = completed_tasks / max(len(tasks), 1)

    earned = []
    if completed_tasks >= 1:
        earned.append(FIRST_STEP)
    if completed_tasks >= 3:
        earned.append(MOMENTUM)
    if completed_phases >= 1:
        earned.append(PHASE_MASTER)
    if fraction >= 0.5:
        earned.append(HALFWAY)
    if fraction >= 1:
        earned.append(CHAMPION)
    return earned


def compute_badges(team: Team, previous_badges: Sequence[Badge]) -> BadgeAward:
    existing = {badge.id for badge in previous_badges}
    new_badges = tuple(
        BADGES_BY_ID[badge_id] for badge_id in qualifying_badge_ids(team) if badge_id not in existing
    )
    for badge in new_badges:
        logger.info("badge_earned team_id=%s badge_id=%s", team.id, badge.id)
    return BadgeAward(badges=tuple(previous_badges) + new_badges, new_badges=new_badges)


def apply_gamification(
    team: Team, xp_per_task: int = XP_PER_TASK, xp_per_phase: int = XP_PER_PHASE
) -> tuple[Team, Optional[Badge]]:
    """重新计算经验值和徽章，返回新快照以及最近获得的徽章。"""

    award = compute_badges(team, team.badges)
    updated = team.model_copy(
        update={
            "xp": compute_xp(team, xp_per_task=xp_per_task, xp_per_phase=xp_per_phase),
            "badges": award.badges,
        }
    )
    return updated, award.latest
