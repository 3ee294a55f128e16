"""Team Balancer：按能力平均分做蛇形分组。

学生先按 ``average_score`` 降序排列（同分保持名单顺序），再以
0, 1, ..., n-1, n-1, ..., 1, 0, 0, 1, ... 的顺序依次分配，使每一轮
往返中各组都拿到一个高分和一个低分。
"""

from __future__ import annotations

import logging
import math
import string
from typing import Sequence

from pbl_engine.models import ProjectStatus, Student, Team

logger = logging.getLogger(__name__)


class InvalidTeamSizeError(ValueError):
    """小组人数必须为正整数。"""


def team_name(index: int) -> str:
    """Team A ... Team Z，之后循环并追加轮次：Team A2、Team B2 ..."""

    letters = string.ascii_uppercase
    cycle, offset = divmod(index, len(letters))
    suffix = str(cycle + 1) if cycle else ""
    return f"Team {letters[offset]}{suffix}"


def snake_order(count: int, number_of_groups: int) -> list[int]:
    """返回前 ``count`` 次分配对应的小组下标。"""

    order: list[int] = []
    group_index = 0
    direction = 1
    for _ in range(count):
        order.append(group_index)
        group_index += direction
        # 到达两端时停在边界并反向，而不是回绕
        if group_index >= number_of_groups:
            group_index = number_of_groups - 1
            direction = -1
        elif group_index < 0:
            group_index = 0
            direction = 1
    return order


def form_balanced_teams(students: Sequence[Student], team_size: int = 4) -> list[Team]:
    if team_size <= 0:
        raise InvalidTeamSizeError(f"team_size must be positive, got {team_size}")

    number_of_groups = math.ceil(len(students) / team_size)
    # sorted 是稳定排序，reverse=True 时同分学生仍保持原顺序
    ranked = sorted(students, key=lambda student: student.average_score, reverse=True)

    buckets: list[list[Student]] = [[] for _ in range(number_of_groups)]
    for student, group_index in zip(ranked, snake_order(len(ranked), number_of_groups)):
        buckets[group_index].append(student)

    teams = [
        Team(
            id=f"group-{index}",
            name=team_name(index),
            members=tuple(members),
            project_status=ProjectStatus.PENDING_TOPIC,
        )
        for index, members in enumerate(buckets)
    ]
    logger.info(
        "teams_formed students=%s team_size=%s teams=%s", len(students), team_size, len(teams)
    )
    return teams


def team_score_totals(teams: Sequence[Team]) -> dict[str, float]:
    """各组成员平均分之和，用于检查分组均衡程度。"""

    return {
        team.id: round(sum(member.average_score for member in team.members), 1) for team in teams
    }
