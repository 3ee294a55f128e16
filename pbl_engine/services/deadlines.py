"""截止时间计算：紧迫程度、倒计时文案、逾期标记。

所有函数都接收调用方提供的 ``now``，模块内部不读取系统时钟。
任务和阶段都可以作为带截止时间的对象传入。
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from pbl_engine.models import Task, Team, Urgency

DAY = timedelta(days=1)
HOUR = timedelta(hours=1)
MINUTE = timedelta(minutes=1)

HIGH_URGENCY_DAYS = 1
MEDIUM_URGENCY_DAYS = 3

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def is_overdue(deadline: Optional[datetime], now: datetime) -> bool:
    if deadline is None:
        return False
    return now > deadline


def urgency_level(deadline: Optional[datetime], now: datetime) -> Urgency:
    """按剩余时间分级：<1 天 high，<3 天 medium，其余 low。"""

    if deadline is None:
        return Urgency.NONE
    diff = deadline - now
    if diff < timedelta(0):
        return Urgency.OVERDUE
    if diff < HIGH_URGENCY_DAYS * DAY:
        return Urgency.HIGH
    if diff < MEDIUM_URGENCY_DAYS * DAY:
        return Urgency.MEDIUM
    return Urgency.LOW


def time_remaining(deadline: Optional[datetime], now: datetime) -> str:
    """倒计时文案，例如 ``"2 days, 5 hours"`` 或 ``"Overdue by 3 days"``。"""

    if deadline is None:
        return "No deadline"

    diff = deadline - now
    if diff < timedelta(0):
        past = -diff
        days_past = past // DAY
        hours_past = (past % DAY) // HOUR
        if days_past > 0:
            return f"Overdue by {_plural(days_past, 'day')}"
        if hours_past > 0:
            return f"Overdue by {_plural(hours_past, 'hour')}"
        return "Overdue"

    days = diff // DAY
    hours = (diff % DAY) // HOUR
    minutes = (diff % HOUR) // MINUTE
    if days > 0:
        return f"{_plural(days, 'day')}, {_plural(hours, 'hour')}"
    if hours > 0:
        return f"{_plural(hours, 'hour')}, {minutes} min"
    return _plural(minutes, "minute")


def _clock(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_deadline(deadline: Optional[datetime], now: datetime) -> str:
    """面向展示的截止时间，今天/明天使用相对说法。"""

    if deadline is None:
        return "No deadline set"

    if deadline.tzinfo is not None and now.tzinfo is not None:
        deadline = deadline.astimezone(now.tzinfo)

    if deadline.date() == now.date():
        return f"Today at {_clock(deadline)}"
    if deadline.date() == (now + DAY).date():
        return f"Tomorrow at {_clock(deadline)}"

    label = f"{_MONTHS[deadline.month - 1]} {deadline.day}"
    if deadline.year != now.year:
        label = f"{label}, {deadline.year}"
    return f"{label}, {_clock(deadline)}"


def upcoming_deadlines(
    tasks: Iterable[Task], now: datetime, days_ahead: int = 7
) -> list[Task]:
    """截止时间落在 (now, now + days_ahead] 内的任务，按截止时间升序。"""

    horizon = now + timedelta(days=days_ahead)
    upcoming = [
        task for task in tasks if task.deadline is not None and now < task.deadline <= horizon
    ]
    return sorted(upcoming, key=lambda task: task.deadline)


def overdue_tasks(tasks: Iterable[Task], now: datetime) -> list[Task]:
    return [task for task in tasks if is_overdue(task.deadline, now) and not task.completed]


def refresh_overdue_flags(tasks: Sequence[Task], now: datetime) -> tuple[Task, ...]:
    """返回重新计算 ``is_overdue`` 后的新任务序列，未变化的任务原样复用。"""

    refreshed = []
    for task in tasks:
        flag = is_overdue(task.deadline, now) and not task.completed
        refreshed.append(task if task.is_overdue == flag else task.model_copy(update={"is_overdue": flag}))
    return tuple(refreshed)


def refresh_team_deadlines(team: Team, now: datetime) -> Team:
    if team.project is None:
        return team
    phases = tuple(
        phase.model_copy(update={"tasks": refresh_overdue_flags(phase.tasks, now)})
        for phase in team.project.phases
    )
    return team.model_copy(update={"project": team.project.model_copy(update={"phases": phases})})
