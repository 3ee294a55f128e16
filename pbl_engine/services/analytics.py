"""Analytics Aggregator：由学生与小组快照派生统计指标。

所有指标都可随时重算，不单独保存。缺失的项目、量规或反馈一律
视为"没有贡献"，对应指标取 0。
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Sequence

from pbl_engine.models import ActivityAction, Student, SubmissionStatus, Team
from pbl_engine.schemas.analytics import ClassMetrics, StudentAnalytics, SubmissionStats
from pbl_engine.services.deadlines import is_overdue
from pbl_engine.services.progress import iter_tasks
from pbl_engine.utils.numbers import percentage, round_half_up

DEFAULT_STUCK_DAYS = 3


def completed_task_events(student: Student) -> int:
    return sum(1 for entry in student.activity_log if entry.action == ActivityAction.TASK_COMPLETED)


def time_spent(student: Student) -> int:
    """最早与最晚活动之间的分钟数；少于两条记录时为 0。

    日志时间不保证单调。
    """

    timestamps = [entry.timestamp for entry in student.activity_log]
    if len(timestamps) < 2:
        return 0
    return int((max(timestamps) - min(timestamps)) // timedelta(minutes=1))


def contribution_score(student: Student, team: Team) -> int:
    total_tasks = sum(1 for _ in iter_tasks(team.project))
    return min(100, percentage(completed_task_events(student), total_tasks))


def submission_quality(team: Team) -> int:
    """有量规且已评分的任务的平均得分率（0-100）。"""

    ratios = []
    for task in iter_tasks(team.project):
        if task.rubric is None or task.rubric.max_score <= 0:
            continue
        if task.submission is None or task.submission.feedback is None:
            continue
        score = task.submission.feedback.rubric_score
        if score is None:
            continue
        # 超出量规满分的得分按满分计
        ratios.append(min(100, 100 * score / task.rubric.max_score))
    if not ratios:
        return 0
    return round_half_up(sum(ratios) / len(ratios))


def pending_tasks(team: Team) -> int:
    return sum(
        1
        for task in iter_tasks(team.project)
        if not task.completed
        and task.submission is not None
        and task.submission.status == SubmissionStatus.PENDING
    )


def overdue_tasks_count(team: Team, now: datetime) -> int:
    return sum(
        1 for task in iter_tasks(team.project) if not task.completed and is_overdue(task.deadline, now)
    )


def last_active(student: Student) -> datetime:
    if student.activity_log:
        return max(entry.timestamp for entry in student.activity_log)
    return student.joined_at


def student_analytics(student: Student, team: Team, now: datetime) -> StudentAnalytics:
    return StudentAnalytics(
        student_id=student.id,
        team_id=team.id,
        tasks_completed=completed_task_events(student),
        time_spent=time_spent(student),
        submission_quality=submission_quality(team),
        contribution_score=contribution_score(student, team),
        last_active=last_active(student),
        pending_tasks=pending_tasks(team),
        overdue_tasks_count=overdue_tasks_count(team, now),
    )


def all_student_analytics(teams: Iterable[Team], now: datetime) -> list[StudentAnalytics]:
    return [
        student_analytics(student, team, now) for team in teams for student in team.members
    ]


def is_stuck(
    analytics: StudentAnalytics, now: datetime, days_threshold: float = DEFAULT_STUCK_DAYS
) -> bool:
    """有待审任务，且距最后一次活动超过阈值天数。"""

    idle = now - analytics.last_active
    return analytics.pending_tasks > 0 and idle > timedelta(days=days_threshold)


def detect_stuck_students(
    teams: Iterable[Team], now: datetime, days_threshold: float = DEFAULT_STUCK_DAYS
) -> list[StudentAnalytics]:
    return [
        analytics
        for analytics in all_student_analytics(teams, now)
        if is_stuck(analytics, now, days_threshold)
    ]


def submission_stats(teams: Iterable[Team]) -> SubmissionStats:
    counts = {status: 0 for status in SubmissionStatus}
    for team in teams:
        for task in iter_tasks(team.project):
            if task.submission is not None:
                counts[task.submission.status] += 1
    return SubmissionStats(
        pending=counts[SubmissionStatus.PENDING],
        approved=counts[SubmissionStatus.APPROVED],
        rejected=counts[SubmissionStatus.REJECTED],
        needs_revision=counts[SubmissionStatus.NEEDS_REVISION],
    )


def class_metrics(
    teams: Sequence[Team], now: datetime, days_threshold: float = DEFAULT_STUCK_DAYS
) -> ClassMetrics:
    analytics = all_student_analytics(teams, now)
    total_students = len(analytics)
    total_teams = len(teams)

    average_progress = (
        round_half_up(sum(team.progress for team in teams) / total_teams) if total_teams else 0
    )
    average_quality = (
        round_half_up(sum(a.submission_quality for a in analytics) / total_students)
        if total_students
        else 0
    )

    return ClassMetrics(
        total_students=total_students,
        total_teams=total_teams,
        average_progress=average_progress,
        total_tasks_completed=sum(a.tasks_completed for a in analytics),
        average_submission_quality=average_quality,
        stuck_students_count=sum(1 for a in analytics if is_stuck(a, now, days_threshold)),
        submission_stats=submission_stats(teams),
    )
