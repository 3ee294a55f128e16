"""学生统计数据的 CSV 导出。"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Sequence

from pbl_engine.models import Team
from pbl_engine.services.analytics import student_analytics

CSV_HEADER = (
    "Student ID",
    "Student Name",
    "Group",
    "Tasks Completed",
    "Time Spent (min)",
    "Submission Quality",
    "Contribution Score",
    "Pending Tasks",
    "Overdue Tasks",
    "Last Active",
)


def export_to_csv(teams: Sequence[Team], now: datetime) -> str:
    """每名学生一行；最后活动时间只保留日期（ISO 格式）。"""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for team in teams:
        for student in team.members:
            analytics = student_analytics(student, team, now)
            writer.writerow(
                (
                    analytics.student_id,
                    student.name,
                    team.name,
                    analytics.tasks_completed,
                    analytics.time_spent,
                    analytics.submission_quality,
                    analytics.contribution_score,
                    analytics.pending_tasks,
                    analytics.overdue_tasks_count,
                    analytics.last_active.date().isoformat(),
                )
            )
    return buffer.getvalue()
