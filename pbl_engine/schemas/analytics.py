"""Derived analytics contracts.

These models are never stored; they are always recomputed from the Student
and Team snapshots they describe.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class StudentAnalytics(BaseModel):
    """Per-student metrics for the teacher dashboard."""

    student_id: str
    team_id: str
    tasks_completed: int = 0
    time_spent: int = Field(default=0, description="minutes")
    submission_quality: int = Field(default=0, ge=0, le=100)
    contribution_score: int = Field(default=0, ge=0, le=100)
    last_active: datetime
    pending_tasks: int = 0
    overdue_tasks_count: int = 0


class SubmissionStats(BaseModel):
    """Submission counts grouped by review status."""

    pending: int = 0
    approved: int = 0
    rejected: int = 0
    needs_revision: int = 0


class ClassMetrics(BaseModel):
    """Class-wide summary across all teams."""

    total_students: int = 0
    total_teams: int = 0
    average_progress: int = 0
    total_tasks_completed: int = 0
    average_submission_quality: int = 0
    stuck_students_count: int = 0
    submission_stats: SubmissionStats = Field(default_factory=SubmissionStats)
