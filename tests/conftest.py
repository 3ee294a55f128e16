import pytest
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from pbl_engine.dependencies import get_now
from pbl_engine.main import app
from pbl_engine.models import (
    ActivityAction,
    ActivityLog,
    MasteryScores,
    Phase,
    PhaseStatus,
    Project,
    ProjectStatus,
    Student,
    Task,
    Team,
)

# Fixed clock so deadline and staleness checks are deterministic
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_student(student_id: str, average: float, log_days_ago=(), joined_days_ago: float = 30) -> Student:
    scores = MasteryScores(math=average, science=average, creativity=average, leadership=average)
    student = Student.create(
        id=student_id,
        name=f"Student {student_id}",
        scores=scores,
        joined_at=NOW - timedelta(days=joined_days_ago),
    )
    log = tuple(
        ActivityLog(
            id=f"{student_id}-{i}",
            timestamp=NOW - timedelta(days=days),
            action=ActivityAction.TASK_COMPLETED,
        )
        for i, days in enumerate(log_days_ago)
    )
    return student.model_copy(update={"activity_log": log})


def make_project(*task_counts: int, first_status: PhaseStatus = PhaseStatus.ACTIVE) -> Project:
    phases = tuple(
        Phase(
            id=f"p{p}",
            title=f"Phase {p}",
            status=first_status if p == 0 else PhaseStatus.LOCKED,
            tasks=tuple(Task(id=f"t{p}-{t}", title=f"Task {p}-{t}") for t in range(count)),
        )
        for p, count in enumerate(task_counts)
    )
    return Project(topic="Water", driving_question="How can we save water?", phases=phases)


def make_team(*task_counts: int, members=()) -> Team:
    return Team(
        id="group-0",
        name="Team A",
        members=tuple(members),
        project=make_project(*task_counts) if task_counts else None,
        project_status=ProjectStatus.ACTIVE if task_counts else ProjectStatus.PENDING_TOPIC,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(scope="function")
def client():
    """
    Create a TestClient with the clock dependency pinned to NOW.
    """
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
