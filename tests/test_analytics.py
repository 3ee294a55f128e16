from datetime import timedelta

from conftest import NOW, make_student, make_team
from pbl_engine.models import ActivityAction, Rubric, SubmissionStatus, SubmissionType, Team
from pbl_engine.services.analytics import (
    all_student_analytics,
    class_metrics,
    contribution_score,
    detect_stuck_students,
    last_active,
    student_analytics,
    submission_quality,
    time_spent,
)
from pbl_engine.services.progress import record_activity, review_submission, submit_evidence


def _with_rubric(team: Team, max_score: float = 10) -> Team:
    phase = team.project.phases[0]
    rubric = Rubric(id="r1", max_score=max_score)
    tasks = tuple(task.model_copy(update={"rubric": rubric}) for task in phase.tasks)
    phases = (phase.model_copy(update={"tasks": tasks}),) + team.project.phases[1:]
    return team.model_copy(update={"project": team.project.model_copy(update={"phases": phases})})


def _pending(team: Team, task_id: str = "t0-0") -> Team:
    return submit_evidence(team, "p0", task_id, SubmissionType.GITHUB, "https://github.com/a/b", NOW)


def test_time_spent_needs_two_entries() -> None:
    assert time_spent(make_student("s1", 70)) == 0
    assert time_spent(make_student("s1", 70, log_days_ago=(1,))) == 0
    assert time_spent(make_student("s1", 70, log_days_ago=(2, 1))) == 24 * 60


def test_out_of_order_log_uses_earliest_and_latest_entry() -> None:
    student = record_activity(
        make_student("s1", 70, log_days_ago=(2, 1)),
        ActivityAction.TASK_STARTED,
        NOW - timedelta(days=3),
    )

    assert time_spent(student) == 2 * 24 * 60
    assert last_active(student) == NOW - timedelta(days=1)


def test_contribution_score_caps_and_defaults() -> None:
    student = make_student("s1", 70, log_days_ago=(3, 2, 1))
    assert contribution_score(student, make_team(2, 2)) == 75
    assert contribution_score(student, make_team(2)) == 100
    assert contribution_score(student, make_team()) == 0
    assert contribution_score(student, make_team(0)) == 0


def test_submission_quality_uses_scored_rubric_tasks() -> None:
    team = _with_rubric(make_team(3))
    for task_id, score in (("t0-0", 8), ("t0-1", 5)):
        team = _pending(team, task_id)
        team = review_submission(team, "p0", task_id, SubmissionStatus.APPROVED, NOW, rubric_score=score)
    # 只有反馈没有分数的任务不计入
    team = _pending(team, "t0-2")
    team = review_submission(team, "p0", "t0-2", SubmissionStatus.NEEDS_REVISION, NOW)

    assert submission_quality(team) == 65


def test_score_above_rubric_max_counts_as_full_marks() -> None:
    student = make_student("s1", 70)
    team = _with_rubric(make_team(2, members=[student]))
    team = review_submission(_pending(team), "p0", "t0-0", SubmissionStatus.APPROVED, NOW, rubric_score=15)

    assert submission_quality(team) == 100
    assert student_analytics(student, team, NOW).submission_quality == 100
    assert class_metrics([team], NOW).average_submission_quality == 100


def test_submission_quality_defaults_to_zero() -> None:
    assert submission_quality(make_team()) == 0
    scored_without_rubric = review_submission(
        _pending(make_team(1)), "p0", "t0-0", SubmissionStatus.APPROVED, NOW, rubric_score=9
    )
    assert submission_quality(scored_without_rubric) == 0


def test_student_analytics_counts_team_tasks() -> None:
    student = make_student("s1", 70, log_days_ago=(5, 4))
    team = make_team(3, members=[student])
    phase = team.project.phases[0]
    overdue = phase.tasks[2].model_copy(update={"deadline": NOW - timedelta(days=1)})
    project = team.project.model_copy(
        update={"phases": (phase.model_copy(update={"tasks": phase.tasks[:2] + (overdue,)}),)}
    )
    team = _pending(team.model_copy(update={"project": project}))

    analytics = student_analytics(student, team, NOW)
    assert analytics.student_id == "s1"
    assert analytics.team_id == "group-0"
    assert analytics.tasks_completed == 2
    assert analytics.pending_tasks == 1
    assert analytics.overdue_tasks_count == 1
    assert analytics.last_active == NOW - timedelta(days=4)
    assert analytics.submission_quality == 0


def test_last_active_falls_back_to_join_time() -> None:
    student = make_student("s1", 70, joined_days_ago=10)
    analytics = student_analytics(student, make_team(1, members=[student]), NOW)
    assert analytics.last_active == NOW - timedelta(days=10)


def test_stuck_detection_threshold() -> None:
    idle = make_student("idle", 70, log_days_ago=(4,))
    recent = make_student("recent", 70, log_days_ago=(2,))
    team = _pending(make_team(2, members=[idle, recent]))

    stuck = detect_stuck_students([team], NOW, days_threshold=3)
    assert [a.student_id for a in stuck] == ["idle"]


def test_no_pending_work_means_not_stuck() -> None:
    idle = make_student("idle", 70, log_days_ago=(30,))
    assert detect_stuck_students([make_team(2, members=[idle])], NOW) == []


def test_class_metrics_aggregate() -> None:
    a = make_student("a", 70, log_days_ago=(5, 4))
    b = make_student("b", 70, log_days_ago=(1,))
    team_a = _pending(make_team(2, members=[a]))
    team_b = make_team(2, members=[b]).model_copy(update={"id": "group-1", "progress": 50})

    metrics = class_metrics([team_a, team_b], NOW)
    assert metrics.total_students == 2
    assert metrics.total_teams == 2
    assert metrics.average_progress == 25
    assert metrics.total_tasks_completed == 3
    assert metrics.stuck_students_count == 1
    assert metrics.submission_stats.pending == 1
    assert metrics.submission_stats.approved == 0


def test_class_metrics_empty_class() -> None:
    metrics = class_metrics([], NOW)
    assert metrics.total_students == 0
    assert metrics.average_progress == 0
    assert metrics.average_submission_quality == 0
    assert all_student_analytics([], NOW) == []
