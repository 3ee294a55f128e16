from datetime import timedelta

from conftest import NOW, make_student, make_team
from pbl_engine.models import SubmissionType
from pbl_engine.services.progress import submit_evidence


def _dump(items):
    return [item.model_dump(mode="json") for item in items]


def test_health(client) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_balance_teams(client) -> None:
    students = [make_student(f"s{i}", 50 + 10 * i) for i in range(4)]
    res = client.post("/api/teams/balance", json={"students": _dump(students), "team_size": 2})

    assert res.status_code == 200
    teams = res.json()
    assert [t["name"] for t in teams] == ["Team A", "Team B"]
    assert [[m["id"] for m in t["members"]] for t in teams] == [["s3", "s0"], ["s2", "s1"]]


def test_balance_rejects_non_positive_team_size(client) -> None:
    res = client.post("/api/teams/balance", json={"students": [], "team_size": 0})
    assert res.status_code == 400


def test_assign_project(client) -> None:
    teams = [make_team()]
    res = client.post("/api/teams/project", json={"teams": _dump(teams), "topic": "Recycling"})

    assert res.status_code == 200
    team = res.json()[0]
    assert team["project_status"] == "active"
    assert team["project"]["topic"] == "Recycling"
    assert len(team["project"]["phases"]) == 4


def test_assign_blank_topic_is_bad_request(client) -> None:
    res = client.post("/api/teams/project", json={"teams": _dump([make_team()]), "topic": " "})
    assert res.status_code == 400


def test_toggle_task_returns_new_badge(client) -> None:
    payload = {"teams": _dump([make_team(2)]), "team_id": "group-0", "phase_id": "p0", "task_id": "t0-0"}
    res = client.post("/api/teams/toggle-task", json=payload)

    assert res.status_code == 200
    body = res.json()
    assert body["teams"][0]["xp"] == 50
    assert body["teams"][0]["progress"] == 50
    assert body["new_badge"]["id"] == "halfway"


def test_submit_then_review(client) -> None:
    student = make_student("s1", 70)
    teams = _dump([make_team(1, 1, members=[student])])
    res = client.post(
        "/api/teams/submissions",
        json={
            "teams": teams,
            "team_id": "group-0",
            "phase_id": "p0",
            "task_id": "t0-0",
            "type": "github",
            "url": "https://github.com/a/b",
            "student_id": "s1",
        },
    )
    assert res.status_code == 200
    submitted = res.json()["teams"]
    task = submitted[0]["project"]["phases"][0]["tasks"][0]
    assert task["submission"]["status"] == "pending"
    assert submitted[0]["members"][0]["activity_log"][-1]["action"] == "submission_made"

    res = client.post(
        "/api/teams/review",
        json={
            "teams": submitted,
            "team_id": "group-0",
            "phase_id": "p0",
            "task_id": "t0-0",
            "decision": "approved",
            "comment": "Great",
            "rubric_score": 8,
        },
    )
    assert res.status_code == 200
    team = res.json()["teams"][0]
    assert team["project"]["phases"][0]["status"] == "completed"
    assert team["project"]["phases"][1]["status"] == "active"
    assert team["xp"] == 550


def test_review_pending_decision_is_bad_request(client) -> None:
    team = submit_evidence(make_team(1), "p0", "t0-0", SubmissionType.IMAGE, "img://x", NOW)
    res = client.post(
        "/api/teams/review",
        json={
            "teams": _dump([team]),
            "team_id": "group-0",
            "phase_id": "p0",
            "task_id": "t0-0",
            "decision": "pending",
        },
    )
    assert res.status_code == 400


def test_record_activity(client) -> None:
    team = make_team(1, members=[make_student("s1", 70)])
    res = client.post(
        "/api/teams/activity",
        json={"teams": _dump([team]), "team_id": "group-0", "student_id": "s1", "action": "task_started"},
    )
    assert res.status_code == 200
    log = res.json()["teams"][0]["members"][0]["activity_log"]
    assert [entry["action"] for entry in log] == ["task_started"]


def test_upcoming_deadlines(client) -> None:
    team = make_team(2)
    phase = team.project.phases[0]
    tasks = (
        phase.tasks[0].model_copy(update={"deadline": NOW + timedelta(hours=3, minutes=5)}),
        phase.tasks[1].model_copy(update={"deadline": NOW + timedelta(days=20)}),
    )
    project = team.project.model_copy(update={"phases": (phase.model_copy(update={"tasks": tasks}),)})
    team = team.model_copy(update={"project": project})

    res = client.post("/api/teams/deadlines/upcoming", json={"team": team.model_dump(mode="json")})

    assert res.status_code == 200
    assert res.json() == [
        {
            "task_id": "t0-0",
            "title": "Task 0-0",
            "deadline": "2026-03-10T15:05:00Z",
            "urgency": "high",
            "remaining": "3 hours, 5 min",
            "label": "Today at 3:05 PM",
        }
    ]


def test_class_metrics_and_stuck(client) -> None:
    idle = make_student("idle", 70, log_days_ago=(5,))
    team = submit_evidence(make_team(2, members=[idle]), "p0", "t0-0", SubmissionType.IMAGE, "img://x", NOW)
    payload = {"teams": _dump([team])}

    metrics = client.post("/api/analytics/class", json=payload).json()
    assert metrics["total_students"] == 1
    assert metrics["stuck_students_count"] == 1
    assert metrics["submission_stats"]["pending"] == 1

    stuck = client.post("/api/analytics/stuck", json={**payload, "days_threshold": 10}).json()
    assert stuck == []


def test_export_csv_download(client) -> None:
    team = make_team(1, members=[make_student("s1", 70)])
    res = client.post("/api/analytics/export", json={"teams": _dump([team])})

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert res.headers["content-disposition"] == 'attachment; filename="student_analytics.csv"'
    assert res.text.splitlines()[0].startswith("Student ID,Student Name,Group")


def test_naive_timestamps_are_read_as_utc(client) -> None:
    team = submit_evidence(make_team(2), "p0", "t0-0", SubmissionType.IMAGE, "img://x", NOW)
    payload = team.model_dump(mode="json")
    member = make_student("late", 70).model_dump(mode="json")
    member["joined_at"] = "2026-03-01T12:00:00"
    payload["members"] = [member]

    res = client.post("/api/analytics/stuck", json={"teams": [payload]})

    assert res.status_code == 200
    assert [(a["student_id"], a["last_active"]) for a in res.json()] == [
        ("late", "2026-03-01T12:00:00Z")
    ]
