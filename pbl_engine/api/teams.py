"""分组、项目与任务进度接口。"""

from datetime import datetime
from functools import partial

from fastapi import APIRouter, Depends, HTTPException

from pbl_engine.config import Settings, get_settings
from pbl_engine.dependencies import get_now
from pbl_engine.models import Team
from pbl_engine.schemas.api import (
    ActivityRequest,
    AssignProjectRequest,
    BalanceTeamsRequest,
    ClassUpdateResponse,
    DeadlineInfo,
    ReviewSubmissionRequest,
    SubmitEvidenceRequest,
    TeamsRequest,
    ToggleTaskRequest,
    UpcomingDeadlinesRequest,
)
from pbl_engine.services import classroom, deadlines
from pbl_engine.services.progress import iter_tasks

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("/balance", response_model=list[Team])
def balance_teams(
    payload: BalanceTeamsRequest, settings: Settings = Depends(get_settings)
) -> list[Team]:
    team_size = payload.team_size if payload.team_size is not None else settings.default_team_size
    try:
        return classroom.setup_class(payload.students, team_size)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/project", response_model=list[Team])
def assign_project(payload: AssignProjectRequest) -> list[Team]:
    try:
        return classroom.launch_project(payload.teams, payload.topic)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/toggle-task", response_model=ClassUpdateResponse)
def toggle_task(
    payload: ToggleTaskRequest,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> ClassUpdateResponse:
    operation = partial(
        classroom.apply_task_toggle,
        phase_id=payload.phase_id,
        task_id=payload.task_id,
        now=now,
        xp_per_task=settings.xp_per_task,
        xp_per_phase=settings.xp_per_phase,
    )
    result = classroom.update_team(payload.teams, payload.team_id, operation)
    return ClassUpdateResponse(teams=result.teams, new_badge=result.new_badge)


@router.post("/submissions", response_model=ClassUpdateResponse)
def submit_evidence(
    payload: SubmitEvidenceRequest, now: datetime = Depends(get_now)
) -> ClassUpdateResponse:
    operation = partial(
        classroom.apply_submission,
        phase_id=payload.phase_id,
        task_id=payload.task_id,
        submission_type=payload.type,
        url=payload.url,
        now=now,
        student_id=payload.student_id,
    )
    result = classroom.update_team(payload.teams, payload.team_id, operation)
    return ClassUpdateResponse(teams=result.teams)


@router.post("/review", response_model=ClassUpdateResponse)
def review_submission(
    payload: ReviewSubmissionRequest,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> ClassUpdateResponse:
    operation = partial(
        classroom.apply_review,
        phase_id=payload.phase_id,
        task_id=payload.task_id,
        decision=payload.decision,
        now=now,
        comment=payload.comment,
        rubric_score=payload.rubric_score,
        xp_per_task=settings.xp_per_task,
        xp_per_phase=settings.xp_per_phase,
    )
    try:
        result = classroom.update_team(payload.teams, payload.team_id, operation)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ClassUpdateResponse(teams=result.teams, new_badge=result.new_badge)


@router.post("/activity", response_model=ClassUpdateResponse)
def record_activity(
    payload: ActivityRequest, now: datetime = Depends(get_now)
) -> ClassUpdateResponse:
    def operation(team: Team) -> classroom.TeamUpdate:
        return classroom.TeamUpdate(
            classroom.record_member_activity(
                team,
                payload.student_id,
                payload.action,
                now,
                task_id=payload.task_id,
                phase_id=payload.phase_id,
                details=payload.details,
            )
        )

    result = classroom.update_team(payload.teams, payload.team_id, operation)
    return ClassUpdateResponse(teams=result.teams)


@router.post("/deadlines", response_model=list[Team])
def refresh_deadlines(payload: TeamsRequest, now: datetime = Depends(get_now)) -> list[Team]:
    """重新计算所有任务的逾期标记。"""

    return [deadlines.refresh_team_deadlines(team, now) for team in payload.teams]


@router.post("/deadlines/upcoming", response_model=list[DeadlineInfo])
def upcoming_deadlines(
    payload: UpcomingDeadlinesRequest,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> list[DeadlineInfo]:
    days_ahead = (
        payload.days_ahead if payload.days_ahead is not None else settings.upcoming_window_days
    )
    tasks = deadlines.upcoming_deadlines(iter_tasks(payload.team.project), now, days_ahead)
    return [
        DeadlineInfo(
            task_id=task.id,
            title=task.title,
            deadline=task.deadline,
            urgency=deadlines.urgency_level(task.deadline, now),
            remaining=deadlines.time_remaining(task.deadline, now),
            label=deadlines.format_deadline(task.deadline, now),
        )
        for task in tasks
    ]
