"""学生与班级统计接口。"""

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from pbl_engine.config import Settings, get_settings
from pbl_engine.dependencies import get_now
from pbl_engine.schemas.analytics import ClassMetrics, StudentAnalytics
from pbl_engine.schemas.api import StuckStudentsRequest, TeamsRequest
from pbl_engine.services import analytics
from pbl_engine.utils.export import export_to_csv

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post("/students", response_model=list[StudentAnalytics])
def list_student_analytics(
    payload: TeamsRequest, now: datetime = Depends(get_now)
) -> list[StudentAnalytics]:
    return analytics.all_student_analytics(payload.teams, now)


@router.post("/class", response_model=ClassMetrics)
def get_class_metrics(
    payload: StuckStudentsRequest,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> ClassMetrics:
    threshold = payload.days_threshold or settings.stuck_days_threshold
    return analytics.class_metrics(payload.teams, now, days_threshold=threshold)


@router.post("/stuck", response_model=list[StudentAnalytics])
def list_stuck_students(
    payload: StuckStudentsRequest,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> list[StudentAnalytics]:
    threshold = payload.days_threshold or settings.stuck_days_threshold
    return analytics.detect_stuck_students(payload.teams, now, days_threshold=threshold)


@router.post("/export")
def export_csv(
    payload: TeamsRequest,
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
) -> Response:
    """以附件形式下载 CSV。"""

    return Response(
        content=export_to_csv(payload.teams, now),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{settings.export_filename}"'},
    )
