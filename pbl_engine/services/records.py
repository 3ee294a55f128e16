"""持久化记录 -> 领域模型 的显式映射。

每个实体一个映射函数，字段覆盖完整。缺省规则集中在本模块顶部：

- 缺少能力分时四项均为 0；缺少平均分时由四项能力分推导；
- 缺少姓名时使用邮箱；缺少头像时生成 ui-avatars 地址；
- 阶段、任务、资源按 ``*_order`` 字段排序；
- 时间既接受 ISO 字符串也接受毫秒时间戳，无时区时按 UTC 处理。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import quote

from pbl_engine.models import (
    ActivityAction,
    ActivityLog,
    Badge,
    BADGES_BY_ID,
    Feedback,
    MasteryScores,
    Phase,
    PhaseStatus,
    Project,
    ProjectStatus,
    Resource,
    Rubric,
    RubricCriteria,
    Student,
    Submission,
    SubmissionStatus,
    SubmissionType,
    Task,
    Team,
)
from pbl_engine.utils.dates import ensure_utc

Record = Mapping[str, Any]

AVATAR_URL_TEMPLATE = "https://ui-avatars.com/api/?name={name}"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_PHASE_STATUS = PhaseStatus.LOCKED
DEFAULT_PROJECT_STATUS = ProjectStatus.PENDING_TOPIC
DEFAULT_SUBMISSION_TYPE = SubmissionType.GITHUB
DEFAULT_SUBMISSION_STATUS = SubmissionStatus.PENDING


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return ensure_utc(dt)


def _rows(value: Any) -> list[Record]:
    return list(value or [])


def _ordered(rows: Iterable[Record], key: str) -> list[Record]:
    return sorted(rows, key=lambda row: row.get(key) or 0)


def _single(value: Any) -> Optional[Record]:
    """一对一关联在不同查询里可能返回对象或单元素列表。"""

    if isinstance(value, list):
        return value[0] if value else None
    return value or None


def mastery_scores_from_record(row: Optional[Record]) -> MasteryScores:
    if not row:
        return MasteryScores()
    return MasteryScores(
        math=row.get("math") or 0,
        science=row.get("science") or 0,
        creativity=row.get("creativity") or 0,
        leadership=row.get("leadership") or 0,
    )


def activity_log_from_record(row: Record) -> ActivityLog:
    return ActivityLog(
        id=str(row["id"]),
        timestamp=parse_timestamp(row["timestamp"]),
        action=ActivityAction(row["action"]),
        task_id=row.get("task_id"),
        phase_id=row.get("phase_id"),
        details=row.get("details"),
    )


def badge_from_record(row: Record) -> Badge:
    catalog = BADGES_BY_ID.get(str(row.get("id")))
    if catalog is not None:
        return catalog
    return Badge(
        id=str(row["id"]),
        name=row.get("name") or str(row["id"]),
        icon=row.get("icon") or "",
        description=row.get("description") or "",
        color=row.get("color") or "",
    )


def _unique_badges(badges: Iterable[Badge]) -> tuple[Badge, ...]:
    seen: set[str] = set()
    result = []
    for badge in badges:
        if badge.id in seen:
            continue
        seen.add(badge.id)
        result.append(badge)
    return tuple(result)


def student_from_record(row: Record) -> Student:
    profile = row.get("user_profiles") or {}
    name = profile.get("full_name") or profile.get("email") or row.get("name") or ""
    scores_row = _single(row.get("mastery_scores"))
    scores = mastery_scores_from_record(scores_row)
    average = (scores_row or {}).get("average_score")
    logs = sorted(
        (activity_log_from_record(log) for log in _rows(row.get("activity_logs"))),
        key=lambda entry: entry.timestamp,
    )
    return Student(
        id=str(row["id"]),
        name=name,
        avatar=profile.get("avatar_url") or AVATAR_URL_TEMPLATE.format(name=quote(name)),
        scores=scores,
        average_score=scores.average() if average is None else average,
        personal_xp=row.get("personal_xp") or 0,
        personal_badges=_unique_badges(
            badge_from_record(b) for b in _rows(row.get("personal_badges"))
        ),
        activity_log=tuple(logs),
        joined_at=parse_timestamp(row.get("joined_at")) or EPOCH,
    )


def feedback_from_record(row: Optional[Record]) -> Optional[Feedback]:
    if not row:
        return None
    return Feedback(
        id=str(row["id"]),
        teacher_comment=row.get("teacher_comment") or "",
        rubric_score=row.get("rubric_score"),
        created_at=parse_timestamp(row.get("created_at")) or EPOCH,
    )


def submission_from_record(row: Optional[Record]) -> Optional[Submission]:
    if not row:
        return None
    return Submission(
        id=str(row["id"]),
        type=SubmissionType(row.get("type") or DEFAULT_SUBMISSION_TYPE),
        url=row.get("url") or "",
        status=SubmissionStatus(row.get("status") or DEFAULT_SUBMISSION_STATUS),
        feedback=feedback_from_record(_single(row.get("feedback"))),
        submitted_at=parse_timestamp(row.get("submitted_at")) or EPOCH,
        reviewed_at=parse_timestamp(row.get("reviewed_at")),
        revision_count=row.get("revision_count") or 0,
    )


def rubric_from_record(row: Optional[Record]) -> Optional[Rubric]:
    if not row:
        return None
    criteria = tuple(
        RubricCriteria(
            id=str(c["id"]),
            name=c.get("name") or "",
            description=c.get("description") or "",
            max_points=c.get("max_points") or 0,
        )
        for c in _ordered(_rows(row.get("rubric_criteria")), "criteria_order")
    )
    max_score = row.get("max_score")
    if max_score is None:
        max_score = sum(c.max_points for c in criteria)
    return Rubric(id=str(row["id"]), criteria=criteria, max_score=max_score)


def task_from_record(row: Record) -> Task:
    return Task(
        id=str(row["id"]),
        title=row.get("title") or "",
        completed=bool(row.get("completed")),
        submission=submission_from_record(_single(row.get("submission"))),
        deadline=parse_timestamp(row.get("deadline")),
        is_overdue=bool(row.get("is_overdue")),
        rubric=rubric_from_record(_single(row.get("rubric"))),
    )


def phase_from_record(row: Record) -> Phase:
    return Phase(
        id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        tasks=tuple(task_from_record(t) for t in _ordered(_rows(row.get("tasks")), "task_order")),
        status=PhaseStatus(row.get("status") or DEFAULT_PHASE_STATUS),
        deadline=parse_timestamp(row.get("deadline")),
    )


def project_from_record(row: Optional[Record]) -> Optional[Project]:
    if not row:
        return None
    return Project(
        topic=row.get("topic") or "",
        driving_question=row.get("driving_question") or "",
        description=row.get("description") or "",
        phases=tuple(
            phase_from_record(p)
            for p in _ordered(_rows(row.get("project_phases")), "phase_order")
        ),
        resources=tuple(
            Resource(title=r.get("title") or "", uri=r.get("uri") or "")
            for r in _ordered(_rows(row.get("project_resources")), "resource_order")
        ),
    )


def team_from_record(row: Record) -> Team:
    badges = [
        badge_from_record(link["badges"])
        for link in _rows(row.get("group_badges"))
        if link.get("badges")
    ]
    return Team(
        id=str(row["id"]),
        name=row.get("name") or "",
        members=tuple(student_from_record(s) for s in _rows(row.get("students"))),
        project=project_from_record(_single(row.get("projects"))),
        project_status=ProjectStatus(row.get("project_status") or DEFAULT_PROJECT_STATUS),
        progress=row.get("progress") or 0,
        xp=row.get("xp") or 0,
        badges=_unique_badges(badges),
    )
