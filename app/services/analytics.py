import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    AssessmentStatusEnum,
    QUESTION_STEM_PREVIEW_LENGTH,
    SCORE_BUCKET_COUNT,
    SessionStatusEnum,
    TERMINAL_SESSION_STATUSES,
)
from app.core.result import Err, ErrorKind, Ok, Result
from app.crud.assessment import assessment as crud_assessment
from app.crud.assessment_answer import assessment_answer as crud_answer
from app.crud.assessment_session import assessment_session as crud_session
from app.crud.organization import organization as crud_organization
from app.models.assessment_session import AssessmentSession
from app.schemas.analytics import (
    AssessmentBreakdown,
    AssessmentSummary,
    OrganizationSummary,
    Performer,
    QuestionStat,
    ScoreBucket,
    WeeklyTrendPoint,
)
from app.utils import clock
from app.utils.maths import mean, percentage, round_half_up
from app.utils.permission import PermissionHelper

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attempt:
    """A terminal session flattened for the rollups below."""
    session_id: int
    assessment_id: int
    user_id: int
    name: str
    score: Optional[int]
    passed: bool
    status: SessionStatusEnum
    completed_at: Optional[datetime]


def _scores(attempts: Iterable[Attempt]) -> List[int]:
    return [a.score for a in attempts if a.score is not None]


def average_score(scores: Sequence[int]) -> int:
    return round_half_up(mean(scores)) if scores else 0


def median_score(scores: Sequence[int]) -> int:
    ordered = sorted(scores)
    if not ordered:
        return 0
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return round_half_up((ordered[mid - 1] + ordered[mid]) / 2)


def pass_rate(attempts: Sequence[Attempt]) -> int:
    return percentage(sum(1 for a in attempts if a.passed), len(attempts))


def bucket_label(index: int) -> str:
    if index == 0:
        return "0-10"
    return f"{index * 10 + 1}-{(index + 1) * 10}"


def score_distribution(scores: Iterable[int]) -> List[ScoreBucket]:
    counts = [0] * SCORE_BUCKET_COUNT
    for score in scores:
        # 100 shares the top bucket with 91-99
        counts[min(score // 10, SCORE_BUCKET_COUNT - 1)] += 1
    return [ScoreBucket(range=bucket_label(i), count=c) for i, c in enumerate(counts)]


def performers(attempts: Sequence[Attempt], descending: bool, limit: Optional[int] = None) -> List[Performer]:
    """First N attempts by score. Ties keep their input order."""
    limit = settings.PERFORMER_LIST_SIZE if limit is None else limit
    ranked = sorted(attempts, key=lambda a: a.score or 0, reverse=descending)
    return [
        Performer(session_id=a.session_id, user_id=a.user_id, name=a.name, score=a.score or 0, passed=a.passed)
        for a in ranked[:limit]
    ]


def week_start_for(moment: datetime) -> datetime:
    """Local midnight of the Sunday on or before ``moment``."""
    days_since_sunday = (moment.weekday() + 1) % 7
    day = moment.date() - timedelta(days=days_since_sunday)
    return datetime.combine(day, time.min, tzinfo=moment.tzinfo)


def weekly_trend(
    attempts: Sequence[Attempt], now: datetime, tz: Optional[ZoneInfo] = None, weeks: Optional[int] = None
) -> List[WeeklyTrendPoint]:
    """Fixed-length series, oldest week first. Empty weeks stay in with avg_score 0."""
    tz = tz or ZoneInfo(settings.ANALYTICS_TIMEZONE)
    weeks = settings.TREND_WEEKS if weeks is None else weeks
    local_now = clock.as_utc(now).astimezone(tz)

    trend = []
    for offset in range(weeks - 1, -1, -1):
        start = week_start_for(local_now - timedelta(days=offset * 7))
        end = datetime.combine(start.date() + timedelta(days=7), time.min, tzinfo=tz)
        in_week = [
            a for a in attempts
            if a.completed_at is not None and start <= clock.as_utc(a.completed_at) < end
        ]
        trend.append(WeeklyTrendPoint(
            week=f"{start.month}/{start.day}",
            week_start=start.date().isoformat(),
            avg_score=average_score(_scores(in_week)),
            completions=len(in_week),
        ))
    return trend


def to_attempt(session: AssessmentSession) -> Attempt:
    return Attempt(
        session_id=session.id,
        assessment_id=session.assessment_id,
        user_id=session.user_id,
        name=session.user.display_name if session.user else str(session.user_id),
        score=session.score,
        passed=bool(session.passed),
        status=session.status,
        completed_at=session.completed_at,
    )


def truncate_stem(stem: str) -> str:
    if len(stem) <= QUESTION_STEM_PREVIEW_LENGTH:
        return stem
    return stem[:QUESTION_STEM_PREVIEW_LENGTH - 3] + "..."


class AnalyticsService:

    def _score_stats(self, attempts: Sequence[Attempt]) -> dict:
        scores = _scores(attempts)
        return dict(
            total_attempts=len(attempts),
            avg_score=average_score(scores),
            median_score=median_score(scores),
            pass_rate=pass_rate(attempts),
            score_distribution=score_distribution(scores),
            top_performers=performers(attempts, descending=True),
            bottom_performers=performers(attempts, descending=False),
        )

    def _question_stats(self, db: Session, assessment_id: int) -> List[QuestionStat]:
        tallies = {}
        for answer in crud_answer.get_graded_by_assessment(db, assessment_id=assessment_id):
            entry = tallies.setdefault(answer.question_id, {"stem": answer.question.stem, "total": 0, "correct": 0})
            entry["total"] += 1
            if answer.is_correct:
                entry["correct"] += 1
        return [
            QuestionStat(
                question_id=question_id,
                stem=truncate_stem(entry["stem"]),
                total_attempts=entry["total"],
                percent_correct=percentage(entry["correct"], entry["total"]),
            )
            for question_id, entry in tallies.items()
        ]

    def summarize_assessment(self, db: Session, assessment_id: int, viewer_id: int) -> Result[AssessmentSummary]:
        assessment = crud_assessment.get(db, id=assessment_id)
        if not assessment:
            return Err(ErrorKind.NOT_FOUND, "Assessment not found.")
        if not PermissionHelper.can_manage_content(db, assessment.org_id, viewer_id):
            return Err(ErrorKind.UNAUTHORIZED, "You do not have permission to view analytics for this assessment.")

        attempts = [to_attempt(s) for s in crud_session.get_terminal_by_assessment(db, assessment_id=assessment.id)]
        return Ok(AssessmentSummary(
            assessment_id=assessment.id,
            title=assessment.title,
            question_count=assessment.question_count,
            time_limit_minutes=assessment.time_limit_minutes,
            pass_score=assessment.pass_score,
            question_stats=self._question_stats(db, assessment.id),
            **self._score_stats(attempts),
        ))

    def summarize_organization(self, db: Session, org_id: int, viewer_id: int) -> Result[OrganizationSummary]:
        organization = crud_organization.get(db, id=org_id)
        if not organization:
            return Err(ErrorKind.NOT_FOUND, "Organization not found.")
        if not PermissionHelper.can_manage_content(db, org_id, viewer_id):
            return Err(ErrorKind.UNAUTHORIZED, "You do not have permission to view analytics for this organization.")

        assessments = crud_assessment.get_all_by_org(db, org_id=org_id)
        sessions = crud_session.get_all_by_assessment_ids(db, assessment_ids=[a.id for a in assessments])
        terminal = [s for s in sessions if s.status in TERMINAL_SESSION_STATUSES]
        attempts = [to_attempt(s) for s in terminal]

        breakdown = []
        for assessment in assessments:
            a_sessions = [s for s in sessions if s.assessment_id == assessment.id]
            a_attempts = [a for a in attempts if a.assessment_id == assessment.id]
            breakdown.append(AssessmentBreakdown(
                id=assessment.id,
                title=assessment.title,
                status=assessment.status.value,
                sessions=len(a_sessions),
                completed_count=len(a_attempts),
                avg_score=average_score(_scores(a_attempts)),
                pass_rate=pass_rate(a_attempts),
            ))
        breakdown.sort(key=lambda b: b.sessions, reverse=True)

        logger.debug(f"Organization {org_id} summary over {len(attempts)} attempts")
        return Ok(OrganizationSummary(
            org_id=organization.id,
            name=organization.name,
            total_assessments=len(assessments),
            published_assessments=sum(1 for a in assessments if a.status == AssessmentStatusEnum.PUBLISHED),
            total_sessions=len(sessions),
            completed_sessions=sum(1 for s in terminal if s.status == SessionStatusEnum.COMPLETED),
            timed_out_sessions=sum(1 for s in terminal if s.status == SessionStatusEnum.TIMED_OUT),
            unique_candidates=len({s.user_id for s in sessions}),
            assessment_stats=breakdown,
            weekly_trend=weekly_trend(attempts, clock.utcnow()),
            **self._score_stats(attempts),
        ))


analytics_service = AnalyticsService()
