from datetime import datetime, timedelta

from app.models.assessment import Assessment
from app.models.assessment_session import AssessmentSession
from app.utils.clock import as_utc


def deadline_for(session: AssessmentSession, assessment: Assessment) -> datetime:
    """started_at + time limit, on the server clock."""
    return as_utc(session.started_at) + timedelta(minutes=assessment.time_limit_minutes)


def remaining_seconds(session: AssessmentSession, assessment: Assessment, now: datetime) -> int:
    elapsed = (as_utc(now) - as_utc(session.started_at)).total_seconds()
    return max(0, int(assessment.time_limit_seconds - elapsed))


def is_expired(session: AssessmentSession, assessment: Assessment, now: datetime, grace_seconds: int = 0) -> bool:
    return as_utc(now) >= deadline_for(session, assessment) + timedelta(seconds=grace_seconds)
