import logging
from datetime import timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import AssessmentStatusEnum, CompletionReasonEnum, SessionStatusEnum
from app.core.result import AlreadyStartedError, Err, ErrorKind, Ok, Result
from app.crud.assessment import assessment as crud_assessment
from app.crud.assessment_answer import assessment_answer as crud_answer
from app.crud.assessment_session import assessment_session as crud_session
from app.models.assessment import Assessment
from app.models.assessment_session import AssessmentSession
from app.schemas.assessment_session import (
    AssessmentSession as AssessmentSessionSchema,
    AssessmentSessionCreate,
    QuestionReview,
    SessionSummary,
    SessionView,
    SubmittedAnswer,
)
from app.schemas.proctoring import ViolationEntry
from app.services.completion import completion_service
from app.services.deadline import deadline_for, remaining_seconds
from app.services.question_set import question_set_service
from app.utils import clock

logger = logging.getLogger(__name__)

START_CONFLICT_RETRIES = 3


class AssessmentSessionService:

    def _availability_error(self, assessment: Assessment, now) -> Optional[Err]:
        if assessment.status != AssessmentStatusEnum.PUBLISHED:
            return Err(ErrorKind.NOT_AVAILABLE, "This assessment is not available.")
        if assessment.start_date and now < clock.as_utc(assessment.start_date):
            return Err(ErrorKind.NOT_AVAILABLE, "This assessment has not opened yet.")
        if assessment.end_date and now >= clock.as_utc(assessment.end_date):
            return Err(ErrorKind.NOT_AVAILABLE, "This assessment has closed.")
        return None

    def _attempt_limit_error(self, db: Session, assessment: Assessment, user_id: int, now) -> Optional[Err]:
        if assessment.max_attempts is not None:
            used = crud_session.count_terminal_by_user_and_assessment(db, user_id=user_id, assessment_id=assessment.id)
            if used >= assessment.max_attempts:
                return Err(ErrorKind.NOT_AVAILABLE, f"Maximum attempts ({assessment.max_attempts}) reached.")

        if assessment.cooldown_minutes:
            last = crud_session.get_latest_terminal_by_user_and_assessment(db, user_id=user_id, assessment_id=assessment.id)
            if last and last.completed_at:
                available_at = clock.as_utc(last.completed_at) + timedelta(minutes=assessment.cooldown_minutes)
                if now < available_at:
                    return Err(ErrorKind.NOT_AVAILABLE, f"You can retake this assessment after {available_at.isoformat()}.")
        return None

    def _to_schema(self, session: AssessmentSession, assessment: Assessment, now) -> AssessmentSessionSchema:
        remaining = 0 if session.is_terminal else remaining_seconds(session, assessment, now)
        return AssessmentSessionSchema(
            id=session.id,
            assessment_id=session.assessment_id,
            user_id=session.user_id,
            status=session.status,
            started_at=clock.as_utc(session.started_at),
            question_order=list(session.question_order),
            time_remaining_seconds=remaining,
            deadline_at=deadline_for(session, assessment),
            tab_switch_count=session.tab_switch_count,
            tab_switch_log=[ViolationEntry.model_validate(e) for e in session.proctoring_events],
            score=session.score,
            passed=session.passed,
            completed_at=clock.as_utc(session.completed_at),
        )

    def _build_view(self, db: Session, session: AssessmentSession, assessment: Assessment, now, resumed: bool) -> SessionView:
        questions = question_set_service.get_questions(db, session.question_order)
        answers = crud_answer.get_all_by_session(db, session_id=session.id)
        return SessionView(
            session=self._to_schema(session, assessment, now),
            questions=[q.to_public() for q in questions],
            answers=[SubmittedAnswer(question_id=a.question_id, selected_index=a.selected_index) for a in answers],
            resumed=resumed,
        )

    def _create_session(self, db: Session, assessment: Assessment, user_id: int, now) -> Result[AssessmentSession]:
        question_order = question_set_service.materialize_order(db, assessment)
        if len(question_order) != assessment.question_count:
            return Err(ErrorKind.NOT_AVAILABLE, "This assessment does not have enough questions.")

        session_in = AssessmentSessionCreate(
            assessment_id=assessment.id,
            user_id=user_id,
            started_at=now,
            question_order=question_order,
            time_remaining_seconds=assessment.time_limit_seconds,
        )
        session = crud_session.create_in_progress(db, obj_in=session_in)
        logger.info(f"Session {session.id} started for user {user_id} on assessment {assessment.id}")
        return Ok(session)

    async def start_or_resume(self, db: Session, user_id: int, assessment_id: int) -> Result[SessionView]:
        assessment = crud_assessment.get(db, id=assessment_id)
        if not assessment:
            return Err(ErrorKind.NOT_FOUND, "Assessment not found.")

        now = clock.utcnow()
        unavailable = self._availability_error(assessment, now)
        if unavailable:
            return unavailable

        session = crud_session.get_in_progress(db, user_id=user_id, assessment_id=assessment_id)
        resumed = session is not None

        conflicts = 0
        while session is None:
            limit_error = self._attempt_limit_error(db, assessment, user_id, now)
            if limit_error:
                return limit_error
            try:
                created = self._create_session(db, assessment, user_id, now)
            except AlreadyStartedError:
                conflicts += 1
                logger.info(f"Concurrent start for user {user_id} on assessment {assessment_id}; resuming existing session")
                session = crud_session.get_in_progress(db, user_id=user_id, assessment_id=assessment_id)
                resumed = session is not None
                if session is None and conflicts >= START_CONFLICT_RETRIES:
                    logger.error(f"Gave up starting a session for user {user_id} on assessment {assessment_id} after {conflicts} conflicts")
                    return Err(ErrorKind.ALREADY_STARTED, "A session was started concurrently; please retry.")
                # Otherwise the competing session was finalized before the re-read: start over
            else:
                if not created.ok:
                    return created
                session = created.value

        if resumed and remaining_seconds(session, assessment, now) == 0:
            logger.info(f"Session {session.id} resumed after its deadline; finalizing as expired")
            completed = await completion_service.complete(db, session.id, user_id, CompletionReasonEnum.EXPIRED)
            if not completed.ok:
                return completed
            session = crud_session.get(db, id=session.id)
            db.refresh(session)

        return Ok(self._build_view(db, session, assessment, now, resumed))

    def get_session_summary(self, db: Session, session_id: int, user_id: int) -> Result[SessionSummary]:
        session = crud_session.get(db, id=session_id)
        if not session or session.user_id != user_id:
            return Err(ErrorKind.NOT_FOUND, "Session not found.")

        assessment = session.assessment
        now = clock.utcnow()
        answers = crud_answer.get_all_by_session(db, session_id=session.id)

        review = None
        if session.is_terminal and assessment.allow_review:
            selected = {a.question_id: a.selected_index for a in answers}
            answer_key = question_set_service.get_answer_key(db, session.question_order)
            review = []
            for question_id in session.question_order:
                correct_index = answer_key.get(question_id)
                if correct_index is None:
                    continue
                choice = selected.get(question_id)
                review.append(QuestionReview(
                    question_id=question_id,
                    selected_index=choice,
                    correct_index=correct_index,
                    is_correct=choice is not None and choice == correct_index,
                ))

        return Ok(SessionSummary(
            session_id=session.id,
            assessment_id=assessment.id,
            assessment_title=assessment.title,
            status=session.status,
            time_remaining_seconds=0 if session.is_terminal else remaining_seconds(session, assessment, now),
            answered_count=len(answers),
            total_questions=len(session.question_order),
            score=session.score,
            passed=session.passed,
            pass_score=assessment.pass_score,
            completed_at=clock.as_utc(session.completed_at),
            review=review,
        ))


assessment_session_service = AssessmentSessionService()
