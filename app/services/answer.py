import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.result import Err, ErrorKind, Ok, Result
from app.crud.assessment_answer import assessment_answer as crud_answer
from app.crud.assessment_session import assessment_session as crud_session
from app.schemas.assessment_answer import AnswerReceipt
from app.services.deadline import is_expired, remaining_seconds
from app.utils import clock

logger = logging.getLogger(__name__)


class AnswerService:

    def _log_clock_drift(self, session_id: int, server_remaining: int, client_remaining: Optional[int]):
        if client_remaining is None:
            return
        drift = client_remaining - server_remaining
        if abs(drift) > settings.CLOCK_DRIFT_WARN_SECONDS:
            logger.warning(
                f"Clock drift on session {session_id}: client reports {client_remaining}s left, "
                f"server computes {server_remaining}s (drift {drift:+d}s)"
            )

    def _reject(self, db: Session, kind: ErrorKind, message: str) -> Err:
        # Releases the session row lock taken for this submission
        db.rollback()
        return Err(kind, message)

    def submit_answer(
        self,
        db: Session,
        session_id: int,
        user_id: int,
        question_id: int,
        selected_index: int,
        client_reported_remaining: Optional[int] = None,
    ) -> Result[AnswerReceipt]:
        # Same row lock as completion, so a submission and a finalization never interleave
        session = crud_session.get_for_update(db, id=session_id)
        if not session or session.user_id != user_id:
            return self._reject(db, ErrorKind.NOT_FOUND, "Session not found.")

        if session.is_terminal:
            return self._reject(db, ErrorKind.SESSION_CLOSED, "This session has already ended.")

        if question_id not in session.question_order:
            return self._reject(db, ErrorKind.NOT_FOUND, "Question is not part of this session.")

        now = clock.utcnow()
        assessment = session.assessment
        if is_expired(session, assessment, now, grace_seconds=settings.ANSWER_GRACE_SECONDS):
            return self._reject(db, ErrorKind.SESSION_CLOSED, "Time is up for this session.")

        self._log_clock_drift(session.id, remaining_seconds(session, assessment, now), client_reported_remaining)

        written = crud_answer.upsert(
            db,
            session_id=session.id,
            question_id=question_id,
            selected_index=selected_index,
            submitted_at=now,
            client_reported_remaining=client_reported_remaining,
            commit=False,
        )
        if not written:
            logger.info(f"Answer for session {session_id}, question {question_id} arrived after finalization; discarded")
            return self._reject(db, ErrorKind.SESSION_CLOSED, "This session has already ended.")
        db.commit()

        logger.debug(f"Answer stored for session {session_id}, question {question_id}")
        return Ok(AnswerReceipt(
            session_id=session_id,
            question_id=question_id,
            selected_index=selected_index,
            submitted_at=now,
        ))


answer_service = AnswerService()
