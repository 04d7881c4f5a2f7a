import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from app.core.constants import (
    ASSESSMENT_COMPLETED_EVENT,
    CompletionReasonEnum,
    SessionStatusEnum,
)
from app.core.result import Err, ErrorKind, Ok, Result
from app.crud.assessment_answer import assessment_answer as crud_answer
from app.crud.assessment_session import assessment_session as crud_session
from app.models.assessment_session import AssessmentSession
from app.schemas.assessment_session import CompletionResult
from app.services.deadline import is_expired
from app.services.question_set import question_set_service
from app.utils import clock
from app.utils.events import event_bus
from app.utils.maths import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class ScoreOutcome:
    score: int
    passed: bool
    correct_count: int
    correctness: Dict[int, bool] = field(default_factory=dict)


def score_answers(
    question_order: List[int],
    selected: Dict[int, int],
    answer_key: Dict[int, int],
    question_count: int,
    pass_score: int,
) -> ScoreOutcome:
    """Grades one attempt. Unanswered questions count as incorrect."""
    correctness = {}
    for question_id in question_order:
        choice = selected.get(question_id)
        correctness[question_id] = choice is not None and choice == answer_key.get(question_id)

    correct_count = sum(1 for is_correct in correctness.values() if is_correct)
    score = round_half_up(100 * correct_count / question_count) if question_count > 0 else 0
    return ScoreOutcome(
        score=score,
        passed=score >= pass_score,
        correct_count=correct_count,
        correctness=correctness,
    )


class CompletionService:

    def _persisted_result(self, session: AssessmentSession, already_completed: bool,
                          correct_count: Optional[int] = None) -> CompletionResult:
        return CompletionResult(
            session_id=session.id,
            status=session.status,
            score=session.score,
            passed=session.passed,
            completed_at=clock.as_utc(session.completed_at),
            correct_count=correct_count,
            total_questions=len(session.question_order or []),
            already_completed=already_completed,
        )

    def _terminal_status(self, session: AssessmentSession, reason: CompletionReasonEnum, now) -> SessionStatusEnum:
        # The client-declared reason is not trusted: a manual finish after the deadline is a timeout.
        if reason == CompletionReasonEnum.EXPIRED or is_expired(session, session.assessment, now):
            return SessionStatusEnum.TIMED_OUT
        return SessionStatusEnum.COMPLETED

    async def complete(
        self,
        db: Session,
        session_id: int,
        user_id: int,
        reason: CompletionReasonEnum = CompletionReasonEnum.MANUAL,
    ) -> Result[CompletionResult]:
        session = crud_session.get_for_update(db, id=session_id)
        if not session or session.user_id != user_id:
            return Err(ErrorKind.NOT_FOUND, "Session not found.")

        if session.is_terminal:
            db.commit()
            return Ok(self._persisted_result(session, already_completed=True))

        assessment = session.assessment
        answers = crud_answer.get_all_by_session(db, session_id=session.id)
        answer_key = question_set_service.get_answer_key(db, session.question_order)
        outcome = score_answers(
            question_order=session.question_order,
            selected={a.question_id: a.selected_index for a in answers},
            answer_key=answer_key,
            question_count=assessment.question_count,
            pass_score=assessment.pass_score,
        )

        now = clock.utcnow()
        status = self._terminal_status(session, reason, now)
        won = crud_session.complete_if_in_progress(
            db,
            session_id=session.id,
            status=status,
            score=outcome.score,
            passed=outcome.passed,
            completed_at=now,
        )

        if not won:
            db.rollback()
            winner = crud_session.get(db, id=session.id)
            db.refresh(winner)
            logger.info(
                f"Session {session.id} was finalized concurrently as {winner.status.value}; "
                f"returning persisted score {winner.score}"
            )
            return Ok(self._persisted_result(winner, already_completed=True))

        crud_answer.mark_correctness(db, session_id=session.id, correctness=outcome.correctness)
        db.commit()
        db.refresh(session)

        logger.info(
            f"Session {session.id} finalized as {status.value} (reason={reason.value}): "
            f"score={outcome.score} passed={outcome.passed}"
        )

        await event_bus.publish(ASSESSMENT_COMPLETED_EVENT, {
            "session_id": session.id,
            "user_id": session.user_id,
            "assessment_id": assessment.id,
            "assessment_title": assessment.title,
            "score": outcome.score,
            "passed": outcome.passed,
            "status": status.value,
        })

        return Ok(self._persisted_result(session, already_completed=False, correct_count=outcome.correct_count))


completion_service = CompletionService()
