import logging
import random
from typing import List, Optional
from sqlalchemy.orm import Session

from app.crud.question import question as crud_question
from app.models.assessment import Assessment
from app.models.question import Question
from app.schemas.question import ResolvedQuestion

logger = logging.getLogger(__name__)


class QuestionSetService:
    """Read-only view of the content collaborator for one assessment."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def _to_resolved(self, question: Question) -> ResolvedQuestion:
        return ResolvedQuestion(
            question_id=question.id,
            stem=question.stem,
            options=list(question.options or []),
            correct_index=question.correct_index,
        )

    def resolve_question_set(self, db: Session, assessment: Assessment) -> List[ResolvedQuestion]:
        questions = crud_question.get_by_deck(db, deck_id=assessment.deck_id)
        return [self._to_resolved(q) for q in questions]

    def materialize_order(self, db: Session, assessment: Assessment) -> List[int]:
        """Picks the fixed question order for a new session. Never called on resume."""
        question_ids = [q.question_id for q in self.resolve_question_set(db, assessment)]
        if len(question_ids) < assessment.question_count:
            logger.warning(
                f"Assessment {assessment.id} wants {assessment.question_count} questions "
                f"but its deck only has {len(question_ids)}"
            )
        count = min(assessment.question_count, len(question_ids))
        if assessment.shuffle_questions:
            return self._rng.sample(question_ids, count)
        return question_ids[:count]

    def get_questions(self, db: Session, question_ids: List[int]) -> List[ResolvedQuestion]:
        """Questions in exactly the order given; ids that no longer exist are skipped."""
        by_id = {q.id: q for q in crud_question.get_by_ids(db, ids=question_ids)}
        return [self._to_resolved(by_id[qid]) for qid in question_ids if qid in by_id]

    def get_answer_key(self, db: Session, question_ids: List[int]) -> dict:
        return {q.question_id: q.correct_index for q in self.get_questions(db, question_ids)}


question_set_service = QuestionSetService()
