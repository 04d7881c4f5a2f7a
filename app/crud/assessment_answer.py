from sqlalchemy import exists, literal, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.dialects import postgresql, sqlite
from typing import Dict, List, Optional
from datetime import datetime

from app.core.constants import SessionStatusEnum, TERMINAL_SESSION_STATUSES
from app.crud.base import CRUDBase
from app.models.assessment_answer import AssessmentAnswer
from app.models.assessment_session import AssessmentSession
from pydantic import BaseModel

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CRUDAssessmentAnswer(CRUDBase[AssessmentAnswer, BaseModel]):

    def upsert(
        self,
        db: Session,
        *,
        session_id: int,
        question_id: int,
        selected_index: int,
        submitted_at: datetime,
        client_reported_remaining: Optional[int] = None,
        commit: bool = True,
    ) -> bool:
        """Insert or overwrite the single answer row for (session, question).

        The row is only written while the session is in progress, checked in the
        same statement. Returns False when the session had already been finalized.
        """
        dialect = db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Answer upsert is not supported on {dialect}")

        session_open = exists().where(
            AssessmentSession.id == session_id,
            AssessmentSession.status == SessionStatusEnum.IN_PROGRESS,
        )
        values = select(
            literal(session_id, AssessmentAnswer.session_id.type),
            literal(question_id, AssessmentAnswer.question_id.type),
            literal(selected_index, AssessmentAnswer.selected_index.type),
            literal(submitted_at, AssessmentAnswer.submitted_at.type),
            literal(client_reported_remaining, AssessmentAnswer.client_reported_remaining.type),
        ).where(session_open)

        stmt = insert(AssessmentAnswer).from_select(
            ["session_id", "question_id", "selected_index", "submitted_at", "client_reported_remaining"],
            values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AssessmentAnswer.session_id, AssessmentAnswer.question_id],
            set_={
                "selected_index": stmt.excluded.selected_index,
                "submitted_at": stmt.excluded.submitted_at,
                "client_reported_remaining": stmt.excluded.client_reported_remaining,
            },
        )
        written = db.execute(stmt).rowcount == 1
        if commit:
            db.commit()
        return written

    def get_all_by_session(self, db: Session, session_id: int) -> List[AssessmentAnswer]:
        return (
            db.query(AssessmentAnswer)
            .filter(AssessmentAnswer.session_id == session_id)
            .order_by(AssessmentAnswer.id)
            .all()
        )

    def mark_correctness(self, db: Session, *, session_id: int, correctness: Dict[int, bool]) -> None:
        """Stores graded results keyed by question id. Does not commit."""
        for answer in self.get_all_by_session(db, session_id=session_id):
            answer.is_correct = correctness.get(answer.question_id, False)
            db.add(answer)

    def get_graded_by_assessment(self, db: Session, assessment_id: int) -> List[AssessmentAnswer]:
        """Answers from finished sessions only; in-progress rows have no correctness yet."""
        return (
            db.query(AssessmentAnswer)
            .options(selectinload(AssessmentAnswer.question))
            .join(AssessmentSession, AssessmentSession.id == AssessmentAnswer.session_id)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status.in_(TERMINAL_SESSION_STATUSES))
            .order_by(AssessmentAnswer.id)
            .all()
        )


assessment_answer = CRUDAssessmentAnswer(AssessmentAnswer)
