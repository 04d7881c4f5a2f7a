from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from typing import List, Optional
from datetime import datetime

from app.core.constants import SessionStatusEnum, TERMINAL_SESSION_STATUSES
from app.core.result import AlreadyStartedError
from app.crud.base import CRUDBase
from app.models.assessment_session import AssessmentSession
from app.schemas.assessment_session import AssessmentSessionCreate


class CRUDAssessmentSession(CRUDBase[AssessmentSession, AssessmentSessionCreate]):

    def _query_with_relationships(self, db: Session):
        return db.query(AssessmentSession).options(
            selectinload(AssessmentSession.assessment),
            selectinload(AssessmentSession.proctoring_events),
        )

    def get(self, db: Session, id: int) -> Optional[AssessmentSession]:
        return self._query_with_relationships(db).filter(AssessmentSession.id == id).first()

    def get_for_update(self, db: Session, id: int) -> Optional[AssessmentSession]:
        """Row-locks the session until the current transaction ends (no-op on SQLite)."""
        return (
            db.query(AssessmentSession)
            .filter(AssessmentSession.id == id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def get_in_progress(self, db: Session, user_id: int, assessment_id: int) -> Optional[AssessmentSession]:
        return (
            self._query_with_relationships(db)
            .filter(AssessmentSession.user_id == user_id)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .first()
        )

    def create_in_progress(self, db: Session, *, obj_in: AssessmentSessionCreate) -> AssessmentSession:
        try:
            return self.create(db, obj_in=obj_in)
        except IntegrityError:
            db.rollback()
            raise AlreadyStartedError(obj_in.user_id, obj_in.assessment_id)

    def complete_if_in_progress(
        self,
        db: Session,
        *,
        session_id: int,
        status: SessionStatusEnum,
        score: int,
        passed: bool,
        completed_at: datetime,
    ) -> bool:
        """Compare-and-swap on status. Returns True only for the caller that moved the row out of in_progress.

        Does not commit; the caller commits together with any per-answer grading.
        """
        rowcount = (
            db.query(AssessmentSession)
            .filter(AssessmentSession.id == session_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .update(
                {
                    AssessmentSession.status: status,
                    AssessmentSession.score: score,
                    AssessmentSession.passed: passed,
                    AssessmentSession.completed_at: completed_at,
                },
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def increment_tab_switch(self, db: Session, *, session_id: int) -> bool:
        rowcount = (
            db.query(AssessmentSession)
            .filter(AssessmentSession.id == session_id)
            .filter(AssessmentSession.status == SessionStatusEnum.IN_PROGRESS)
            .update(
                {AssessmentSession.tab_switch_count: AssessmentSession.tab_switch_count + 1},
                synchronize_session=False,
            )
        )
        return rowcount == 1

    def get_all_by_assessment_ids(self, db: Session, assessment_ids: List[int]) -> List[AssessmentSession]:
        if not assessment_ids:
            return []
        return (
            db.query(AssessmentSession)
            .options(selectinload(AssessmentSession.user))
            .filter(AssessmentSession.assessment_id.in_(assessment_ids))
            .order_by(AssessmentSession.completed_at.desc(), AssessmentSession.id.desc())
            .all()
        )

    def get_terminal_by_assessment(self, db: Session, assessment_id: int) -> List[AssessmentSession]:
        return (
            db.query(AssessmentSession)
            .options(selectinload(AssessmentSession.user))
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status.in_(TERMINAL_SESSION_STATUSES))
            .order_by(AssessmentSession.completed_at.desc(), AssessmentSession.id.desc())
            .all()
        )

    def count_terminal_by_user_and_assessment(self, db: Session, user_id: int, assessment_id: int) -> int:
        return (
            db.query(func.count(AssessmentSession.id))
            .filter(AssessmentSession.user_id == user_id)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status.in_(TERMINAL_SESSION_STATUSES))
            .scalar()
        ) or 0

    def get_latest_terminal_by_user_and_assessment(
        self, db: Session, user_id: int, assessment_id: int
    ) -> Optional[AssessmentSession]:
        return (
            db.query(AssessmentSession)
            .filter(AssessmentSession.user_id == user_id)
            .filter(AssessmentSession.assessment_id == assessment_id)
            .filter(AssessmentSession.status.in_(TERMINAL_SESSION_STATUSES))
            .order_by(AssessmentSession.completed_at.desc())
            .first()
        )


assessment_session = CRUDAssessmentSession(AssessmentSession)
