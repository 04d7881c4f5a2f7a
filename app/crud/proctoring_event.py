from sqlalchemy.orm import Session
from typing import List
from datetime import datetime

from app.core.constants import ViolationTypeEnum
from app.crud.base import CRUDBase
from app.models.proctoring_event import ProctoringEvent
from pydantic import BaseModel


class CRUDProctoringEvent(CRUDBase[ProctoringEvent, BaseModel]):

    def append(
        self, db: Session, *, session_id: int, occurred_at: datetime, event_type: ViolationTypeEnum
    ) -> ProctoringEvent:
        """Adds one log entry. Does not commit."""
        event = ProctoringEvent(session_id=session_id, occurred_at=occurred_at, event_type=event_type)
        db.add(event)
        return event

    def get_all_by_session(self, db: Session, session_id: int) -> List[ProctoringEvent]:
        return (
            db.query(ProctoringEvent)
            .filter(ProctoringEvent.session_id == session_id)
            .order_by(ProctoringEvent.occurred_at, ProctoringEvent.id)
            .all()
        )


proctoring_event = CRUDProctoringEvent(ProctoringEvent)
