import logging
from sqlalchemy.orm import Session

from app.core.constants import ViolationTypeEnum
from app.core.result import Err, ErrorKind, Ok, Result
from app.crud.assessment_session import assessment_session as crud_session
from app.crud.proctoring_event import proctoring_event as crud_proctoring_event
from app.schemas.proctoring import ViolationEntry, ViolationReceipt, ViolationReport
from app.utils import clock
from app.utils.permission import PermissionHelper

logger = logging.getLogger(__name__)


class ProctoringService:
    """Advisory focus-loss tracking. Nothing here ever pauses or ends an attempt."""

    def record_focus_loss(self, db: Session, session_id: int, user_id: int) -> Result[ViolationReceipt]:
        session = crud_session.get(db, id=session_id)
        if not session or session.user_id != user_id:
            return Err(ErrorKind.NOT_FOUND, "Session not found.")
        if session.is_terminal:
            return Err(ErrorKind.SESSION_CLOSED, "This session has already ended.")

        now = clock.utcnow()
        # Counter and log entry share one transaction; the increment is guarded on in_progress
        if not crud_session.increment_tab_switch(db, session_id=session.id):
            db.rollback()
            return Err(ErrorKind.SESSION_CLOSED, "This session has already ended.")

        crud_proctoring_event.append(
            db, session_id=session.id, occurred_at=now, event_type=ViolationTypeEnum.TAB_HIDDEN
        )
        db.commit()
        logger.info(f"Focus loss recorded for session {session.id}")
        return Ok(ViolationReceipt(session_id=session.id, recorded_at=now))

    def get_violations(self, db: Session, session_id: int, viewer_id: int) -> Result[ViolationReport]:
        session = crud_session.get(db, id=session_id)
        if not session:
            return Err(ErrorKind.NOT_FOUND, "Session not found.")

        if not PermissionHelper.can_manage_content(db, session.assessment.org_id, viewer_id):
            return Err(ErrorKind.UNAUTHORIZED, "You do not have permission to view proctoring data.")

        db.refresh(session)
        events = crud_proctoring_event.get_all_by_session(db, session_id=session.id)
        return Ok(ViolationReport(
            session_id=session.id,
            user_id=session.user_id,
            tab_switch_count=session.tab_switch_count,
            tab_switch_log=[ViolationEntry.model_validate(e) for e in events],
        ))


proctoring_service = ProctoringService()
