import logging
from typing import Any, Dict, List
from sqlalchemy.orm import Session

from app.core import database
from app.core.constants import ASSESSMENT_COMPLETED_EVENT, NotificationTypeEnum
from app.crud.notification import notification as crud_notification
from app.schemas.notification import NotificationCreate, Notification
from app.utils.events import event_bus

logger = logging.getLogger(__name__)


class NotificationService:
    def create_notification(self, db: Session, *, user_id: int, message: str, link: str | None = None, notification_type: str | None = None) -> Notification:
        notification_in = NotificationCreate(user_id=user_id, message=message, link=link, notification_type=notification_type)
        return crud_notification.create(db, obj_in=notification_in)

    def get_user_notifications(self, db: Session, *, user_id: int, unread_only: bool = False,
                               skip: int = 0, limit: int = 100) -> List[Notification]:
        return crud_notification.get_for_user(db, user_id=user_id, unread_only=unread_only, skip=skip, limit=limit)

    def notify_result(self, db: Session, *, user_id: int, assessment_id: int, session_id: int,
                      assessment_title: str, score: int, passed: bool) -> Notification:
        outcome = "passed" if passed else "did not pass"
        return self.create_notification(
            db,
            user_id=user_id,
            message=f"You {outcome} \"{assessment_title}\" with a score of {score}%.",
            link=f"/assessments/{assessment_id}/results?sessionId={session_id}",
            notification_type=NotificationTypeEnum.ASSESSMENT_RESULT.value,
        )

    def handle_assessment_completed(self, data: Dict[str, Any]) -> None:
        """Event-bus subscriber; runs outside the request's DB session."""
        db = database.SessionLocal()
        try:
            self.notify_result(
                db,
                user_id=data["user_id"],
                assessment_id=data["assessment_id"],
                session_id=data["session_id"],
                assessment_title=data.get("assessment_title", "your assessment"),
                score=data["score"],
                passed=data["passed"],
            )
            logger.info(f"Result notification sent for session {data['session_id']}")
        finally:
            db.close()


notification_service = NotificationService()

event_bus.subscribe(ASSESSMENT_COMPLETED_EVENT, notification_service.handle_assessment_completed)
