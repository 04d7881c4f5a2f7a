from sqlalchemy.orm import Session
from typing import List

from app.crud.base import CRUDBase
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate


class CRUDNotification(CRUDBase[Notification, NotificationCreate]):
    def get_for_user(self, db: Session, *, user_id: int, unread_only: bool = False,
                     skip: int = 0, limit: int = 100) -> List[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return (
            query
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


notification = CRUDNotification(Notification)
