from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.models.user import User
from app.schemas.notification import Notification
from app.schemas.response import APIResponse
from app.services.notification import notification_service
from app.utils import deps

router = APIRouter()


@router.get("/", response_model=APIResponse[List[Notification]])
async def list_result_notifications(
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    unread_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """Assessment result notifications for the caller, newest first."""
    data = notification_service.get_user_notifications(
        db, user_id=user.id, unread_only=unread_only, skip=skip, limit=limit
    )
    return APIResponse(
        message=f"{len(data)} notification(s) found",
        data=[Notification.model_validate(n) for n in data],
    )
