from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_serializer
from sqlmodel import Session

from core.deps import get_current_user
from db.session import get_session
from models.notification import NotificationType
from services.notification_service import NotificationService
from utils.datetime_helpers import format_utc_datetime

router = APIRouter()


class NotificationResponse(BaseModel):
    id: int
    notification_type: NotificationType
    title: str
    body: Optional[str] = None
    link: Optional[str] = None
    read: bool
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> Optional[str]:
        return format_utc_datetime(dt)


class UnreadCountResponse(BaseModel):
    unread: int


@router.get("", response_model=List[NotificationResponse])
def get_my_notifications(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    """Newest notifications for the authenticated employee."""
    return [
        NotificationResponse(**notification.model_dump())
        for notification in NotificationService.list_for(session, user["uid"])
    ]


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    return UnreadCountResponse(unread=NotificationService.unread_count(session, user["uid"]))


@router.post("/read-all")
@router.put("/read-all")
def mark_all_notifications_read(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    marked = NotificationService.mark_all_read(session, user["uid"])
    return {
        "status": "success",
        "message": f"Marked {marked} notifications as read.",
        "marked_count": marked,
    }


@router.post("/{notification_id}/read", response_model=NotificationResponse)
@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    notification = NotificationService.mark_read(session, notification_id, user["uid"])
    return NotificationResponse(**notification.model_dump())
