from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, Index, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now


class NotificationType(str, Enum):
    LEAVE = "leave"
    SHIFT_SWAP = "shift_swap"
    SCHEDULE = "schedule"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    __table_args__ = (
        Index("ix_notifications_recipient_id_read", "recipient_id", "read"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_id: int = Field(foreign_key="employees.id", index=True)
    notification_type: NotificationType
    title: str
    body: Optional[str] = None
    link: Optional[str] = None

    # The only column that ever changes after insert
    read: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> Optional[str]:
        return format_utc_datetime(dt)
