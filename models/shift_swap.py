from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now


class SwapStatus(str, Enum):
    SENT = "sent"  # Waiting for the recipient
    ACCEPTED = "accepted"  # Waiting for a manager
    DECLINED = "declined"
    APPROVED = "approved"
    REJECTED = "rejected"


class ShiftSwap(SQLModel, table=True):
    __tablename__ = "shift_swaps"

    id: Optional[int] = Field(default=None, primary_key=True)

    requester_id: int = Field(foreign_key="employees.id", index=True)
    recipient_id: int = Field(foreign_key="employees.id", index=True)

    # The requester's shift is mandatory; the recipient's counter-shift may stay empty
    requester_shift_id: int = Field(foreign_key="shifts.id")
    recipient_shift_id: Optional[int] = Field(default=None, foreign_key="shifts.id")

    status: SwapStatus = Field(default=SwapStatus.SENT, index=True)
    note: Optional[str] = None

    # Manager who approved or rejected the swap
    reviewed_by: Optional[int] = Field(default=None, foreign_key="employees.id")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
