from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, Index, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now


class ShiftStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"


class Shift(SQLModel, table=True):
    __tablename__ = "shifts"

    __table_args__ = (
        Index("ix_shifts_shift_date", "shift_date"),
        Index("ix_shifts_employee_id", "employee_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    # Current owner; rewritten when a swap is approved
    employee_id: int = Field(foreign_key="employees.id")

    shift_date: date
    start_time: time
    end_time: time
    break_minutes: int = Field(default=0, ge=0)
    department: Optional[str] = None
    status: ShiftStatus = Field(default=ShiftStatus.DRAFT)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
