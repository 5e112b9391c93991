from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now


class LeaveType(str, Enum):
    VACATION = "vacation"
    CARE_LEAVE = "care_leave"
    SPECIAL_LEAVE = "special_leave"
    UNPAID_LEAVE = "unpaid_leave"
    SICK = "sick"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaveRequest(SQLModel, table=True):
    __tablename__ = "leave_requests"

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.id", index=True)

    # Inclusive date range
    start_date: date
    end_date: date

    leave_type: LeaveType
    status: LeaveStatus = Field(default=LeaveStatus.PENDING, index=True)

    # Weekdays in the range, fixed at submission
    day_count: float = Field(ge=0)

    note: Optional[str] = None

    # Filled in by the manager who processed the request
    reviewed_by: Optional[int] = Field(default=None, foreign_key="employees.id")
    review_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at", "reviewed_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
