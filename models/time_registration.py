from datetime import date, datetime, time
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, Index, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now


# Defines a Table "time_registrations" w/ one row per check-in/check-out pair
class TimeRegistration(SQLModel, table=True):
    __tablename__ = "time_registrations"

    __table_args__ = (
        # Most lookups are "this employee on this day"
        Index("ix_time_registrations_employee_id_work_date", "employee_id", "work_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.id")

    # Scheduled shift for the same day, when there is one
    shift_id: Optional[int] = Field(default=None, foreign_key="shifts.id")

    work_date: date
    check_in: Optional[time] = None
    check_out: Optional[time] = None
    break_minutes: int = Field(default=0, ge=0)
    approved: bool = Field(default=False)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> Optional[str]:
        return format_utc_datetime(dt)
