from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, SQLModel

from utils.datetime_helpers import format_utc_datetime, utc_now


class AvailabilityKind(str, Enum):
    RECURRING = "recurring"  # Every week on this weekday
    EXCEPTION = "exception"  # One specific date


class Availability(SQLModel, table=True):
    __tablename__ = "availability"

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.id", index=True)

    # 0 = Monday .. 6 = Sunday
    weekday: int = Field(ge=0, le=6)

    available_from: Optional[time] = None
    available_until: Optional[time] = None
    available: bool = Field(default=True)
    kind: AvailabilityKind = Field(default=AvailabilityKind.RECURRING)
    specific_date: Optional[date] = None

    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> Optional[str]:
        return format_utc_datetime(dt)
