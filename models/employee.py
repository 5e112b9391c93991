from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, SQLModel

from core.config import DEFAULT_VACATION_BALANCE
from utils.datetime_helpers import format_utc_datetime, utc_now


class EmployeeRole(str, Enum):
    STAFF = "staff"
    MANAGER = "manager"


class Employee(SQLModel, table=True):
    __tablename__ = "employees"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: EmployeeRole = Field(default=EmployeeRole.STAFF, index=True)
    department: Optional[str] = None
    phone: Optional[str] = None
    hire_date: date = Field(default_factory=date.today)

    # Contract details
    contract_hours: Optional[float] = Field(default=None, ge=0)
    hourly_wage: Optional[float] = Field(default=None, ge=0)

    # Vacation days left; only debited by approving a vacation request
    vacation_balance: float = Field(default=DEFAULT_VACATION_BALANCE)

    # Deactivated employees are kept for history, never deleted
    active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None


class EmployeeRead(SQLModel):
    """Employee as returned by the API (never includes the password hash)."""

    id: int
    name: str
    email: str
    role: EmployeeRole
    department: Optional[str] = None
    phone: Optional[str] = None
    hire_date: date
    contract_hours: Optional[float] = None
    hourly_wage: Optional[float] = None
    vacation_balance: float
    active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
