from datetime import datetime
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, SQLModel

from models.employee import EmployeeRole
from utils.datetime_helpers import format_utc_datetime, utc_now


class Invitation(SQLModel, table=True):
    __tablename__ = "invitations"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True)
    name: str
    token: str = Field(unique=True, index=True)
    role: EmployeeRole = Field(default=EmployeeRole.STAFF)
    department: Optional[str] = None

    # Set once the invitation has been turned into an account
    used: bool = Field(default=False)
    expires_at: datetime

    created_by: int = Field(foreign_key="employees.id")
    created_at: datetime = Field(default_factory=utc_now)

    @field_serializer("created_at", "expires_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
