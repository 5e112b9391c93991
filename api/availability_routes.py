from datetime import date, time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, model_validator
from pydantic import Field as PydanticField
from sqlmodel import Session, select

from core.deps import get_current_user, is_manager
from core.errors import Forbidden
from db.session import get_session
from models.availability import Availability, AvailabilityKind

router = APIRouter()


class AvailabilityRequest(BaseModel):
    weekday: int = PydanticField(..., ge=0, le=6, description="0 = Monday .. 6 = Sunday")
    available_from: Optional[time] = None
    available_until: Optional[time] = None
    available: bool = True
    kind: AvailabilityKind = AvailabilityKind.RECURRING
    specific_date: Optional[date] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.available_from and self.available_until and self.available_until <= self.available_from:
            raise ValueError("available_until must be after available_from")
        if self.kind == AvailabilityKind.EXCEPTION and self.specific_date is None:
            raise ValueError("an exception needs a specific_date")
        return self


@router.get("", response_model=List[Availability])
def get_availability(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
    employee_id: Optional[int] = Query(None, description="Defaults to the caller"),
):
    target_id = employee_id if employee_id is not None else user["uid"]

    if target_id != user["uid"] and not is_manager(user):
        raise Forbidden("You can only view your own availability.")

    return session.exec(
        select(Availability)
        .where(Availability.employee_id == target_id)
        .order_by(Availability.weekday, Availability.id)
    ).all()


@router.post("", response_model=Availability, status_code=status.HTTP_201_CREATED)
def set_availability(
    request: AvailabilityRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    """Replace the caller's entry for this weekday and kind (and date, for exceptions)."""
    query = (
        select(Availability)
        .where(Availability.employee_id == user["uid"])
        .where(Availability.weekday == request.weekday)
        .where(Availability.kind == request.kind)
    )
    if request.kind == AvailabilityKind.EXCEPTION:
        query = query.where(Availability.specific_date == request.specific_date)

    for entry in session.exec(query).all():
        session.delete(entry)

    availability = Availability(employee_id=user["uid"], **request.model_dump())
    session.add(availability)
    session.commit()
    session.refresh(availability)
    return availability
