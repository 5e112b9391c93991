import logging
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_serializer, model_validator
from pydantic import Field as PydanticField
from sqlalchemy import update
from sqlmodel import Session, or_, select

from core.deps import get_current_user, is_manager, require_manager_role
from core.errors import BadRequest, Conflict, NotFound
from db.session import get_session
from models.employee import Employee
from models.notification import NotificationType
from models.shift import Shift, ShiftStatus
from models.shift_swap import ShiftSwap, SwapStatus
from models.time_registration import TimeRegistration
from services.notification_service import NotificationService
from utils.datetime_helpers import format_utc_datetime, utc_now
from utils.shift_hours import calculate_shift_hours

logger = logging.getLogger(__name__)

router = APIRouter()

# Swaps still waiting on the recipient or a manager
OPEN_SWAP_STATUSES = (SwapStatus.SENT, SwapStatus.ACCEPTED)

# --- Pydantic Models for Requests/Responses ---


class CreateShiftRequest(BaseModel):
    employee_id: int
    shift_date: date
    start_time: time
    end_time: time
    break_minutes: int = PydanticField(0, ge=0)
    department: Optional[str] = None
    status: ShiftStatus = ShiftStatus.DRAFT
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class UpdateShiftRequest(BaseModel):
    employee_id: Optional[int] = None
    shift_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: Optional[int] = PydanticField(None, ge=0)
    department: Optional[str] = None
    status: Optional[ShiftStatus] = None
    notes: Optional[str] = None


class PublishRequest(BaseModel):
    start_date: date
    end_date: date


class ShiftResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    shift_date: date
    start_time: time
    end_time: time
    break_minutes: int
    department: Optional[str] = None
    status: ShiftStatus
    notes: Optional[str] = None
    hours: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure timestamps are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


# --- Helper Functions ---


def to_response(shift: Shift, employee_name: Optional[str] = None) -> ShiftResponse:
    return ShiftResponse(
        **shift.model_dump(),
        employee_name=employee_name,
        hours=round(calculate_shift_hours(shift.start_time, shift.end_time, shift.break_minutes), 2),
    )


def get_active_employee(session: Session, employee_id: int) -> Employee:
    employee = session.get(Employee, employee_id)
    if employee is None or not employee.active:
        raise NotFound(f"Employee {employee_id} not found.")
    return employee


# --- API Endpoints ---


@router.get("", response_model=List[ShiftResponse])
def list_shifts(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
    start_date: Optional[date] = Query(None, description="Start date for filtering (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="End date for filtering (YYYY-MM-DD)"),
    employee_id: Optional[int] = Query(None, description="Filter by specific employee"),
):
    query = select(Shift, Employee.name).join(Employee, Employee.id == Shift.employee_id)

    if start_date:
        query = query.where(Shift.shift_date >= start_date)
    if end_date:
        query = query.where(Shift.shift_date <= end_date)
    if employee_id is not None:
        query = query.where(Shift.employee_id == employee_id)

    # Staff only see the published schedule plus their own shifts
    if not is_manager(user):
        query = query.where(
            or_(Shift.status == ShiftStatus.PUBLISHED, Shift.employee_id == user["uid"])
        )

    rows = session.exec(query.order_by(Shift.shift_date, Shift.start_time)).all()
    return [to_response(shift, name) for shift, name in rows]


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
def create_shift(
    request: CreateShiftRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    employee = get_active_employee(session, request.employee_id)

    shift = Shift(**request.model_dump())
    if shift.department is None:
        shift.department = employee.department

    session.add(shift)
    session.commit()
    session.refresh(shift)

    logger.info("Shift %s created for employee %s on %s", shift.id, shift.employee_id, shift.shift_date)
    return to_response(shift, employee.name)


@router.put("/{shift_id}", response_model=ShiftResponse)
def update_shift(
    shift_id: int,
    request: UpdateShiftRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    shift = session.get(Shift, shift_id)
    if shift is None:
        raise NotFound(f"Shift {shift_id} not found.")

    # department and notes may be cleared; everything else ignores explicit nulls
    changes = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key in ("department", "notes")
    }

    if "employee_id" in changes:
        get_active_employee(session, changes["employee_id"])

    start_time = changes.get("start_time", shift.start_time)
    end_time = changes.get("end_time", shift.end_time)
    if end_time <= start_time:
        raise BadRequest("End time must be after start time.")

    for field, value in changes.items():
        setattr(shift, field, value)

    shift.updated_at = utc_now()
    session.add(shift)
    session.commit()
    session.refresh(shift)

    employee = session.get(Employee, shift.employee_id)
    return to_response(shift, employee.name if employee else None)


@router.delete("/{shift_id}")
def delete_shift(
    shift_id: int,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Delete a shift. Shifts that take part in a swap are kept; time registrations are unlinked."""
    shift = session.get(Shift, shift_id)
    if shift is None:
        raise NotFound(f"Shift {shift_id} not found.")

    swaps = session.exec(
        select(ShiftSwap).where(
            or_(ShiftSwap.requester_shift_id == shift_id, ShiftSwap.recipient_shift_id == shift_id)
        )
    ).all()
    if any(swap.status in OPEN_SWAP_STATUSES for swap in swaps):
        raise Conflict("Shift is part of a pending shift swap; resolve the swap first.")
    if swaps:
        raise Conflict("Shift is part of the shift swap history and cannot be deleted.")

    # Registrations stand on their own once their planned shift is gone
    session.exec(
        update(TimeRegistration)
        .where(TimeRegistration.shift_id == shift_id)
        .values(shift_id=None)
        .execution_options(synchronize_session=False)
    )

    session.delete(shift)
    session.commit()

    logger.info("Shift %s deleted by %s", shift_id, manager["uid"])
    return {"status": "success", "message": f"Shift {shift_id} deleted."}


@router.post("/publish")
def publish_shifts(
    request: PublishRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Publish every draft shift in the period and tell the people who work in it."""
    if request.end_date < request.start_date:
        raise BadRequest("End date must be on or after the start date.")

    result = session.exec(
        update(Shift)
        .where(Shift.shift_date >= request.start_date)
        .where(Shift.shift_date <= request.end_date)
        .where(Shift.status == ShiftStatus.DRAFT)
        .values(status=ShiftStatus.PUBLISHED, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    published = result.rowcount

    employee_ids = session.exec(
        select(Shift.employee_id)
        .where(Shift.shift_date >= request.start_date)
        .where(Shift.shift_date <= request.end_date)
        .distinct()
    ).all()

    period = f"{request.start_date.isoformat()} to {request.end_date.isoformat()}"
    for employee_id in employee_ids:
        NotificationService.notify(
            session,
            employee_id,
            NotificationType.SCHEDULE,
            "New schedule published",
            f"The schedule for {period} has been published.",
            "/schedule",
        )

    session.commit()

    logger.info("Published %s shifts for %s by %s", published, period, manager["uid"])
    return {
        "status": "success",
        "message": f"Published {published} shifts.",
        "published_count": published,
        "notified_count": len(employee_ids),
    }
