import logging
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_serializer
from pydantic import Field as PydanticField
from sqlmodel import Session, select

from core.deps import get_current_user, is_manager
from core.errors import BadRequest, Forbidden, NotFound
from db.session import get_session
from models.employee import Employee
from models.shift import Shift
from models.time_registration import TimeRegistration
from utils.datetime_helpers import format_utc_datetime
from utils.shift_hours import worked_hours

logger = logging.getLogger(__name__)

router = APIRouter()

# --- Pydantic Models for Request Payloads ---


class ManualRegistrationRequest(BaseModel):
    work_date: date
    check_in: time
    check_out: Optional[time] = None
    break_minutes: int = PydanticField(0, ge=0)
    notes: Optional[str] = None


class UpdateRegistrationRequest(BaseModel):
    check_in: Optional[time] = None
    check_out: Optional[time] = None
    break_minutes: Optional[int] = PydanticField(None, ge=0)
    approved: Optional[bool] = None
    notes: Optional[str] = None


class TimeRegistrationResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    shift_id: Optional[int] = None
    planned_start: Optional[time] = None
    planned_end: Optional[time] = None
    work_date: date
    check_in: Optional[time] = None
    check_out: Optional[time] = None
    break_minutes: int
    worked_hours: Optional[float] = None
    approved: bool
    notes: Optional[str] = None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> Optional[str]:
        return format_utc_datetime(dt)


# --- Helper Functions ---


def local_now() -> datetime:
    """Wall-clock time of the server; the time clock records local times of day."""
    return datetime.now()


def to_response(
    registration: TimeRegistration,
    employee_name: Optional[str] = None,
    shift: Optional[Shift] = None,
) -> TimeRegistrationResponse:
    hours = worked_hours(registration.check_in, registration.check_out, registration.break_minutes)
    return TimeRegistrationResponse(
        **registration.model_dump(),
        employee_name=employee_name,
        planned_start=shift.start_time if shift else None,
        planned_end=shift.end_time if shift else None,
        worked_hours=round(hours, 2) if hours is not None else None,
    )


def find_shift_for_day(session: Session, employee_id: int, work_date: date) -> Optional[Shift]:
    return session.exec(
        select(Shift)
        .where(Shift.employee_id == employee_id)
        .where(Shift.shift_date == work_date)
        .order_by(Shift.start_time)
    ).first()


def find_open_registration(session: Session, employee_id: int, work_date: date) -> Optional[TimeRegistration]:
    return session.exec(
        select(TimeRegistration)
        .where(TimeRegistration.employee_id == employee_id)
        .where(TimeRegistration.work_date == work_date)
        .where(TimeRegistration.check_out == None)  # noqa: E711
    ).first()


def get_owned_registration(session: Session, registration_id: int, user: dict) -> TimeRegistration:
    registration = session.get(TimeRegistration, registration_id)
    if registration is None:
        raise NotFound(f"Time registration {registration_id} not found.")

    # Only owner or manager can touch a registration
    if not is_manager(user) and registration.employee_id != user["uid"]:
        raise Forbidden("You can only change your own time registrations.")

    return registration


# --- API Endpoints ---


@router.get("", response_model=List[TimeRegistrationResponse])
def list_time_registrations(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
    start_date: Optional[date] = Query(None, description="Start date for filtering (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="End date for filtering (YYYY-MM-DD)"),
    employee_id: Optional[int] = Query(None, description="Managers only: filter by employee"),
):
    query = (
        select(TimeRegistration, Employee.name, Shift)
        .join(Employee, Employee.id == TimeRegistration.employee_id)
        .outerjoin(Shift, Shift.id == TimeRegistration.shift_id)
    )

    # Non-managers can only see their own registrations
    if not is_manager(user):
        query = query.where(TimeRegistration.employee_id == user["uid"])
    elif employee_id is not None:
        query = query.where(TimeRegistration.employee_id == employee_id)

    if start_date:
        query = query.where(TimeRegistration.work_date >= start_date)
    if end_date:
        query = query.where(TimeRegistration.work_date <= end_date)

    rows = session.exec(
        query.order_by(TimeRegistration.work_date.desc(), TimeRegistration.check_in.desc())
    ).all()
    return [to_response(registration, name, shift) for registration, name, shift in rows]


@router.post("/checkin", response_model=TimeRegistrationResponse, status_code=status.HTTP_201_CREATED)
def check_in(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    now = local_now()
    today = now.date()

    if find_open_registration(session, user["uid"], today) is not None:
        raise BadRequest("You are already checked in today.")

    shift = find_shift_for_day(session, user["uid"], today)
    registration = TimeRegistration(
        employee_id=user["uid"],
        shift_id=shift.id if shift else None,
        work_date=today,
        check_in=now.time().replace(second=0, microsecond=0),
    )
    session.add(registration)
    session.commit()
    session.refresh(registration)

    logger.info("Employee %s checked in at %s", user["uid"], registration.check_in)
    return to_response(registration, shift=shift)


@router.post("/checkout", response_model=TimeRegistrationResponse)
def check_out(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    now = local_now()

    registration = find_open_registration(session, user["uid"], now.date())
    if registration is None:
        raise BadRequest("You have not checked in today.")

    registration.check_out = now.time().replace(second=0, microsecond=0)
    session.add(registration)
    session.commit()
    session.refresh(registration)

    logger.info("Employee %s checked out at %s", user["uid"], registration.check_out)
    shift = session.get(Shift, registration.shift_id) if registration.shift_id else None
    return to_response(registration, shift=shift)


@router.post("", response_model=TimeRegistrationResponse, status_code=status.HTTP_201_CREATED)
def create_manual_registration(
    request: ManualRegistrationRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    if request.check_out is not None and request.check_out <= request.check_in:
        raise BadRequest("Check-out must be after check-in.")

    shift = find_shift_for_day(session, user["uid"], request.work_date)
    registration = TimeRegistration(
        employee_id=user["uid"],
        shift_id=shift.id if shift else None,
        **request.model_dump(),
    )
    session.add(registration)
    session.commit()
    session.refresh(registration)
    return to_response(registration, shift=shift)


@router.put("/{registration_id}", response_model=TimeRegistrationResponse)
def update_registration(
    registration_id: int,
    request: UpdateRegistrationRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    registration = get_owned_registration(session, registration_id, user)
    changes = request.model_dump(exclude_unset=True)

    if "approved" in changes and not is_manager(user):
        raise Forbidden("Only managers can approve time registrations.")

    check_in_time = changes.get("check_in", registration.check_in)
    check_out_time = changes.get("check_out", registration.check_out)
    if check_in_time and check_out_time and check_out_time <= check_in_time:
        raise BadRequest("Check-out must be after check-in.")

    for field, value in changes.items():
        if value is None and field in ("break_minutes", "approved"):
            continue
        setattr(registration, field, value)

    session.add(registration)
    session.commit()
    session.refresh(registration)

    shift = session.get(Shift, registration.shift_id) if registration.shift_id else None
    return to_response(registration, shift=shift)


@router.delete("/{registration_id}")
def delete_registration(
    registration_id: int,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    registration = get_owned_registration(session, registration_id, user)
    session.delete(registration)
    session.commit()
    return {"status": "success", "message": f"Time registration {registration_id} deleted."}
