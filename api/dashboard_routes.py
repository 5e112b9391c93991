from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session, func, select

from api.shift_routes import ShiftResponse, to_response
from core.deps import get_current_user, is_manager
from db.session import get_session
from models.leave_request import LeaveRequest, LeaveStatus
from models.shift import Shift, ShiftStatus
from utils.datetime_helpers import week_bounds
from utils.shift_hours import total_shift_hours

router = APIRouter()

UPCOMING_SHIFT_LIMIT = 5


class DashboardStats(BaseModel):
    shifts_today: int
    employees_today: int
    pending_leave_requests: int
    # Only filled in for managers
    hours_this_week: Optional[float] = None
    my_shifts_this_week: List[ShiftResponse]
    upcoming_shifts: List[ShiftResponse]


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    today = date.today()
    week_start, week_end = week_bounds(today)

    shifts_today = session.exec(
        select(func.count(Shift.id))
        .where(Shift.shift_date == today)
        .where(Shift.status == ShiftStatus.PUBLISHED)
    ).one()

    employees_today = session.exec(
        select(func.count(func.distinct(Shift.employee_id)))
        .where(Shift.shift_date == today)
        .where(Shift.status == ShiftStatus.PUBLISHED)
    ).one()

    pending_leave_requests = session.exec(
        select(func.count(LeaveRequest.id)).where(LeaveRequest.status == LeaveStatus.PENDING)
    ).one()

    hours_this_week = None
    if is_manager(user):
        week_shifts = session.exec(
            select(Shift)
            .where(Shift.shift_date >= week_start)
            .where(Shift.shift_date <= week_end)
            .where(Shift.status == ShiftStatus.PUBLISHED)
        ).all()
        hours_this_week = round(total_shift_hours(week_shifts), 2)

    my_week = session.exec(
        select(Shift)
        .where(Shift.employee_id == user["uid"])
        .where(Shift.shift_date >= week_start)
        .where(Shift.shift_date <= week_end)
        .order_by(Shift.shift_date, Shift.start_time)
    ).all()

    upcoming = session.exec(
        select(Shift)
        .where(Shift.employee_id == user["uid"])
        .where(Shift.shift_date >= today)
        .order_by(Shift.shift_date, Shift.start_time)
        .limit(UPCOMING_SHIFT_LIMIT)
    ).all()

    return DashboardStats(
        shifts_today=shifts_today,
        employees_today=employees_today,
        pending_leave_requests=pending_leave_requests,
        hours_this_week=hours_this_week,
        my_shifts_this_week=[to_response(shift) for shift in my_week],
        upcoming_shifts=[to_response(shift) for shift in upcoming],
    )
