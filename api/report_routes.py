from collections import defaultdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from core.deps import require_manager_role
from core.errors import BadRequest
from db.session import get_session
from models.employee import Employee
from models.leave_request import LeaveStatus
from models.shift import Shift, ShiftStatus
from services.balance_ledger import vacation_days_by_status
from utils.shift_hours import total_shift_hours

router = APIRouter()


class HoursReportRow(BaseModel):
    employee_id: int
    name: str
    department: Optional[str] = None
    shift_count: int
    total_hours: float


class LeaveReportRow(BaseModel):
    employee_id: int
    name: str
    vacation_balance: float
    days_taken: float
    days_pending: float


def active_employees(session: Session) -> List[Employee]:
    return session.exec(
        select(Employee).where(Employee.active == True).order_by(Employee.name)  # noqa: E712
    ).all()


@router.get("/hours", response_model=List[HoursReportRow])
def hours_report(
    start_date: date = Query(..., description="Start date (YYYY-MM-DD)"),
    end_date: date = Query(..., description="End date (YYYY-MM-DD)"),
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Published shifts and scheduled hours (net of breaks) per active employee."""
    if end_date < start_date:
        raise BadRequest("End date must be on or after the start date.")

    shifts = session.exec(
        select(Shift)
        .where(Shift.shift_date >= start_date)
        .where(Shift.shift_date <= end_date)
        .where(Shift.status == ShiftStatus.PUBLISHED)
    ).all()

    shifts_by_employee = defaultdict(list)
    for shift in shifts:
        shifts_by_employee[shift.employee_id].append(shift)

    report = []
    for employee in active_employees(session):
        own_shifts = shifts_by_employee.get(employee.id, [])
        total_hours = total_shift_hours(own_shifts)
        report.append(HoursReportRow(
            employee_id=employee.id,
            name=employee.name,
            department=employee.department,
            shift_count=len(own_shifts),
            total_hours=round(total_hours, 2),
        ))

    return report


@router.get("/leave", response_model=List[LeaveReportRow])
def leave_report(
    year: int = Query(..., ge=1970, le=9999),
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Vacation balance plus approved and pending vacation days per active employee."""
    totals = vacation_days_by_status(session, date(year, 1, 1), date(year, 12, 31))

    report = []
    for employee in active_employees(session):
        by_status = totals.get(employee.id, {})
        report.append(LeaveReportRow(
            employee_id=employee.id,
            name=employee.name,
            vacation_balance=employee.vacation_balance,
            days_taken=by_status.get(LeaveStatus.APPROVED, 0.0),
            days_pending=by_status.get(LeaveStatus.PENDING, 0.0),
        ))

    return report
