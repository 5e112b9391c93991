import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from core.errors import InsufficientBalance, NotFound
from models.employee import Employee
from models.leave_request import LeaveRequest, LeaveStatus, LeaveType

logger = logging.getLogger(__name__)


def debit_vacation_days(session: Session, employee_id: int, days: float) -> None:
    """Subtract ``days`` from an employee's vacation balance inside the caller's transaction.

    The debit is a single conditional UPDATE, so it can never take the balance
    below zero even when two approvals race. Nothing is committed here.
    """
    if days <= 0:
        return

    result = session.exec(
        update(Employee)
        .where(Employee.id == employee_id)
        .where(Employee.vacation_balance >= days)
        .values(vacation_balance=Employee.vacation_balance - days)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        if session.get(Employee, employee_id) is None:
            raise NotFound(f"Employee {employee_id} not found.")
        raise InsufficientBalance(
            f"Approving would debit {days:g} vacation days, more than the employee has left."
        )

    logger.info("Debited %s vacation days from employee %s", days, employee_id)


def vacation_days_by_status(
    session: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[int, Dict[LeaveStatus, float]]:
    """Sum vacation day counts per employee and status.

    When a period is given, only requests lying entirely inside it are counted.
    """
    query = select(LeaveRequest).where(LeaveRequest.leave_type == LeaveType.VACATION)
    if start_date:
        query = query.where(LeaveRequest.start_date >= start_date)
    if end_date:
        query = query.where(LeaveRequest.end_date <= end_date)

    totals: Dict[int, Dict[LeaveStatus, float]] = defaultdict(lambda: defaultdict(float))
    for request in session.exec(query).all():
        totals[request.employee_id][request.status] += request.day_count

    return totals
