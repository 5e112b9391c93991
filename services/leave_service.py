import logging
from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from core.errors import (
    BadRequest,
    Conflict,
    Forbidden,
    InsufficientBalance,
    InvalidState,
    NotFound,
)
from models.employee import Employee
from models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from models.notification import NotificationType
from services.balance_ledger import debit_vacation_days
from services.notification_service import NotificationService
from utils.datetime_helpers import utc_now
from utils.workdays import count_weekdays

logger = logging.getLogger(__name__)

LEAVE_TYPE_LABELS = {
    LeaveType.VACATION: "vacation",
    LeaveType.CARE_LEAVE: "care leave",
    LeaveType.SPECIAL_LEAVE: "special leave",
    LeaveType.UNPAID_LEAVE: "unpaid leave",
    LeaveType.SICK: "sick leave",
}

# Decisions a manager can take on a pending request
LEAVE_DECISIONS = (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


class LeaveService:
    """Lifecycle of a leave request: pending -> approved | rejected | cancelled."""

    @staticmethod
    def submit(
        session: Session,
        employee_id: int,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        note: Optional[str] = None,
    ) -> LeaveRequest:
        if end_date < start_date:
            raise BadRequest("End date must be on or after the start date.")

        employee = session.get(Employee, employee_id)
        if employee is None or not employee.active:
            raise NotFound(f"Employee {employee_id} not found.")

        day_count = count_weekdays(start_date, end_date)

        # Vacation is checked against the balance as it stands right now
        if leave_type == LeaveType.VACATION and day_count > employee.vacation_balance:
            logger.warning(
                "Employee %s asked for %s vacation days with a balance of %s",
                employee_id, day_count, employee.vacation_balance,
            )
            raise InsufficientBalance(
                f"Requested {day_count} vacation days but only {employee.vacation_balance:g} are left."
            )

        leave_request = LeaveRequest(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=LeaveStatus.PENDING,
            day_count=day_count,
            note=note,
        )
        session.add(leave_request)

        label = LEAVE_TYPE_LABELS[leave_type]
        NotificationService.notify_managers(
            session,
            NotificationType.LEAVE,
            "New leave request",
            f"{employee.name} requested {label} from {start_date.isoformat()} to {end_date.isoformat()}.",
            "/vacation/manage",
        )

        session.commit()
        session.refresh(leave_request)

        logger.info(
            "Leave request %s submitted by employee %s (%s, %s days)",
            leave_request.id, employee_id, leave_type.value, day_count,
        )
        return leave_request

    @staticmethod
    def process(
        session: Session,
        manager_id: int,
        request_id: int,
        decision: LeaveStatus,
        comment: Optional[str] = None,
    ) -> LeaveRequest:
        if decision not in LEAVE_DECISIONS:
            raise BadRequest("Decision must be 'approved' or 'rejected'.")

        leave_request = session.get(LeaveRequest, request_id)
        if leave_request is None:
            raise NotFound(f"Leave request {request_id} not found.")

        if leave_request.status != LeaveStatus.PENDING:
            logger.warning(
                "Refused to process leave request %s in state %s",
                request_id, leave_request.status.value,
            )
            raise InvalidState(f"Leave request is already {leave_request.status.value}.")

        employee_id = leave_request.employee_id
        leave_type = leave_request.leave_type
        day_count = leave_request.day_count

        try:
            # Check-and-set: only the first processor moves it out of pending
            now = utc_now()
            result = session.exec(
                update(LeaveRequest)
                .where(LeaveRequest.id == request_id)
                .where(LeaveRequest.status == LeaveStatus.PENDING)
                .values(
                    status=decision,
                    reviewed_by=manager_id,
                    review_comment=comment,
                    reviewed_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise Conflict("Leave request was processed by someone else.")

            if decision == LeaveStatus.APPROVED and leave_type == LeaveType.VACATION:
                debit_vacation_days(session, employee_id, day_count)

            NotificationService.notify(
                session,
                employee_id,
                NotificationType.LEAVE,
                f"Leave request {decision.value}",
                f"Your {LEAVE_TYPE_LABELS[leave_type]} request has been {decision.value}.",
                "/vacation",
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(leave_request)
        logger.info("Leave request %s %s by %s", request_id, decision.value, manager_id)
        return leave_request

    @staticmethod
    def cancel(session: Session, employee_id: int, request_id: int) -> LeaveRequest:
        leave_request = session.get(LeaveRequest, request_id)
        if leave_request is None:
            raise NotFound(f"Leave request {request_id} not found.")

        if leave_request.employee_id != employee_id:
            raise Forbidden("You can only cancel your own leave requests.")

        if leave_request.status != LeaveStatus.PENDING:
            raise InvalidState("Only pending leave requests can be cancelled.")

        result = session.exec(
            update(LeaveRequest)
            .where(LeaveRequest.id == request_id)
            .where(LeaveRequest.status == LeaveStatus.PENDING)
            .values(status=LeaveStatus.CANCELLED, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            session.rollback()
            raise Conflict("Leave request was processed by someone else.")

        session.commit()
        session.refresh(leave_request)

        logger.info("Leave request %s cancelled by employee %s", request_id, employee_id)
        return leave_request
