import logging
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from core.errors import BadRequest, Conflict, Forbidden, InvalidState, NotFound
from models.employee import Employee
from models.notification import NotificationType
from models.shift import Shift
from models.shift_swap import ShiftSwap, SwapStatus
from services.notification_service import NotificationService
from utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

SWAP_LINK = "/shift-swaps"

# Recipient answers and manager decisions, mapped onto the resulting state
RESPONSE_ACTIONS = {"accept": SwapStatus.ACCEPTED, "decline": SwapStatus.DECLINED}
APPROVAL_ACTIONS = {"approve": SwapStatus.APPROVED, "reject": SwapStatus.REJECTED}


def _reassign_shift(session: Session, shift_id: int, from_employee_id: int, to_employee_id: int) -> None:
    """Move a shift to another employee, provided it still belongs to ``from_employee_id``."""
    result = session.exec(
        update(Shift)
        .where(Shift.id == shift_id)
        .where(Shift.employee_id == from_employee_id)
        .values(employee_id=to_employee_id, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict(f"Shift {shift_id} no longer belongs to employee {from_employee_id}.")


def _transition(session: Session, swap_id: int, expected: SwapStatus, new_status: SwapStatus, **values) -> None:
    """Check-and-set the swap status; fails with Conflict if someone else moved it first."""
    result = session.exec(
        update(ShiftSwap)
        .where(ShiftSwap.id == swap_id)
        .where(ShiftSwap.status == expected)
        .values(status=new_status, updated_at=utc_now(), **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict("Shift swap was changed by someone else.")


class ShiftSwapService:
    """Swap lifecycle: sent -> accepted | declined, accepted -> approved | rejected."""

    @staticmethod
    def _get_swap(session: Session, swap_id: int) -> ShiftSwap:
        swap = session.get(ShiftSwap, swap_id)
        if swap is None:
            raise NotFound(f"Shift swap {swap_id} not found.")
        return swap

    @staticmethod
    def _check_recipient_shift(session: Session, shift_id: int, recipient_id: int) -> None:
        shift = session.get(Shift, shift_id)
        if shift is None:
            raise NotFound(f"Shift {shift_id} not found.")
        if shift.employee_id != recipient_id:
            raise BadRequest("The counter-shift must belong to the recipient.")

    @staticmethod
    def create(
        session: Session,
        requester_id: int,
        requester_shift_id: int,
        recipient_id: int,
        note: Optional[str] = None,
        recipient_shift_id: Optional[int] = None,
    ) -> ShiftSwap:
        shift = session.get(Shift, requester_shift_id)
        if shift is None:
            raise NotFound(f"Shift {requester_shift_id} not found.")

        if shift.employee_id != requester_id:
            raise Forbidden("You can only offer your own shifts for a swap.")

        if recipient_id == requester_id:
            raise BadRequest("You cannot swap a shift with yourself.")

        recipient = session.get(Employee, recipient_id)
        if recipient is None or not recipient.active:
            raise NotFound(f"Employee {recipient_id} not found.")

        if recipient_shift_id is not None:
            ShiftSwapService._check_recipient_shift(session, recipient_shift_id, recipient_id)

        swap = ShiftSwap(
            requester_id=requester_id,
            recipient_id=recipient_id,
            requester_shift_id=requester_shift_id,
            recipient_shift_id=recipient_shift_id,
            status=SwapStatus.SENT,
            note=note,
        )
        session.add(swap)

        NotificationService.notify(
            session,
            recipient_id,
            NotificationType.SHIFT_SWAP,
            "New shift swap request",
            f"You have been asked to take over the shift on {shift.shift_date.isoformat()}.",
            SWAP_LINK,
        )

        session.commit()
        session.refresh(swap)

        logger.info(
            "Shift swap %s created: shift %s from employee %s to %s",
            swap.id, requester_shift_id, requester_id, recipient_id,
        )
        return swap

    @staticmethod
    def respond(
        session: Session,
        recipient_id: int,
        swap_id: int,
        action: str,
        recipient_shift_id: Optional[int] = None,
    ) -> ShiftSwap:
        new_status = RESPONSE_ACTIONS.get(action)
        if new_status is None:
            raise BadRequest("Action must be 'accept' or 'decline'.")

        swap = ShiftSwapService._get_swap(session, swap_id)

        if swap.recipient_id != recipient_id:
            raise Forbidden("Only the recipient can respond to this swap.")

        if swap.status != SwapStatus.SENT:
            raise InvalidState(f"Shift swap is already {swap.status.value}.")

        values = {}
        if new_status == SwapStatus.ACCEPTED and recipient_shift_id is not None:
            ShiftSwapService._check_recipient_shift(session, recipient_shift_id, recipient_id)
            values["recipient_shift_id"] = recipient_shift_id

        requester_id = swap.requester_id
        try:
            _transition(session, swap_id, SwapStatus.SENT, new_status, **values)
            NotificationService.notify(
                session,
                requester_id,
                NotificationType.SHIFT_SWAP,
                f"Shift swap {new_status.value}",
                f"Your shift swap request has been {new_status.value}.",
                SWAP_LINK,
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(swap)
        logger.info("Shift swap %s %s by employee %s", swap_id, new_status.value, recipient_id)
        return swap

    @staticmethod
    def approve(session: Session, manager_id: int, swap_id: int, action: str) -> ShiftSwap:
        new_status = APPROVAL_ACTIONS.get(action)
        if new_status is None:
            raise BadRequest("Action must be 'approve' or 'reject'.")

        swap = ShiftSwapService._get_swap(session, swap_id)

        # Only swaps the recipient has accepted reach a manager
        if swap.status != SwapStatus.ACCEPTED:
            logger.warning("Refused to %s shift swap %s in state %s", action, swap_id, swap.status.value)
            raise InvalidState(f"Shift swap is {swap.status.value}, not awaiting approval.")

        requester_id = swap.requester_id
        recipient_id = swap.recipient_id
        requester_shift_id = swap.requester_shift_id
        recipient_shift_id = swap.recipient_shift_id

        try:
            _transition(session, swap_id, SwapStatus.ACCEPTED, new_status, reviewed_by=manager_id)

            if new_status == SwapStatus.APPROVED:
                _reassign_shift(session, requester_shift_id, requester_id, recipient_id)

                # Without a counter-shift the recipient simply takes over the shift
                if recipient_shift_id is not None:
                    _reassign_shift(session, recipient_shift_id, recipient_id, requester_id)

            for party_id in (requester_id, recipient_id):
                NotificationService.notify(
                    session,
                    party_id,
                    NotificationType.SHIFT_SWAP,
                    f"Shift swap {new_status.value}",
                    f"The shift swap has been {new_status.value} by a manager.",
                    SWAP_LINK,
                )
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(swap)
        logger.info("Shift swap %s %s by manager %s", swap_id, new_status.value, manager_id)
        return swap
