from datetime import date, datetime, time
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_serializer
from sqlalchemy.orm import aliased
from sqlmodel import Session, or_, select

from core.deps import get_current_user, is_manager, require_manager_role
from db.session import get_session
from models.employee import Employee
from models.shift import Shift
from models.shift_swap import ShiftSwap, SwapStatus
from services.swap_service import ShiftSwapService
from utils.datetime_helpers import format_utc_datetime

router = APIRouter()

# --- Pydantic Models for Requests ---


class CreateShiftSwapRequest(BaseModel):
    requester_shift_id: int
    recipient_id: int
    recipient_shift_id: Optional[int] = None
    note: Optional[str] = None


class RespondShiftSwapRequest(BaseModel):
    action: Literal["accept", "decline"]
    # The recipient may offer one of their own shifts in return when accepting
    recipient_shift_id: Optional[int] = None


class ApproveShiftSwapRequest(BaseModel):
    action: Literal["approve", "reject"]


# --- Response Models ---


class ShiftSwapResponse(BaseModel):
    id: int
    requester_id: int
    recipient_id: int
    requester_shift_id: int
    recipient_shift_id: Optional[int] = None
    status: SwapStatus
    note: Optional[str] = None
    reviewed_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure timestamps are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


class ShiftSwapDetailResponse(ShiftSwapResponse):
    requester_name: str
    recipient_name: str

    requester_shift_date: date
    requester_shift_start: time
    requester_shift_end: time

    recipient_shift_date: Optional[date] = None
    recipient_shift_start: Optional[time] = None
    recipient_shift_end: Optional[time] = None


def to_response(swap: ShiftSwap) -> ShiftSwapResponse:
    return ShiftSwapResponse(**swap.model_dump())


# --- API Endpoints ---


@router.get("", response_model=List[ShiftSwapDetailResponse])
def list_shift_swaps(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    """Staff see swaps they are party to; managers see all of them."""
    requester = aliased(Employee)
    recipient = aliased(Employee)
    requester_shift = aliased(Shift)
    recipient_shift = aliased(Shift)

    query = (
        select(ShiftSwap, requester.name, recipient.name, requester_shift, recipient_shift)
        .join(requester, requester.id == ShiftSwap.requester_id)
        .join(recipient, recipient.id == ShiftSwap.recipient_id)
        .join(requester_shift, requester_shift.id == ShiftSwap.requester_shift_id)
        .outerjoin(recipient_shift, recipient_shift.id == ShiftSwap.recipient_shift_id)
    )

    if not is_manager(user):
        query = query.where(
            or_(ShiftSwap.requester_id == user["uid"], ShiftSwap.recipient_id == user["uid"])
        )

    rows = session.exec(query.order_by(ShiftSwap.created_at.desc(), ShiftSwap.id.desc())).all()

    response_list = []
    for swap, requester_name, recipient_name, offered, counter in rows:
        response_list.append(ShiftSwapDetailResponse(
            **swap.model_dump(),
            requester_name=requester_name,
            recipient_name=recipient_name,
            requester_shift_date=offered.shift_date,
            requester_shift_start=offered.start_time,
            requester_shift_end=offered.end_time,
            recipient_shift_date=counter.shift_date if counter else None,
            recipient_shift_start=counter.start_time if counter else None,
            recipient_shift_end=counter.end_time if counter else None,
        ))

    return response_list


@router.post("", response_model=ShiftSwapResponse, status_code=status.HTTP_201_CREATED)
def create_shift_swap(
    request: CreateShiftSwapRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    swap = ShiftSwapService.create(
        session,
        requester_id=user["uid"],
        requester_shift_id=request.requester_shift_id,
        recipient_id=request.recipient_id,
        note=request.note,
        recipient_shift_id=request.recipient_shift_id,
    )
    return to_response(swap)


@router.post("/{swap_id}/respond", response_model=ShiftSwapResponse)
def respond_to_shift_swap(
    swap_id: int,
    request: RespondShiftSwapRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    swap = ShiftSwapService.respond(
        session,
        recipient_id=user["uid"],
        swap_id=swap_id,
        action=request.action,
        recipient_shift_id=request.recipient_shift_id,
    )
    return to_response(swap)


@router.post("/{swap_id}/approve", response_model=ShiftSwapResponse)
def approve_shift_swap(
    swap_id: int,
    request: ApproveShiftSwapRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    swap = ShiftSwapService.approve(session, manager_id=manager["uid"], swap_id=swap_id, action=request.action)
    return to_response(swap)
