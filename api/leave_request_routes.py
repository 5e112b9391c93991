from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_serializer, model_validator
from sqlmodel import Session, select

from core.deps import get_current_user, is_manager, require_manager_role
from db.session import get_session
from models.employee import Employee
from models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from services.leave_service import LeaveService
from utils.datetime_helpers import format_utc_datetime

router = APIRouter()

# --- Pydantic Models for API Requests ---


class LeaveSubmitRequest(BaseModel):
    start_date: date
    end_date: date
    leave_type: LeaveType
    note: Optional[str] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveProcessRequest(BaseModel):
    status: LeaveStatus
    comment: Optional[str] = None


# --- Response Models ---


class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    start_date: date
    end_date: date
    leave_type: LeaveType
    status: LeaveStatus
    day_count: float
    note: Optional[str] = None
    reviewed_by: Optional[int] = None
    review_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at", "reviewed_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure timestamps are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


def to_response(leave_request: LeaveRequest, employee_name: Optional[str] = None) -> LeaveRequestResponse:
    return LeaveRequestResponse(**leave_request.model_dump(), employee_name=employee_name)


# --- API Endpoints ---


@router.get("", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    employee_id: Optional[int] = Query(None, description="Managers only: filter by employee"),
):
    """Staff see their own requests; managers see everyone's."""
    query = select(LeaveRequest, Employee.name).join(Employee, Employee.id == LeaveRequest.employee_id)

    if not is_manager(user):
        query = query.where(LeaveRequest.employee_id == user["uid"])
    elif employee_id is not None:
        query = query.where(LeaveRequest.employee_id == employee_id)

    if status_filter is not None:
        query = query.where(LeaveRequest.status == status_filter)

    rows = session.exec(query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())).all()
    return [to_response(leave_request, name) for leave_request, name in rows]


@router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    request: LeaveSubmitRequest,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    leave_request = LeaveService.submit(
        session,
        employee_id=user["uid"],
        start_date=request.start_date,
        end_date=request.end_date,
        leave_type=request.leave_type,
        note=request.note,
    )
    return to_response(leave_request)


@router.post("/{request_id}/process", response_model=LeaveRequestResponse)
def process_leave_request(
    request_id: int,
    request: LeaveProcessRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Approve or reject a pending request. Approving vacation debits the balance."""
    leave_request = LeaveService.process(
        session,
        manager_id=manager["uid"],
        request_id=request_id,
        decision=request.status,
        comment=request.comment,
    )
    return to_response(leave_request)


@router.delete("/{request_id}", response_model=LeaveRequestResponse)
def cancel_leave_request(
    request_id: int,
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    """Cancel one of your own pending requests."""
    leave_request = LeaveService.cancel(session, employee_id=user["uid"], request_id=request_id)
    return to_response(leave_request)
