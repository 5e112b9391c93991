import logging
import secrets
import string
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, field_serializer
from pydantic import Field as PydanticField
from sqlmodel import Session, select

from api.auth_routes import TokenResponse, issue_token
from core.config import FRONTEND_URL, INVITATION_VALID_DAYS, MIN_PASSWORD_LENGTH
from core.deps import require_manager_role
from core.errors import BadRequest, NotFound
from db.session import get_session
from models.employee import Employee, EmployeeRole
from models.invitation import Invitation
from services.employee_service import create_employee, find_by_email, normalize_email
from utils.datetime_helpers import ensure_utc, format_utc_datetime, utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

TOKEN_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 32


# --- Pydantic Models ---


class CreateInvitationRequest(BaseModel):
    email: EmailStr
    name: str = PydanticField(..., min_length=1)
    role: EmployeeRole = EmployeeRole.STAFF
    department: Optional[str] = None


class RegisterRequest(BaseModel):
    token: str
    password: str = PydanticField(..., min_length=MIN_PASSWORD_LENGTH)


class InvitationResponse(BaseModel):
    id: int
    email: str
    name: str
    token: str
    role: EmployeeRole
    department: Optional[str] = None
    used: bool
    expires_at: datetime
    created_by: int
    created_by_name: Optional[str] = None
    created_at: datetime
    link: str

    @field_serializer("created_at", "expires_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)


class InvitationPreview(BaseModel):
    email: str
    name: str
    department: Optional[str] = None


# --- Helper Functions ---


def generate_invitation_token() -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def registration_link(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/register/{token}"


def to_response(invitation: Invitation, created_by_name: Optional[str] = None) -> InvitationResponse:
    return InvitationResponse(
        **invitation.model_dump(),
        created_by_name=created_by_name,
        link=registration_link(invitation.token),
    )


def load_open_invitation(session: Session, token: str) -> Invitation:
    """Unused, unexpired invitation for ``token``."""
    invitation = session.exec(
        select(Invitation)
        .where(Invitation.token == token)
        .where(Invitation.used == False)  # noqa: E712
    ).first()

    if invitation is None:
        raise NotFound("Invitation not found or already used.")

    if ensure_utc(invitation.expires_at) < utc_now():
        raise BadRequest("Invitation has expired.")

    return invitation


# --- API Endpoints ---


@router.post("/invitations", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
def create_invitation(
    request: CreateInvitationRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    email = normalize_email(request.email)

    if find_by_email(session, email) is not None:
        raise BadRequest("Email address is already in use.")

    open_invite = session.exec(
        select(Invitation)
        .where(Invitation.email == email)
        .where(Invitation.used == False)  # noqa: E712
    ).first()
    if open_invite is not None:
        raise BadRequest("There is already an open invitation for this email address.")

    invitation = Invitation(
        email=email,
        name=request.name,
        token=generate_invitation_token(),
        role=request.role,
        department=request.department,
        expires_at=utc_now() + timedelta(days=INVITATION_VALID_DAYS),
        created_by=manager["uid"],
    )
    session.add(invitation)
    session.commit()
    session.refresh(invitation)

    logger.info("Invitation %s created for %s by %s", invitation.id, email, manager["uid"])
    return to_response(invitation)


@router.get("/invitations", response_model=List[InvitationResponse])
def list_invitations(
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    rows = session.exec(
        select(Invitation, Employee.name)
        .join(Employee, Employee.id == Invitation.created_by)
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
    ).all()
    return [to_response(invitation, name) for invitation, name in rows]


@router.delete("/invitations/{invitation_id}")
def delete_invitation(
    invitation_id: int,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    invitation = session.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFound(f"Invitation {invitation_id} not found.")

    session.delete(invitation)
    session.commit()
    return {"status": "success", "message": f"Invitation {invitation_id} deleted."}


@router.get("/invitations/verify/{token}", response_model=InvitationPreview)
def verify_invitation(token: str, session: Session = Depends(get_session)):
    """Public: what the registration page shows before the password is chosen."""
    invitation = load_open_invitation(session, token)
    return InvitationPreview(email=invitation.email, name=invitation.name, department=invitation.department)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, session: Session = Depends(get_session)):
    """Public: turn an invitation into an account and log the new employee in."""
    invitation = load_open_invitation(session, request.token)

    employee = create_employee(
        session,
        name=invitation.name,
        email=invitation.email,
        password=request.password,
        role=invitation.role,
        department=invitation.department,
        commit=False,
    )
    invitation.used = True
    session.add(invitation)
    session.commit()
    session.refresh(employee)

    logger.info("Invitation %s redeemed by new employee %s", invitation.id, employee.id)
    return issue_token(employee)
