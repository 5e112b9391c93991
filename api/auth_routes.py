import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr
from pydantic import Field as PydanticField
from sqlmodel import Session

from core.config import MIN_PASSWORD_LENGTH
from core.deps import get_current_user
from core.errors import BadRequest, NotFound, Unauthenticated
from core.security import create_access_token, hash_password, verify_password
from db.session import get_session
from models.employee import Employee, EmployeeRead, EmployeeRole
from services.employee_service import create_employee, employee_count, find_by_email
from utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Pydantic Models for API Requests ---


class SetupAdminRequest(BaseModel):
    name: str = PydanticField(..., min_length=1)
    email: EmailStr
    password: str = PydanticField(..., min_length=MIN_PASSWORD_LENGTH)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = PydanticField(None, min_length=1)
    phone: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = PydanticField(..., min_length=MIN_PASSWORD_LENGTH)


# --- Response Models ---


class TokenResponse(BaseModel):
    token: str
    user: EmployeeRead


def issue_token(employee: Employee) -> TokenResponse:
    return TokenResponse(
        token=create_access_token(employee.id, employee.email, employee.role.value),
        user=EmployeeRead.model_validate(employee, from_attributes=True),
    )


def load_current_employee(session: Session, user: dict) -> Employee:
    employee = session.get(Employee, user["uid"])
    if employee is None:
        raise NotFound("User profile not found.")
    return employee


# --- API Endpoints ---


@router.post("/setup-admin", status_code=status.HTTP_201_CREATED)
def setup_admin(request: SetupAdminRequest, session: Session = Depends(get_session)):
    """Create the first manager account. Only works while no accounts exist."""
    if employee_count(session) > 0:
        raise BadRequest("An administrator account already exists.")

    employee = create_employee(
        session,
        name=request.name,
        email=request.email,
        password=request.password,
        role=EmployeeRole.MANAGER,
        department="Management",
    )
    return {"status": "success", "message": "Administrator account created.", "email": employee.email}


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, session: Session = Depends(get_session)):
    employee = find_by_email(session, request.email)

    # Same answer for unknown, inactive and wrong-password accounts
    if employee is None or not employee.active or not verify_password(request.password, employee.password_hash):
        logger.warning("Failed login for %s", request.email)
        raise Unauthenticated("Invalid email or password")

    return issue_token(employee)


@router.get("/me", response_model=EmployeeRead)
def get_me(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    return load_current_employee(session, user)


@router.put("/profile", response_model=EmployeeRead)
def update_profile(
    request: ProfileUpdateRequest,
    user: Annotated[dict, Depends(get_current_user)],
    session: Session = Depends(get_session),
):
    employee = load_current_employee(session, user)

    if request.name is not None:
        employee.name = request.name
    if request.phone is not None:
        employee.phone = request.phone

    employee.updated_at = utc_now()
    session.add(employee)
    session.commit()
    session.refresh(employee)
    return employee


@router.post("/change-password")
def change_password(
    request: ChangePasswordRequest,
    user: Annotated[dict, Depends(get_current_user)],
    session: Session = Depends(get_session),
):
    employee = load_current_employee(session, user)

    if not verify_password(request.current_password, employee.password_hash):
        raise BadRequest("Current password is incorrect.")

    employee.password_hash = hash_password(request.new_password)
    employee.updated_at = utc_now()
    session.add(employee)
    session.commit()

    logger.info("Employee %s changed their password", employee.id)
    return {"status": "success", "message": "Password changed."}
