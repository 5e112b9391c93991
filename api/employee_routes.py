import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr
from pydantic import Field as PydanticField
from sqlmodel import Session, select

from core.config import MIN_PASSWORD_LENGTH
from core.deps import get_current_user, require_manager_role
from core.errors import BadRequest, NotFound
from core.security import hash_password
from db.session import get_session
from models.employee import Employee, EmployeeRead, EmployeeRole
from services.employee_service import create_employee, find_by_email, normalize_email
from utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


# Model For the directory every employee may see
class EmployeeDirectoryEntry(BaseModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None
    role: EmployeeRole


class CreateEmployeeRequest(BaseModel):
    name: str = PydanticField(..., min_length=1)
    email: EmailStr
    password: str = PydanticField(..., min_length=MIN_PASSWORD_LENGTH)
    role: EmployeeRole = EmployeeRole.STAFF
    department: Optional[str] = None
    phone: Optional[str] = None
    contract_hours: Optional[float] = PydanticField(None, ge=0)
    hourly_wage: Optional[float] = PydanticField(None, ge=0)
    vacation_balance: Optional[float] = None


class UpdateEmployeeRequest(BaseModel):
    name: Optional[str] = PydanticField(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = PydanticField(None, min_length=MIN_PASSWORD_LENGTH)
    role: Optional[EmployeeRole] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    contract_hours: Optional[float] = PydanticField(None, ge=0)
    hourly_wage: Optional[float] = PydanticField(None, ge=0)
    # Manual balance corrections happen here
    vacation_balance: Optional[float] = None
    active: Optional[bool] = None


def get_employee_or_404(session: Session, employee_id: int) -> Employee:
    employee = session.get(Employee, employee_id)
    if employee is None:
        raise NotFound(f"Employee {employee_id} not found.")
    return employee


@router.get("/users", response_model=List[EmployeeRead])
def list_all_users(
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Full records of every account, including deactivated ones."""
    return session.exec(select(Employee).order_by(Employee.name)).all()


@router.get("/employees", response_model=List[EmployeeDirectoryEntry])
def list_active_employees(
    session: Session = Depends(get_session),
    user: dict = Depends(get_current_user),
):
    return session.exec(
        select(Employee).where(Employee.active == True).order_by(Employee.name)  # noqa: E712
    ).all()


@router.post("/users", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED)
def create_user(
    request: CreateEmployeeRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    return create_employee(
        session,
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role,
        department=request.department,
        vacation_balance=request.vacation_balance,
        contract_hours=request.contract_hours,
        hourly_wage=request.hourly_wage,
        phone=request.phone,
    )


@router.put("/users/{employee_id}", response_model=EmployeeRead)
def update_user(
    employee_id: int,
    request: UpdateEmployeeRequest,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    employee = get_employee_or_404(session, employee_id)
    changes = request.model_dump(exclude_unset=True)

    if changes.get("active") is False and employee.id == manager["uid"]:
        raise BadRequest("You cannot deactivate your own account.")

    # Email must stay unique
    if changes.get("email"):
        email = normalize_email(changes["email"])
        existing = find_by_email(session, email)
        if existing is not None and existing.id != employee.id:
            raise BadRequest("Email address is already in use.")
        changes["email"] = email

    password = changes.pop("password", None)
    if password:
        employee.password_hash = hash_password(password)

    if "vacation_balance" in changes and changes["vacation_balance"] != employee.vacation_balance:
        logger.info(
            "Manager %s set vacation balance of employee %s from %s to %s",
            manager["uid"], employee_id, employee.vacation_balance, changes["vacation_balance"],
        )

    for field, value in changes.items():
        if value is None and field in ("name", "email", "role", "vacation_balance", "active"):
            continue
        setattr(employee, field, value)

    employee.updated_at = utc_now()
    session.add(employee)
    session.commit()
    session.refresh(employee)
    return employee


@router.delete("/users/{employee_id}")
def deactivate_user(
    employee_id: int,
    session: Session = Depends(get_session),
    manager: dict = Depends(require_manager_role),
):
    """Deactivate an account. History that references it is kept."""
    employee = get_employee_or_404(session, employee_id)

    if employee.id == manager["uid"]:
        raise BadRequest("You cannot deactivate your own account.")

    employee.active = False
    employee.updated_at = utc_now()
    session.add(employee)
    session.commit()

    logger.info("Employee %s deactivated by %s", employee_id, manager["uid"])
    return {"status": "success", "message": f"Employee {employee_id} deactivated."}
