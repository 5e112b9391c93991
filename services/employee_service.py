import logging
from typing import Optional

from sqlmodel import Session, func, select

from core.config import DEFAULT_VACATION_BALANCE
from core.errors import BadRequest
from core.security import hash_password
from models.employee import Employee, EmployeeRole

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_email(session: Session, email: str) -> Optional[Employee]:
    return session.exec(
        select(Employee).where(Employee.email == normalize_email(email))
    ).first()


def employee_count(session: Session) -> int:
    return session.exec(select(func.count(Employee.id))).one()


def create_employee(
    session: Session,
    name: str,
    email: str,
    password: str,
    role: EmployeeRole = EmployeeRole.STAFF,
    department: Optional[str] = None,
    vacation_balance: Optional[float] = None,
    contract_hours: Optional[float] = None,
    hourly_wage: Optional[float] = None,
    phone: Optional[str] = None,
    commit: bool = True,
) -> Employee:
    """Create an employee account; the email must not be in use yet."""
    if find_by_email(session, email) is not None:
        raise BadRequest("Email address is already in use.")

    employee = Employee(
        name=name,
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        department=department,
        phone=phone,
        contract_hours=contract_hours,
        hourly_wage=hourly_wage,
        vacation_balance=DEFAULT_VACATION_BALANCE if vacation_balance is None else vacation_balance,
    )
    session.add(employee)

    if commit:
        session.commit()
        session.refresh(employee)
        logger.info("Created %s account %s for %s", role.value, employee.id, employee.email)

    return employee
