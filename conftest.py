from datetime import date, time
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine

from core.security import create_access_token
from db.session import get_session, init_db
from main import app
from models import Employee, EmployeeRole, Shift, ShiftStatus
from services.employee_service import create_employee

TEST_PASSWORD = "correct-horse-battery"


# ---------------------------------------------------------------------------
# Fresh SQLite file per test, wired into the app through get_session
# ---------------------------------------------------------------------------
@pytest.fixture()
def engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    # Not used as a context manager, so the lifespan never touches the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(employee: Employee) -> dict:
    token = create_access_token(employee.id, employee.email, employee.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_employee(session):
    counter = {"n": 0}

    def _make(
        name: Optional[str] = None,
        role: EmployeeRole = EmployeeRole.STAFF,
        vacation_balance: float = 25,
        department: Optional[str] = "Front office",
        active: bool = True,
    ) -> Employee:
        counter["n"] += 1
        name = name or f"Employee {counter['n']}"
        employee = create_employee(
            session,
            name=name,
            email=f"{name.lower().replace(' ', '.')}.{counter['n']}@example.com",
            password=TEST_PASSWORD,
            role=role,
            department=department,
            vacation_balance=vacation_balance,
        )
        if not active:
            employee.active = False
            session.add(employee)
            session.commit()
            session.refresh(employee)
        return employee

    return _make


@pytest.fixture()
def manager(make_employee):
    return make_employee(name="Morgan Manager", role=EmployeeRole.MANAGER)


@pytest.fixture()
def make_shift(session):
    def _make(
        employee: Employee,
        shift_date: date = date(2026, 3, 2),
        start: time = time(9, 0),
        end: time = time(17, 0),
        break_minutes: int = 30,
        status: ShiftStatus = ShiftStatus.PUBLISHED,
    ) -> Shift:
        shift = Shift(
            employee_id=employee.id,
            shift_date=shift_date,
            start_time=start,
            end_time=end,
            break_minutes=break_minutes,
            department=employee.department,
            status=status,
        )
        session.add(shift)
        session.commit()
        session.refresh(shift)
        return shift

    return _make


def reload(session: Session, model, pk):
    """Fetch a fresh copy of a row after the API changed it through another session."""
    session.expire_all()
    return session.get(model, pk)
