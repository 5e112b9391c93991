from datetime import date, time

from sqlmodel import select

from conftest import auth_headers, reload
from models import (
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    Notification,
    NotificationType,
    Shift,
    ShiftStatus,
    TimeRegistration,
)


def shift_body(employee, **extra):
    body = {
        "employee_id": employee.id,
        "shift_date": "2026-03-02",
        "start_time": "09:00",
        "end_time": "17:00",
        "break_minutes": 30,
    }
    body.update(extra)
    return body


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------
def test_manager_creates_draft_shift(client, make_employee, manager):
    staff = make_employee(name="Sam Staff", department="Bar")

    response = client.post("/api/shifts", json=shift_body(staff), headers=auth_headers(manager))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "draft"
    assert data["department"] == "Bar"
    assert data["employee_name"] == "Sam Staff"
    assert data["hours"] == 7.5


def test_shift_must_end_after_it_starts(client, make_employee, manager):
    staff = make_employee()
    body = shift_body(staff, start_time="17:00", end_time="09:00")
    assert client.post("/api/shifts", json=body, headers=auth_headers(manager)).status_code == 422


def test_shift_for_unknown_employee(client, manager):
    body = {"employee_id": 999, "shift_date": "2026-03-02", "start_time": "09:00", "end_time": "17:00"}
    assert client.post("/api/shifts", json=body, headers=auth_headers(manager)).status_code == 404


def test_staff_cannot_manage_shifts(client, make_employee, make_shift):
    staff = make_employee()
    shift = make_shift(staff)
    headers = auth_headers(staff)

    assert client.post("/api/shifts", json=shift_body(staff), headers=headers).status_code == 403
    assert client.put(f"/api/shifts/{shift.id}", json={"notes": "mine"}, headers=headers).status_code == 403
    assert client.delete(f"/api/shifts/{shift.id}", headers=headers).status_code == 403


def test_staff_see_published_and_own_drafts(client, make_employee, make_shift):
    alice = make_employee(name="Alice")
    bob = make_employee(name="Bob")
    published = make_shift(bob, status=ShiftStatus.PUBLISHED)
    bobs_draft = make_shift(bob, status=ShiftStatus.DRAFT)
    alices_draft = make_shift(alice, status=ShiftStatus.DRAFT)

    visible = {row["id"] for row in client.get("/api/shifts", headers=auth_headers(alice)).json()}
    assert visible == {published.id, alices_draft.id}
    assert bobs_draft.id not in visible


def test_shift_filters(client, make_employee, make_shift, manager):
    staff = make_employee()
    other = make_employee()
    make_shift(staff, shift_date=date(2026, 3, 2))
    in_range = make_shift(staff, shift_date=date(2026, 3, 4))
    make_shift(other, shift_date=date(2026, 3, 4))

    rows = client.get(
        f"/api/shifts?start_date=2026-03-03&end_date=2026-03-08&employee_id={staff.id}",
        headers=auth_headers(manager),
    ).json()
    assert [row["id"] for row in rows] == [in_range.id]


def test_update_and_delete_shift(client, session, make_employee, make_shift, manager):
    staff = make_employee()
    shift = make_shift(staff, status=ShiftStatus.DRAFT)
    headers = auth_headers(manager)
    shift_id = shift.id

    response = client.put(f"/api/shifts/{shift_id}", json={"end_time": "18:00", "notes": "Inventory"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["hours"] == 8.5

    bad = client.put(f"/api/shifts/{shift_id}", json={"end_time": "08:00"}, headers=headers)
    assert bad.status_code == 400

    assert client.delete(f"/api/shifts/{shift_id}", headers=headers).status_code == 200
    assert reload(session, Shift, shift_id) is None
    assert client.delete(f"/api/shifts/{shift_id}", headers=headers).status_code == 404


def test_publish_moves_drafts_and_notifies_each_employee_once(client, session, make_employee, make_shift, manager):
    alice = make_employee()
    bob = make_employee()
    make_shift(alice, shift_date=date(2026, 3, 2), status=ShiftStatus.DRAFT)
    make_shift(alice, shift_date=date(2026, 3, 3), status=ShiftStatus.DRAFT)
    make_shift(bob, shift_date=date(2026, 3, 4), status=ShiftStatus.DRAFT)
    outside = make_shift(bob, shift_date=date(2026, 3, 20), status=ShiftStatus.DRAFT)

    response = client.post(
        "/api/shifts/publish",
        json={"start_date": "2026-03-02", "end_date": "2026-03-08"},
        headers=auth_headers(manager),
    )
    assert response.status_code == 200
    assert response.json()["published_count"] == 3
    assert response.json()["notified_count"] == 2

    assert reload(session, Shift, outside.id).status == ShiftStatus.DRAFT

    for employee in (alice, bob):
        notes = session.exec(select(Notification).where(Notification.recipient_id == employee.id)).all()
        assert len(notes) == 1
        assert notes[0].notification_type == NotificationType.SCHEDULE
        assert notes[0].link == "/schedule"


# ---------------------------------------------------------------------------
# Time registrations
# ---------------------------------------------------------------------------
def test_check_in_and_out(client, make_employee):
    staff = make_employee()
    headers = auth_headers(staff)

    assert client.post("/api/time-registrations/checkout", headers=headers).status_code == 400

    response = client.post("/api/time-registrations/checkin", headers=headers)
    assert response.status_code == 201
    assert response.json()["check_out"] is None
    assert response.json()["worked_hours"] is None

    assert client.post("/api/time-registrations/checkin", headers=headers).status_code == 400

    response = client.post("/api/time-registrations/checkout", headers=headers)
    assert response.status_code == 200
    assert response.json()["check_out"] is not None


def test_manual_registration_links_planned_shift(client, make_employee, make_shift):
    staff = make_employee()
    shift = make_shift(staff, shift_date=date(2026, 3, 2))
    body = {"work_date": "2026-03-02", "check_in": "09:05", "check_out": "17:05", "break_minutes": 30}

    response = client.post("/api/time-registrations", json=body, headers=auth_headers(staff))
    assert response.status_code == 201
    data = response.json()
    assert data["shift_id"] == shift.id
    assert data["planned_start"] == "09:00:00"
    assert data["worked_hours"] == 7.5
    assert data["approved"] is False


def test_only_managers_approve_registrations(client, make_employee, manager):
    staff = make_employee()
    body = {"work_date": "2026-03-02", "check_in": "09:00", "check_out": "13:00"}
    registration_id = client.post("/api/time-registrations", json=body, headers=auth_headers(staff)).json()["id"]

    url = f"/api/time-registrations/{registration_id}"
    assert client.put(url, json={"approved": True}, headers=auth_headers(staff)).status_code == 403
    assert client.put(url, json={"approved": True}, headers=auth_headers(manager)).json()["approved"] is True

    outsider = make_employee()
    assert client.delete(url, headers=auth_headers(outsider)).status_code == 403
    assert client.delete(url, headers=auth_headers(staff)).status_code == 200


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------
def test_availability_replaces_same_weekday(client, make_employee, manager):
    staff = make_employee()
    headers = auth_headers(staff)

    client.post("/api/availability", json={"weekday": 0, "available_from": "09:00", "available_until": "13:00"}, headers=headers)
    response = client.post("/api/availability", json={"weekday": 0, "available": False}, headers=headers)
    assert response.status_code == 201

    rows = client.get("/api/availability", headers=headers).json()
    assert len(rows) == 1
    assert rows[0]["available"] is False

    assert client.get(f"/api/availability?employee_id={staff.id}", headers=auth_headers(manager)).status_code == 200
    assert client.get(f"/api/availability?employee_id={manager.id}", headers=headers).status_code == 403


def test_availability_exception_needs_a_date(client, make_employee):
    staff = make_employee()
    body = {"weekday": 2, "kind": "exception", "available": False}
    assert client.post("/api/availability", json=body, headers=auth_headers(staff)).status_code == 422


# ---------------------------------------------------------------------------
# Reports and dashboard
# ---------------------------------------------------------------------------
def test_hours_report_counts_published_shifts(client, make_employee, make_shift, manager):
    staff = make_employee(name="Harriet Hours")
    make_shift(staff, shift_date=date(2026, 3, 2))
    make_shift(staff, shift_date=date(2026, 3, 3), start=time(22, 0), end=time(6, 0), break_minutes=0)
    make_shift(staff, shift_date=date(2026, 3, 4), status=ShiftStatus.DRAFT)

    rows = client.get(
        "/api/reports/hours?start_date=2026-03-02&end_date=2026-03-08",
        headers=auth_headers(manager),
    ).json()
    row = next(r for r in rows if r["employee_id"] == staff.id)
    assert row["shift_count"] == 2
    assert row["total_hours"] == 15.5


def test_leave_report(client, session, make_employee, manager):
    staff = make_employee(name="Val Vacation", vacation_balance=20)
    session.add_all([
        LeaveRequest(employee_id=staff.id, start_date=date(2026, 3, 2), end_date=date(2026, 3, 6),
                     leave_type=LeaveType.VACATION, status=LeaveStatus.APPROVED, day_count=5),
        LeaveRequest(employee_id=staff.id, start_date=date(2026, 4, 6), end_date=date(2026, 4, 7),
                     leave_type=LeaveType.VACATION, status=LeaveStatus.PENDING, day_count=2),
        LeaveRequest(employee_id=staff.id, start_date=date(2026, 5, 4), end_date=date(2026, 5, 4),
                     leave_type=LeaveType.SICK, status=LeaveStatus.APPROVED, day_count=1),
        LeaveRequest(employee_id=staff.id, start_date=date(2025, 6, 2), end_date=date(2025, 6, 2),
                     leave_type=LeaveType.VACATION, status=LeaveStatus.APPROVED, day_count=1),
    ])
    session.commit()

    rows = client.get("/api/reports/leave?year=2026", headers=auth_headers(manager)).json()
    row = next(r for r in rows if r["employee_id"] == staff.id)
    assert row["vacation_balance"] == 20
    assert row["days_taken"] == 5
    assert row["days_pending"] == 2


def test_dashboard_stats(client, make_employee, make_shift, manager):
    staff = make_employee()
    today = date.today()
    make_shift(staff, shift_date=today)
    make_shift(manager, shift_date=today)

    stats = client.get("/api/dashboard/stats", headers=auth_headers(staff)).json()
    assert stats["shifts_today"] == 2
    assert stats["employees_today"] == 2
    assert stats["hours_this_week"] is None
    assert len(stats["upcoming_shifts"]) == 1

    stats = client.get("/api/dashboard/stats", headers=auth_headers(manager)).json()
    assert stats["hours_this_week"] == 15.0


def test_deleting_a_shift_unlinks_its_time_registrations(client, session, make_employee, make_shift, manager):
    staff = make_employee()
    shift = make_shift(staff, shift_date=date(2026, 3, 2))
    shift_id = shift.id
    body = {"work_date": "2026-03-02", "check_in": "09:00", "check_out": "17:00"}
    registration_id = client.post("/api/time-registrations", json=body, headers=auth_headers(staff)).json()["id"]

    assert client.delete(f"/api/shifts/{shift_id}", headers=auth_headers(manager)).status_code == 200

    registration = reload(session, TimeRegistration, registration_id)
    assert registration is not None
    assert registration.shift_id is None
