import pytest
from sqlmodel import select

from conftest import auth_headers, reload
from core.errors import NotFound
from models import EmployeeRole, Notification, NotificationType
from services.notification_service import NotificationService


@pytest.fixture()
def inbox(session, make_employee):
    """Employee with three unread notifications and one for somebody else."""
    owner = make_employee(name="Nina Notified")
    other = make_employee(name="Oscar Other")
    for n in range(3):
        NotificationService.notify(session, owner.id, NotificationType.SCHEDULE, f"Schedule {n}", link="/schedule")
    NotificationService.notify(session, other.id, NotificationType.LEAVE, "Not yours")
    session.commit()
    return owner, other


def test_list_returns_only_own_notifications_newest_first(client, inbox):
    owner, _ = inbox
    rows = client.get("/api/notifications", headers=auth_headers(owner)).json()

    assert [row["title"] for row in rows] == ["Schedule 2", "Schedule 1", "Schedule 0"]
    assert all(row["read"] is False for row in rows)
    assert rows[0]["notification_type"] == "schedule"
    assert rows[0]["created_at"].endswith("Z")


def test_unread_count(client, inbox):
    owner, other = inbox
    assert client.get("/api/notifications/unread-count", headers=auth_headers(owner)).json() == {"unread": 3}
    assert client.get("/api/notifications/unread-count", headers=auth_headers(other)).json() == {"unread": 1}


def test_mark_one_read(client, session, inbox):
    owner, _ = inbox
    first = client.get("/api/notifications", headers=auth_headers(owner)).json()[0]

    response = client.post(f"/api/notifications/{first['id']}/read", headers=auth_headers(owner))
    assert response.status_code == 200
    assert response.json()["read"] is True

    # Idempotent, also reachable with PUT
    assert client.put(f"/api/notifications/{first['id']}/read", headers=auth_headers(owner)).status_code == 200
    assert client.get("/api/notifications/unread-count", headers=auth_headers(owner)).json() == {"unread": 2}


def test_cannot_mark_someone_elses_notification(client, session, inbox):
    owner, other = inbox
    foreign = session.exec(select(Notification).where(Notification.recipient_id == other.id)).one()

    response = client.post(f"/api/notifications/{foreign.id}/read", headers=auth_headers(owner))
    assert response.status_code == 404
    assert reload(session, Notification, foreign.id).read is False


def test_mark_unknown_notification(client, inbox):
    owner, _ = inbox
    assert client.post("/api/notifications/9999/read", headers=auth_headers(owner)).status_code == 404


def test_mark_all_read_only_touches_own(client, session, inbox):
    owner, other = inbox

    response = client.post("/api/notifications/read-all", headers=auth_headers(owner))
    assert response.status_code == 200
    assert response.json()["marked_count"] == 3

    assert client.get("/api/notifications/unread-count", headers=auth_headers(owner)).json() == {"unread": 0}
    assert client.get("/api/notifications/unread-count", headers=auth_headers(other)).json() == {"unread": 1}

    # Nothing left to mark
    assert client.put("/api/notifications/read-all", headers=auth_headers(owner)).json()["marked_count"] == 0


def test_notify_unknown_recipient(session):
    with pytest.raises(NotFound):
        NotificationService.notify(session, 12345, NotificationType.LEAVE, "Nobody home")


def test_notify_managers_skips_staff_and_inactive(session, make_employee, manager):
    make_employee(role=EmployeeRole.MANAGER, active=False)
    make_employee()

    created = NotificationService.notify_managers(session, NotificationType.LEAVE, "Heads up")
    session.commit()

    assert [n.recipient_id for n in created] == [manager.id]


def test_notifications_require_authentication(client):
    assert client.get("/api/notifications").status_code == 401
    assert client.post("/api/notifications/read-all").status_code == 401
