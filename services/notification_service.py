import logging
from typing import List, Optional

from sqlalchemy import func, update
from sqlmodel import Session, select

from core.errors import NotFound
from models.employee import Employee, EmployeeRole
from models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

# Newest notifications shown in the panel
NOTIFICATION_LIST_LIMIT = 50


class NotificationService:
    """Append-only mailbox per employee.

    ``notify`` and ``notify_managers`` only stage rows on the session so they
    commit together with the workflow change that caused them.
    """

    @staticmethod
    def notify(
        session: Session,
        recipient_id: int,
        notification_type: NotificationType,
        title: str,
        body: Optional[str] = None,
        link: Optional[str] = None,
    ) -> Notification:
        if session.get(Employee, recipient_id) is None:
            raise NotFound(f"Recipient {recipient_id} not found.")

        notification = Notification(
            recipient_id=recipient_id,
            notification_type=notification_type,
            title=title,
            body=body,
            link=link,
        )
        session.add(notification)
        logger.debug("Queued %s notification for employee %s", notification_type.value, recipient_id)
        return notification

    @staticmethod
    def notify_managers(
        session: Session,
        notification_type: NotificationType,
        title: str,
        body: Optional[str] = None,
        link: Optional[str] = None,
    ) -> List[Notification]:
        manager_ids = session.exec(
            select(Employee.id)
            .where(Employee.role == EmployeeRole.MANAGER)
            .where(Employee.active == True)  # noqa: E712
        ).all()

        return [
            NotificationService.notify(session, manager_id, notification_type, title, body, link)
            for manager_id in manager_ids
        ]

    @staticmethod
    def list_for(session: Session, recipient_id: int, limit: int = NOTIFICATION_LIST_LIMIT) -> List[Notification]:
        return session.exec(
            select(Notification)
            .where(Notification.recipient_id == recipient_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        ).all()

    @staticmethod
    def unread_count(session: Session, recipient_id: int) -> int:
        return session.exec(
            select(func.count(Notification.id))
            .where(Notification.recipient_id == recipient_id)
            .where(Notification.read == False)  # noqa: E712
        ).one()

    @staticmethod
    def mark_read(session: Session, notification_id: int, recipient_id: int) -> Notification:
        notification = session.get(Notification, notification_id)

        # Someone else's notification looks the same as a missing one
        if notification is None or notification.recipient_id != recipient_id:
            raise NotFound(f"Notification {notification_id} not found.")

        if not notification.read:
            notification.read = True
            session.add(notification)
            session.commit()
            session.refresh(notification)

        return notification

    @staticmethod
    def mark_all_read(session: Session, recipient_id: int) -> int:
        result = session.exec(
            update(Notification)
            .where(Notification.recipient_id == recipient_id)
            .where(Notification.read == False)  # noqa: E712
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        marked = result.rowcount
        session.commit()

        logger.info("Marked %s notifications read for employee %s", marked, recipient_id)
        return marked
