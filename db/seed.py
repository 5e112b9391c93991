# Seed the first manager account from the environment
import logging

from sqlmodel import Session

from core.config import ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD
from db.session import engine, init_db
from models.employee import EmployeeRole
from services.employee_service import create_employee, employee_count

logger = logging.getLogger(__name__)


def seed_admin(bind=None) -> bool:
    """Create a manager from ADMIN_EMAIL / ADMIN_PASSWORD when the store has no accounts yet."""
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        return False

    with Session(bind or engine) as session:
        # Check if accounts already exist to avoid duplicates
        if employee_count(session) > 0:
            logger.info("Accounts already exist, skipping admin seed")
            return False

        create_employee(
            session,
            name=ADMIN_NAME,
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            role=EmployeeRole.MANAGER,
            department="Management",
        )
        logger.info("Seeded manager account %s", ADMIN_EMAIL)
        return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    seed_admin()
