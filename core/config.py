import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file, if it exists
load_dotenv()

# Storage
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rooster.db")

# Token signing
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-in-production")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "8"))

# Frontend (CORS origin + base of invitation links)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Business defaults
DEFAULT_VACATION_BALANCE = float(os.getenv("DEFAULT_VACATION_BALANCE", "25"))
INVITATION_VALID_DAYS = int(os.getenv("INVITATION_VALID_DAYS", "7"))
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))

# Optional first manager, created at startup when the store is empty
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    )
    # SQL statements are far too noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
