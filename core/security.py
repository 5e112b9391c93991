from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from core.config import JWT_ALGORITHM, JWT_EXPIRES_HOURS, JWT_SECRET


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(employee_id: int, email: str, role: str) -> str:
    """Sign a bearer token carrying the claims every request is authorized from."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(employee_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """Decode and validate a bearer token. Raises jwt.PyJWTError when invalid or expired."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
