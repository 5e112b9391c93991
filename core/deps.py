import logging
from typing import Annotated

import jwt
from fastapi import Depends, Request
from sqlmodel import Session

from core.errors import Forbidden, Unauthenticated
from core.security import verify_access_token
from db.session import get_session
from models.employee import Employee, EmployeeRole

logger = logging.getLogger(__name__)

# Roles allowed on manager-only endpoints
MANAGER_ROLES = [EmployeeRole.MANAGER.value]


# Reads the bearer token and returns the identity of the active employee it was issued to
async def get_current_user(request: Request, session: Session = Depends(get_session)) -> dict:

    # 1) Extract & Analyze Authorization Header
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise Unauthenticated("Missing or invalid Authorization header")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise Unauthenticated("Missing or invalid Authorization header")

    # 2) Verify signature and expiry
    try:
        claims = verify_access_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired")
    except jwt.PyJWTError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise Unauthenticated("Invalid or expired token")

    # 3) Extract critical claims
    subject = claims.get("sub")
    role = claims.get("role")
    if not subject or not role:
        raise Unauthenticated("Token is missing required claims")

    try:
        uid = int(subject)
    except ValueError:
        raise Unauthenticated("Token is missing required claims")

    # 4) Fetch the account; deactivated employees lose access immediately
    employee = session.get(Employee, uid)
    if employee is None or not employee.active:
        logger.warning("Rejected token of missing or deactivated employee %s", uid)
        raise Unauthenticated("Account is not active")

    return {
        "uid": uid,
        "email": employee.email,
        "role": employee.role.value,
    }


# Manager Role Check Dependency
async def require_manager_role(
    current_user: Annotated[dict, Depends(get_current_user)]
) -> dict:
    if current_user.get("role") not in MANAGER_ROLES:
        raise Forbidden("Only managers can access this resource")

    # Passes Check Endpoint
    return current_user


def is_manager(user: dict) -> bool:
    return user.get("role") in MANAGER_ROLES
