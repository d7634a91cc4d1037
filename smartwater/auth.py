"""
Session authentication and authorization dependencies.

The signed session cookie (Starlette SessionMiddleware) carries the user id;
every request reloads the user so deactivation takes effect immediately.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .permissions import has_permission, is_admin_role
from .security_utils import generate_secure_token

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_ID_KEY = "sid"

# Roles that skip the permission matrix entirely
PERMISSION_BYPASS_ROLES = {"system_admin", "admin"}


def login_user(request: Request, user: User) -> None:
    """Bind the user to the session and rotate the session id"""
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    request.session[SESSION_ID_KEY] = generate_secure_token()


def logout_user(request: Request) -> None:
    request.session.clear()


def get_session_id(request: Request) -> str:
    """Stable id for this browser session (created on first use)"""
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        session_id = generate_secure_token()
        request.session[SESSION_ID_KEY] = session_id
    return session_id


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """Current user if the session is valid, otherwise None"""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.active:
        return None
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Get current authenticated user from the session cookie"""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Session references missing user {user_id}, clearing session")
        logout_user(request)
        raise HTTPException(status_code=401, detail="Invalid session data")

    if not user.active:
        logger.warning(f"🚫 Inactive user {user.id} attempted access to {request.url.path}")
        logout_user(request)
        raise HTTPException(status_code=403, detail="Account is deactivated")

    if user.role != "system_admin" and not user.organization_id:
        logger.warning(f"🚫 User {user.id} has no organization")
        raise HTTPException(status_code=403, detail="User is not assigned to an organization")

    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require an admin-level role"""
    if not is_admin_role(current_user.role):
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


def get_current_system_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "system_admin":
        raise HTTPException(status_code=403, detail="System admin access required")
    return current_user


def require_permission(resource: str, action: str):
    """
    Create a dependency that enforces the role permission matrix.

    Example usage:
        @router.post("")
        async def create_client(current_user: User = Depends(require_permission("clients", "create"))):
            ...
    """

    def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role in PERMISSION_BYPASS_ROLES:
            return current_user

        if not has_permission(current_user.role, resource, action):
            logger.warning(
                f"🚫 Permission denied for user {current_user.id} ({current_user.username}) "
                f"with role {current_user.role}: {action} {resource}"
            )
            raise HTTPException(
                status_code=403,
                detail={
                    "message": "Insufficient permissions",
                    "required": {"resource": resource, "action": action},
                    "role": current_user.role,
                },
            )
        return current_user

    return permission_checker


def get_org_filter(user: User) -> Optional[int]:
    """Organization id to scope queries by; None means unrestricted (system admin)"""
    if user.role == "system_admin":
        return None
    return user.organization_id


def require_organization_id(user: User) -> int:
    """Organization that new records are created in"""
    if not user.organization_id:
        raise HTTPException(status_code=400, detail="User is not assigned to an organization")
    return user.organization_id
