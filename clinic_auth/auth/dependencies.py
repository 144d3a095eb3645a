"""
FastAPI dependencies for authentication and authorization.

Authentication (who is calling, 401) and authorization (may they call this
route, 403) are separate steps of authenticate_and_authorize. Route
requirements come from core.permissions.ROUTE_POLICIES.
"""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import AbstractSet, Optional
import logging

from ..database import get_db
from ..core.permissions import is_allowed, required_roles_for
from ..users.repository import find_user_by_id
from .exceptions import ForbiddenException, UnauthenticatedException
from .models import User, UserRole
from .tokens import decode_access_token, subject_id

# Set up logging
logger = logging.getLogger(__name__)

# Bearer scheme for the Authorization header; errors are raised by the guard itself
bearer_scheme = HTTPBearer(auto_error=False)

def authenticate_and_authorize(
    db: Session,
    token: Optional[str],
    required_roles: AbstractSet[UserRole]
) -> User:
    """
    Resolve the user behind an access token and check their roles.

    Args:
        db: Database session
        token: Raw bearer access token, or None if the request carried none
        required_roles: Roles accepted by the resource (empty for any authenticated user)

    Returns:
        User: The authenticated, authorized user

    Raises:
        UnauthenticatedException: Missing/invalid/expired token, or the user no longer exists or is inactive
        ForbiddenException: The user holds none of the required roles
    """
    if not token:
        raise UnauthenticatedException()

    payload = decode_access_token(token)
    if not payload:
        raise UnauthenticatedException()

    user_id = subject_id(payload)
    if user_id is None:
        raise UnauthenticatedException()

    # Re-check the account on every request so deactivation takes effect immediately
    user = find_user_by_id(db, user_id)
    if not user or not user.is_authenticatable:
        logger.warning(f"Rejected access token for unavailable user {user_id}")
        raise UnauthenticatedException()

    if not is_allowed(user.role_set, required_roles):
        logger.warning(
            f"User {user.id} denied: requires one of {sorted(r.value for r in required_roles)}"
        )
        raise ForbiddenException("You do not have sufficient permissions to access this resource.")

    return user

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[str]:
    return credentials.credentials if credentials else None

def guard_route(
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db)
) -> User:
    """
    Guard a route using its entry in the route policy table.

    Returns:
        User: Current authenticated user allowed on this route
    """
    route = request.scope.get("route")
    route_path = getattr(route, "path", request.url.path)
    try:
        required_roles = required_roles_for(request.method, route_path)
    except KeyError:
        # Fail closed on routes nobody has classified
        logger.error(f"No access policy for {request.method} {route_path}")
        raise ForbiddenException()

    return authenticate_and_authorize(db, token, required_roles)
