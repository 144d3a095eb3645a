"""
Authentication routes for the medical clinic system.
"""
from fastapi import APIRouter, Depends, Request, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..database import get_db
from ..core.audit_service import get_audit_logs
from .dependencies import guard_route, get_bearer_token
from .models import User
from .schemas import (
    UserRegistration, UserLogin, UserResponse, LoginResponse, TokenPair,
    MessageResponse, AuditLogResponse
)
from .service import register_user, login_user, refresh_session, logout_user

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED, summary="User Self-Registration")
async def register_route(
    registration: UserRegistration,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Register a new account with the default USER role.

    Returns:
        UserResponse for the created user

    Raises:
        409 if the username or email is already registered
    """
    return await register_user(db, registration, request=request)

@router.post("/login", response_model=LoginResponse, summary="User Login")
async def login_route(
    credentials: UserLogin,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Log in with username or email and password.

    Returns:
        LoginResponse with the user profile and a new access/refresh token pair
    """
    return await login_user(db, credentials.login_id, credentials.password, request=request)

@router.post("/refresh", response_model=TokenPair, summary="Refresh Token Pair")
async def refresh_route(
    request: Request,
    refresh_token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db)
):
    """
    Exchange the refresh token in the Authorization header for a new token pair.

    The presented refresh token is invalidated; reusing it returns 403.
    """
    return await refresh_session(db, refresh_token, request=request)

@router.post("/logout", response_model=MessageResponse, summary="User Logout")
async def logout_route(
    request: Request,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    """
    Log out by revoking the current refresh token.

    Access tokens already issued stay valid until they expire.
    """
    await logout_user(db, current_user.id, request=request)
    return {"message": "Successfully logged out"}

@router.get("/profile", response_model=UserResponse, summary="Get Current User Profile")
async def profile_route(current_user: User = Depends(guard_route)):
    return current_user

@router.get("/admin/audit-logs", response_model=List[AuditLogResponse], summary="Admin Retrieves Audit Logs")
async def audit_logs_route(
    user_id: Optional[int] = Query(None, description="Only return entries for this user"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    """
    List audit log entries, newest first.
    """
    entries = get_audit_logs(db, user_id_filter=user_id, limit=limit, offset=offset)
    return [
        AuditLogResponse(
            id=entry.id,
            user_id=entry.user_id,
            username=entry.user.username if entry.user_id and entry.user else None,
            action=entry.action,
            details=entry.details,
            ip_address=entry.ip_address,
            timestamp=entry.timestamp,
        )
        for entry in entries
    ]
