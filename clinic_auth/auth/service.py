"""
Authentication service layer for business logic.
"""
import asyncio
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import Request
from typing import Dict, Any, Optional

from ..core.audit_service import create_audit_log
from ..core.identifiers import generate_unique_health_id
from ..core.security import hash_password, verify_password, dummy_verify_password
from ..users.repository import (
    add_user,
    find_active_user_by_login_handle,
    find_user_by_id,
    find_user_by_username_or_email,
)
from .exceptions import (
    ForbiddenException,
    InvalidCredentialsException,
    UnauthenticatedException,
    UserAlreadyExistsException,
)
from .models import User, AccountStatus, DEFAULT_ROLE
from .schemas import UserRegistration, UserResponse, TokenPair
from .sessions import store_refresh_token, rotate_refresh_token, revoke_refresh_token
from .tokens import issue_token_pair, decode_refresh_token, subject_id

# Set up logging
logger = logging.getLogger(__name__)

async def register_user(
    db: Session,
    registration: UserRegistration,
    created_by_id: Optional[int] = None,
    request: Optional[Request] = None
) -> User:
    """
    Register a new user with the default role.

    Args:
        db: Database session
        registration: Validated registration data
        created_by_id: ID of the staff member creating the account (None for self-registration)
        request: FastAPI request object for audit logging

    Returns:
        User: The created user

    Raises:
        UserAlreadyExistsException: If the username or email is taken
        IdentifierGenerationExhausted: If no unique health id could be allocated
    """
    logger.info(f"Registration attempt for username: {registration.username}")

    if find_user_by_username_or_email(db, registration.username, registration.email):
        logger.warning(f"Registration failed: {registration.username} / {registration.email} already registered")
        raise UserAlreadyExistsException()

    password_hash = await asyncio.to_thread(hash_password, registration.password)
    health_id = generate_unique_health_id(db)

    user_obj = User(
        username=registration.username,
        email=registration.email,
        first_name=registration.first_name,
        last_name=registration.last_name,
        dob=registration.dob,
        gender=registration.gender,
        health_id=health_id,
        password_hash=password_hash,
        active=True,
        status=AccountStatus.ACTIVE,
        roles=[DEFAULT_ROLE.value],
    )

    try:
        user_obj = add_user(db, user_obj)
    except IntegrityError:
        # Lost a race with a concurrent registration of the same handle
        logger.warning(f"Registration failed on insert: {registration.username} already registered")
        raise UserAlreadyExistsException()

    logger.info(f"User created successfully: {user_obj.id}")
    await create_audit_log(
        db,
        action="USER_REGISTERED",
        user_id=created_by_id or user_obj.id,
        request=request,
        details={"user_id": user_obj.id, "created_by": created_by_id},
    )
    return user_obj

async def verify_credentials(db: Session, login_id: str, password: str) -> User:
    """
    Check a login handle and password.

    Args:
        db: Database session
        login_id: Username or email
        password: Plain text password

    Returns:
        User: The matching active user

    Raises:
        InvalidCredentialsException: Unknown handle, inactive account or wrong password
    """
    user = find_active_user_by_login_handle(db, login_id)

    if not user:
        await asyncio.to_thread(dummy_verify_password)
        raise InvalidCredentialsException()

    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        raise InvalidCredentialsException()

    return user

async def login_user(
    db: Session,
    login_id: str,
    password: str,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Authenticate a user and start a new session.

    Any previous refresh token of the user stops working.

    Args:
        db: Database session
        login_id: Username or email
        password: User's password
        request: FastAPI request object for audit logging

    Returns:
        Dict with the sanitized user and the token pair

    Raises:
        InvalidCredentialsException: If credentials are invalid
    """
    try:
        user = await verify_credentials(db, login_id, password)
    except InvalidCredentialsException:
        logger.warning("Login failed: invalid credentials")
        await create_audit_log(db, action="USER_LOGIN_FAILED", request=request)
        raise

    user_id = user.id
    tokens = await issue_token_pair(user_id, user.email)
    await store_refresh_token(db, user_id, tokens.refresh_token)

    logger.info(f"Login successful: User {user_id}")
    await create_audit_log(db, action="USER_LOGIN_SUCCESS", user_id=user_id, request=request)

    db.refresh(user)
    return {
        "user": UserResponse.from_orm(user),
        "tokens": tokens,
    }

async def refresh_session(
    db: Session,
    refresh_token: Optional[str],
    request: Optional[Request] = None
) -> TokenPair:
    """
    Exchange a refresh token for a new token pair.

    Args:
        db: Database session
        refresh_token: Raw bearer refresh token
        request: FastAPI request object for audit logging

    Returns:
        TokenPair: New tokens

    Raises:
        UnauthenticatedException: Missing, malformed, expired or wrongly signed refresh token
        ForbiddenException: Token already rotated, revoked, or never issued for this session
    """
    if not refresh_token:
        raise UnauthenticatedException()

    payload = decode_refresh_token(refresh_token)
    user_id = subject_id(payload) if payload else None
    if user_id is None:
        raise UnauthenticatedException()

    try:
        tokens = await rotate_refresh_token(db, user_id, refresh_token)
    except ForbiddenException:
        # The token may outlive its user; only reference rows that still exist
        known_user = find_user_by_id(db, user_id) is not None
        await create_audit_log(
            db,
            action="TOKEN_REFRESH_DENIED",
            user_id=user_id if known_user else None,
            request=request,
            details={"subject": user_id},
        )
        raise

    await create_audit_log(db, action="TOKEN_REFRESHED", user_id=user_id, request=request)
    return tokens

async def logout_user(
    db: Session,
    user_id: int,
    request: Optional[Request] = None
) -> None:
    """
    End the user's session so their refresh token can no longer be used.
    """
    revoke_refresh_token(db, user_id)
    await create_audit_log(db, action="USER_LOGOUT", user_id=user_id, request=request)
