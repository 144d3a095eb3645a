"""
Refresh session management.

Each user has at most one live refresh token. Only a salted hash of it is
stored on the user record:

    no session --login--> hash(T0) --rotate(T0)--> hash(T1) --logout--> no session

A rotated or revoked token no longer matches the stored hash and is refused.
"""
from datetime import datetime, timezone
from sqlalchemy.orm import Session
import asyncio
import logging

from ..core.security import hash_token, verify_token_hash
from ..users.repository import find_user_by_id, update_user, swap_refresh_token_hash
from .exceptions import ForbiddenException, UserNotFoundException
from .schemas import TokenPair
from .tokens import issue_token_pair

# Set up logging
logger = logging.getLogger(__name__)

async def store_refresh_token(db: Session, user_id: int, refresh_token: str) -> None:
    """
    Persist the hash of a freshly issued refresh token, replacing any previous one.

    Args:
        db: Database session
        user_id: ID of the user
        refresh_token: Raw refresh token

    Raises:
        UserNotFoundException: If the user row no longer exists
    """
    token_hash = await asyncio.to_thread(hash_token, refresh_token)
    if not update_user(
        db,
        user_id,
        refresh_token_hash=token_hash,
        last_login_at=datetime.now(timezone.utc),
    ):
        logger.error(f"Could not store refresh token: user {user_id} not found")
        raise UserNotFoundException()

async def rotate_refresh_token(db: Session, user_id: int, presented_token: str) -> TokenPair:
    """
    Exchange a refresh token for a new token pair.

    The presented token must match the stored hash. The new hash replaces the
    old one only if nobody rotated in between, so a token can be used once.

    Args:
        db: Database session
        user_id: ID of the user (the sub claim of the presented token)
        presented_token: Raw refresh token from the client

    Returns:
        TokenPair: New tokens

    Raises:
        ForbiddenException: If there is no usable session or the token does not match
    """
    user = find_user_by_id(db, user_id)
    if not user or not user.is_authenticatable or not user.refresh_token_hash:
        logger.warning(f"Refresh denied: no usable session for user {user_id}")
        raise ForbiddenException()

    stored_hash = user.refresh_token_hash
    email = user.email

    if not await asyncio.to_thread(verify_token_hash, presented_token, stored_hash):
        logger.warning(f"Refresh denied: token mismatch for user {user_id}")
        raise ForbiddenException()

    tokens = await issue_token_pair(user_id, email)
    new_hash = await asyncio.to_thread(hash_token, tokens.refresh_token)

    if not swap_refresh_token_hash(
        db,
        user_id,
        expected_hash=stored_hash,
        new_hash=new_hash,
        last_login_at=datetime.now(timezone.utc),
    ):
        logger.warning(f"Refresh denied: session for user {user_id} changed during rotation")
        raise ForbiddenException()

    logger.info(f"Refresh token rotated for user {user_id}")
    return tokens

def revoke_refresh_token(db: Session, user_id: int) -> None:
    """
    End the user's session. Safe to call when no session exists.
    """
    update_user(db, user_id, refresh_token_hash=None)
    logger.info(f"Refresh session revoked for user {user_id}")
