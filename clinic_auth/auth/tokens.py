"""
Token issuing: access and refresh token pairs.
"""
from datetime import timedelta
from typing import Any, Dict, Optional
import asyncio
import logging

from ..config import settings
from ..core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_token,
    decode_token,
)
from .schemas import TokenPair

# Set up logging
logger = logging.getLogger(__name__)

async def issue_token_pair(user_id: int, email: str) -> TokenPair:
    """
    Mint a new access/refresh token pair for a user.

    Both tokens carry the same subject and email claims but are signed with
    different secrets and expire independently. The two signatures are
    computed concurrently.

    Args:
        user_id: ID of the user (the sub claim)
        email: User's email address

    Returns:
        TokenPair: Newly signed tokens

    Raises:
        TokenConfigurationError: If either token cannot be signed
    """
    claims = {"sub": str(user_id), "email": email}

    access_token, refresh_token = await asyncio.gather(
        asyncio.to_thread(
            create_token,
            claims,
            settings.jwt_access_secret,
            timedelta(minutes=settings.access_token_expire_minutes),
            ACCESS_TOKEN_TYPE,
        ),
        asyncio.to_thread(
            create_token,
            claims,
            settings.jwt_refresh_secret,
            timedelta(days=settings.refresh_token_expire_days),
            REFRESH_TOKEN_TYPE,
        ),
    )

    logger.debug(f"Issued token pair for user {user_id}")
    return TokenPair(access_token=access_token, refresh_token=refresh_token)

def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, settings.jwt_access_secret, ACCESS_TOKEN_TYPE)

def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, settings.jwt_refresh_secret, REFRESH_TOKEN_TYPE)

def subject_id(payload: Dict[str, Any]) -> Optional[int]:
    """
    Extract the user ID from a decoded token.

    Returns:
        int user ID, or None if the sub claim is missing or not numeric
    """
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
