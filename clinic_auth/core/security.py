"""
Core security primitives: password hashing, refresh token hashing and JWT signing.

These are synchronous, CPU-bound helpers. Async callers should run them in a
worker thread (see auth.tokens and auth.sessions).
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext
import secrets
import logging

from ..config import settings
from ..exceptions import TokenConfigurationError

# Set up logging
logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)

# Refresh tokens are longer than bcrypt's 72 byte limit, so they are
# pre-hashed with HMAC-SHA256 before bcrypt.
token_context = CryptContext(
    schemes=["bcrypt_sha256"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.password_hash_rounds,
)

def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash in constant time.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against

    Returns:
        bool: True if password matches hash
    """
    return pwd_context.verify(plain_password, hashed_password)

def dummy_verify_password() -> bool:
    """
    Spend the same time as a real verify. Used when no user matched a login
    handle so response timing does not reveal whether the handle exists.
    """
    return pwd_context.dummy_verify()

def hash_token(token: str) -> str:
    """
    Hash a refresh token for storage. Salted, so equal tokens give different hashes.

    Args:
        token: Token to hash

    Returns:
        str: Hashed token
    """
    return token_context.hash(token)

def verify_token_hash(token: str, hashed_token: str) -> bool:
    """
    Verify a token against a stored hash.

    Args:
        token: Plain text token
        hashed_token: Hashed token to compare against

    Returns:
        bool: True if token matches hash
    """
    try:
        return token_context.verify(token, hashed_token)
    except ValueError:
        # Stored value is not a recognizable hash
        logger.warning("Stored refresh token hash could not be parsed")
        return False

def create_token(
    claims: Dict[str, Any],
    secret: str,
    expires_delta: timedelta,
    token_type: str
) -> str:
    """
    Create a signed JWT.

    Every token carries iat, exp, a random jti and its type, so two tokens
    minted for the same user in the same second are still distinct.

    Args:
        claims: Claims to encode (sub must be a string)
        secret: Signing secret
        expires_delta: Lifetime of the token
        token_type: ACCESS_TOKEN_TYPE or REFRESH_TOKEN_TYPE

    Returns:
        str: Encoded JWT

    Raises:
        TokenConfigurationError: If the token cannot be signed with the configured secret/algorithm
    """
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({
        "iat": now,
        "exp": now + expires_delta,
        "jti": secrets.token_hex(16),
        "type": token_type,
    })

    try:
        return jwt.encode(to_encode, secret, algorithm=settings.algorithm)
    except (JOSEError, TypeError, ValueError) as e:
        raise TokenConfigurationError(f"Unable to sign {token_type} token: {e}") from e

def decode_token(token: str, secret: str, token_type: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT.

    Args:
        token: JWT token string
        secret: Secret the token must be signed with
        token_type: Expected value of the type claim

    Returns:
        Dict containing token payload if valid, None if invalid, expired or of another type
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.algorithm])
    except JOSEError:
        return None

    if payload.get("type") != token_type:
        return None
    return payload
