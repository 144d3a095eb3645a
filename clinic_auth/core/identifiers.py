"""
Health identifier (medical record number) generation.
"""
from typing import Optional
from sqlalchemy.orm import Session
import secrets
import string
import time
import logging

from ..config import settings
from ..exceptions import IdentifierGenerationExhausted
from ..users.repository import health_id_exists

# Set up logging
logger = logging.getLogger(__name__)

HEALTH_ID_PREFIX = "MRN"
RANDOM_PART_LENGTH = 8
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits

def checksum_letter(timestamp: str) -> str:
    """
    Map the digit sum of a timestamp onto a letter A-Z.

    Args:
        timestamp: Decimal digits

    Returns:
        str: Single uppercase letter
    """
    digit_sum = sum(int(ch) for ch in timestamp)
    return chr(ord("A") + digit_sum % 26)

def generate_health_id() -> str:
    """
    Generate a candidate health identifier.

    Format: prefix, epoch milliseconds, 8 random base-36 characters and a
    checksum letter, upper-cased, e.g. ``MRN1752829410980K3J9ZQ2AM``.

    Returns:
        str: Candidate identifier (not checked for uniqueness)
    """
    timestamp = str(time.time_ns() // 1_000_000)
    random_part = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(RANDOM_PART_LENGTH))
    return f"{HEALTH_ID_PREFIX}{timestamp}{random_part}{checksum_letter(timestamp)}".upper()

def generate_unique_health_id(db: Session, max_attempts: Optional[int] = None) -> str:
    """
    Generate a health identifier that no user holds yet.

    Args:
        db: Database session
        max_attempts: Number of candidates to try (defaults to settings.health_id_max_attempts)

    Returns:
        str: Unused health identifier

    Raises:
        IdentifierGenerationExhausted: If every candidate collided
    """
    attempts = max_attempts or settings.health_id_max_attempts

    for attempt in range(1, attempts + 1):
        health_id = generate_health_id()
        if not health_id_exists(db, health_id):
            return health_id
        logger.warning(f"Generated health id {health_id} already exists (attempt {attempt}/{attempts}). Retrying...")

    logger.error(f"Failed to allocate a unique health id after {attempts} attempts")
    raise IdentifierGenerationExhausted(attempts)
