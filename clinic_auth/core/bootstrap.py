"""
Bootstrap utilities for first admin creation.
Handles automatic creation of the first admin user from environment variables.
"""
import logging
from sqlalchemy.orm import Session

from ..auth.models import User, UserRole, AccountStatus
from ..config import settings
from ..users.repository import add_user, admin_exists, find_user_by_username_or_email
from .identifiers import generate_unique_health_id
from .security import hash_password

logger = logging.getLogger(__name__)

def create_bootstrap_admin(db: Session) -> bool:
    """
    Create the first admin user from the BOOTSTRAP_ADMIN_* settings.

    Args:
        db: Database session

    Returns:
        bool: True if admin was created successfully, False otherwise
    """
    username = settings.bootstrap_admin_username
    email = settings.bootstrap_admin_email
    password = settings.bootstrap_admin_password

    if not username or not email or not password:
        logger.warning("Bootstrap admin credentials not provided in environment variables")
        return False

    if find_user_by_username_or_email(db, username, email):
        logger.warning(f"Bootstrap failed: {username} / {email} already exists")
        return False

    admin = User(
        username=username,
        email=email,
        first_name="Super",
        last_name="Admin",
        health_id=generate_unique_health_id(db),
        password_hash=hash_password(password),
        active=True,
        status=AccountStatus.ACTIVE,
        roles=[UserRole.ADMIN.value],
    )
    admin = add_user(db, admin)

    logger.info(f"Bootstrap admin created successfully: {admin.username} (ID: {admin.id})")
    return True

def bootstrap_admin_if_needed(db: Session) -> None:
    """
    Check if admin exists and create bootstrap admin if needed.
    This function should be called during application startup.

    Args:
        db: Database session
    """
    if admin_exists(db):
        logger.info("Admin user found. Bootstrap not needed.")
        return

    logger.info("No admin users found. Attempting bootstrap admin creation...")
    if not create_bootstrap_admin(db):
        logger.warning(
            "Bootstrap admin creation skipped. Set BOOTSTRAP_ADMIN_USERNAME, "
            "BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD to create the first admin."
        )
