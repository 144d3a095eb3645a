"""
User directory store.

Thin data-access functions over the users table. The auth module only talks
to user records through these functions.
"""
from datetime import datetime
from typing import Any, Optional
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session, Query
import logging

from ..auth.models import User, UserRole, AccountStatus, Gender

# Set up logging
logger = logging.getLogger(__name__)

def find_active_user_by_login_handle(db: Session, handle: str) -> Optional[User]:
    """
    Find an authenticatable user by username or email.

    Args:
        db: Database session
        handle: Username or email address

    Returns:
        User if an active user with that handle exists, None otherwise
    """
    return db.query(User).filter(
        or_(User.username == handle, User.email == handle),
        User.active.is_(True),
        User.status == AccountStatus.ACTIVE,
    ).first()

def find_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def find_user_by_username_or_email(db: Session, username: str, email: str) -> Optional[User]:
    return db.query(User).filter(
        or_(User.username == username, User.email == email)
    ).first()

def health_id_exists(db: Session, health_id: str) -> bool:
    return db.query(User.id).filter(User.health_id == health_id).first() is not None

def admin_exists(db: Session) -> bool:
    return _with_role(db.query(User.id), UserRole.ADMIN).first() is not None

def add_user(db: Session, user: User) -> User:
    """
    Insert a new user and return it refreshed.

    Raises:
        sqlalchemy.exc.IntegrityError: On a duplicate username, email or health id
            (the session is rolled back first)
    """
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user

def update_user(db: Session, user_id: int, **fields: Any) -> bool:
    """
    Apply a partial update to a user.

    Args:
        db: Database session
        user_id: ID of the user
        **fields: Column values to set

    Returns:
        bool: True if a row was updated
    """
    updated = db.query(User).filter(User.id == user_id).update(fields, synchronize_session=False)
    db.commit()
    return updated == 1

def swap_refresh_token_hash(
    db: Session,
    user_id: int,
    expected_hash: str,
    new_hash: str,
    last_login_at: datetime
) -> bool:
    """
    Replace the stored refresh token hash only if it still equals expected_hash.

    The comparison and the write are a single UPDATE statement, so of two
    concurrent rotations presenting the same token only one can win.

    Returns:
        bool: True if the hash was replaced
    """
    updated = db.query(User).filter(
        User.id == user_id,
        User.refresh_token_hash == expected_hash,
    ).update(
        {"refresh_token_hash": new_hash, "last_login_at": last_login_at},
        synchronize_session=False,
    )
    db.commit()
    return updated == 1

def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.commit()

def query_users(db: Session, gender: Optional[Gender] = None, role: Optional[UserRole] = None) -> Query:
    """
    Build a query over users with optional gender and role filters.
    """
    query = db.query(User).order_by(User.id)
    if gender:
        query = query.filter(User.gender == gender)
    if role:
        query = _with_role(query, role)
    return query

def _with_role(query: Query, role: UserRole) -> Query:
    # roles is a JSON list; match the quoted value in its text form
    return query.filter(cast(User.roles, String).like(f'%"{role.value}"%'))
