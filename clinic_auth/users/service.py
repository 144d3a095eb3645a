"""
User Service - Business logic for user management by clinic staff.
"""
from typing import Optional
from sqlalchemy.orm import Session
from fastapi import Request
import logging

from ..auth.exceptions import UserNotFoundException
from ..auth.models import User, UserRole, Gender
from ..auth.schemas import UserResponse
from ..auth.sessions import revoke_refresh_token
from ..core.audit_service import create_audit_log
from ..core.pagination import PageParams, PageResponse, paginate
from .repository import find_user_by_id, query_users, update_user, delete_user
from .schemas import UserUpdate, UserRolesUpdate, UserStatusUpdate

# Set up logging
logger = logging.getLogger(__name__)

def get_user(db: Session, user_id: int) -> User:
    """
    Get a user by ID.

    Raises:
        UserNotFoundException: If the user does not exist
    """
    user = find_user_by_id(db, user_id)
    if not user:
        raise UserNotFoundException()
    return user

def list_users(
    db: Session,
    page_params: PageParams,
    gender: Optional[Gender] = None,
    role: Optional[UserRole] = None
) -> PageResponse:
    return paginate(query_users(db, gender=gender, role=role), page_params, UserResponse)

def update_user_details(db: Session, user_id: int, changes: UserUpdate) -> User:
    """
    Update profile fields of a user.

    Args:
        db: Database session
        user_id: ID of the user
        changes: Fields to change; unset fields are left alone

    Returns:
        User: Updated user

    Raises:
        UserNotFoundException: If the user does not exist
    """
    user = get_user(db, user_id)
    fields = changes.dict(exclude_unset=True, exclude_none=True)
    if fields:
        update_user(db, user.id, **fields)
        logger.info(f"Updated user {user_id}: {sorted(fields)}")
    db.refresh(user)
    return user

async def set_user_roles(
    db: Session,
    user_id: int,
    roles_update: UserRolesUpdate,
    admin_id: int,
    request: Optional[Request] = None
) -> User:
    user = get_user(db, user_id)
    roles = [role.value for role in roles_update.roles]
    update_user(db, user.id, roles=roles)
    logger.info(f"Admin {admin_id} set roles of user {user_id} to {roles}")
    await create_audit_log(
        db, action="USER_ROLES_UPDATED", user_id=admin_id, request=request,
        details={"target_user_id": user_id, "roles": roles},
    )
    db.refresh(user)
    return user

async def set_user_status(
    db: Session,
    user_id: int,
    status_update: UserStatusUpdate,
    admin_id: int,
    request: Optional[Request] = None
) -> User:
    """
    Activate or deactivate an account.

    Deactivating an account also ends its refresh session.

    Raises:
        UserNotFoundException: If the user does not exist
    """
    user = get_user(db, user_id)
    update_user(db, user.id, active=status_update.active, status=status_update.status)
    db.refresh(user)

    if not user.is_authenticatable:
        revoke_refresh_token(db, user.id)

    logger.info(
        f"Admin {admin_id} set user {user_id} active={status_update.active} status={status_update.status.value}"
    )
    await create_audit_log(
        db, action="USER_STATUS_UPDATED", user_id=admin_id, request=request,
        details={
            "target_user_id": user_id,
            "active": status_update.active,
            "status": status_update.status.value,
        },
    )
    db.refresh(user)
    return user

async def remove_user(
    db: Session,
    user_id: int,
    admin_id: int,
    request: Optional[Request] = None
) -> None:
    user = get_user(db, user_id)
    delete_user(db, user)
    logger.info(f"Admin {admin_id} deleted user {user_id}")
    await create_audit_log(
        db, action="USER_DELETED", user_id=admin_id if admin_id != user_id else None, request=request,
        details={"target_user_id": user_id, "deleted_by": admin_id},
    )
