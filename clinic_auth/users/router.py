"""
User Router - API endpoints for user management by clinic staff.

Role requirements for every route here are declared in core.permissions.ROUTE_POLICIES.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import guard_route
from ..auth.models import User, UserRole, Gender
from ..auth.schemas import UserRegistration, UserResponse, MessageResponse
from ..auth.service import register_user
from ..core.pagination import PageParams, PageResponse
from .schemas import UserUpdate, UserRolesUpdate, UserStatusUpdate
from .service import (
    get_user,
    list_users,
    update_user_details,
    set_user_roles,
    set_user_status,
    remove_user,
)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user_route(
    registration: UserRegistration,
    request: Request,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    """
    Create a user account on someone's behalf (e.g. a patient at the front desk).
    """
    return await register_user(db, registration, created_by_id=current_user.id, request=request)

@router.get("", response_model=PageResponse[UserResponse])
async def list_users_route(
    page_params: PageParams = Depends(),
    gender: Optional[Gender] = Query(None, description="Filter by gender"),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    return list_users(db, page_params, gender=gender, role=role)

@router.get("/{user_id}", response_model=UserResponse)
async def get_user_route(
    user_id: int,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    return get_user(db, user_id)

@router.patch("/{user_id}", response_model=UserResponse)
async def update_user_route(
    user_id: int,
    changes: UserUpdate,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    return update_user_details(db, user_id, changes)

@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user_route(
    user_id: int,
    request: Request,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    await remove_user(db, user_id, admin_id=current_user.id, request=request)
    return {"message": "User deleted successfully"}

@router.put("/{user_id}/roles", response_model=UserResponse)
async def update_user_roles_route(
    user_id: int,
    roles_update: UserRolesUpdate,
    request: Request,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    """
    Replace the roles of a user. Takes effect on the user's next request.
    """
    return await set_user_roles(db, user_id, roles_update, admin_id=current_user.id, request=request)

@router.put("/{user_id}/status", response_model=UserResponse)
async def update_user_status_route(
    user_id: int,
    status_update: UserStatusUpdate,
    request: Request,
    current_user: User = Depends(guard_route),
    db: Session = Depends(get_db)
):
    """
    Activate or deactivate an account. Deactivated users are signed out
    and their access tokens stop working immediately.
    """
    return await set_user_status(db, user_id, status_update, admin_id=current_user.id, request=request)
