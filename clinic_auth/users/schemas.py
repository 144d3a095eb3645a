"""
User management schemas.
"""
from typing import Optional, List
from pydantic import BaseModel, validator
from datetime import date
from ..auth.models import UserRole, AccountStatus, Gender

class UserUpdate(BaseModel):
    """
    User Update Schema - Profile fields staff may edit

    Fields left out of the request body are not changed.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[Gender] = None

    @validator("first_name", "last_name")
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v is not None else v

class UserRolesUpdate(BaseModel):
    """
    Role Update Schema - Replaces the user's role set

    Fields:
    - roles: Non-empty list of roles; duplicates are dropped
    """
    roles: List[UserRole]

    @validator("roles")
    def roles_not_empty(cls, v):
        """A user always holds at least one role"""
        if not v:
            raise ValueError("A user must hold at least one role")
        return list(dict.fromkeys(v))

class UserStatusUpdate(BaseModel):
    """
    Status Update Schema - Activates or deactivates an account
    """
    active: bool
    status: AccountStatus
