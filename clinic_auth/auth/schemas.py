"""
Auth Schemas - Pydantic models for request validation and response serialization.
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, EmailStr, Field, validator
from datetime import date, datetime
import re
from .models import UserRole, AccountStatus, Gender

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,20}$")

class UserRegistration(BaseModel):
    """
    User Registration Schema - Used for self-registration and staff-created accounts

    Fields:
    - username: Unique login handle
    - first_name / last_name: User's name
    - email: User's email address
    - password: 8-20 characters with lower, upper, digit and one of @$!%*?&
    - dob: Date of birth (ISO date)
    - gender: MALE or FEMALE
    """
    username: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    dob: date
    gender: Gender

    @validator("username", "first_name", "last_name")
    def not_blank(cls, v):
        """Reject whitespace-only values"""
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @validator("password")
    def password_strength(cls, v):
        """Validate password length and character classes"""
        if not 8 <= len(v) <= 20:
            raise ValueError("Password must be between 8 and 20 characters long")
        if not PASSWORD_PATTERN.match(v):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, "
                "one number, and one special character"
            )
        return v

class UserLogin(BaseModel):
    """
    User Login Schema - Used for authentication

    Fields:
    - login_id: Username or email address
    - password: User's plain text password
    """
    login_id: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @validator("login_id")
    def strip_login_id(cls, v):
        """Match the trimming applied to usernames at registration"""
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

class UserResponse(BaseModel):
    """
    User Response Schema - The only shape in which a user leaves the service.

    Password hash, refresh token hash and last login time are deliberately absent.
    """
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    dob: Optional[date] = None
    gender: Optional[Gender] = None
    health_id: str
    active: bool
    status: AccountStatus
    roles: List[UserRole]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True

class TokenPair(BaseModel):
    """
    Token Pair Schema - Access and refresh token issued together
    """
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class LoginResponse(BaseModel):
    user: UserResponse
    tokens: TokenPair

class MessageResponse(BaseModel):
    message: str

class AuditLogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    action: str
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True
