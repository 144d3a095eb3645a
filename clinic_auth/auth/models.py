"""
User Model - Stores all user information in the system with role-based authentication support.

A user record is the principal that the auth module authenticates and authorizes.
"""
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Enum, JSON
from sqlalchemy.sql import func
from typing import FrozenSet
import enum
from ..database import Base

class UserRole(str, enum.Enum):
    """
    Enumeration for user roles in the medical clinic system.

    Roles:
    - ADMIN: System administrators with full access
    - DOCTOR: Medical practitioners
    - NURSE: Nursing staff
    - PATIENT: Registered patients
    - USER: Default, least privileged role
    """
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    NURSE = "NURSE"
    PATIENT = "PATIENT"
    USER = "USER"

DEFAULT_ROLE = UserRole.USER

class AccountStatus(str, enum.Enum):
    """
    Enumeration for account status types.

    Status Types:
    - ACTIVE: Account approved for system access
    - DISABLED: Account created but not approved for access
    - DEACTIVATED: Previously active account that has been suspended
    - RED_TAG: Account flagged for investigation or special handling
    """
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"
    DEACTIVATED = "DEACTIVATED"
    RED_TAG = "RED_TAG"

class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"

class User(Base):
    """
    User Model - Stores all user information in the system

    Fields:
    - id: Primary key for user identification
    - username: Unique login handle
    - email: Unique email address, also accepted as login handle
    - first_name / last_name: User's name
    - dob: Date of birth (optional for seeded accounts)
    - gender: User's gender (optional for seeded accounts)
    - health_id: Unique medical record number (see core.identifiers)
    - active: Whether the account may sign in at all
    - status: Current account status
    - roles: Non-empty list of UserRole values
    - password_hash: Securely hashed password (never store raw passwords)
    - refresh_token_hash: Hash of the single live refresh token, NULL when signed out
    - last_login_at: Timestamp of the last login or token rotation
    - created_at / updated_at: Audit timestamps
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    dob = Column(Date, nullable=True)
    gender = Column(Enum(Gender), nullable=True)
    health_id = Column(String, unique=True, index=True, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    status = Column(Enum(AccountStatus), default=AccountStatus.ACTIVE, nullable=False)
    roles = Column(JSON, default=lambda: [DEFAULT_ROLE.value], nullable=False)
    password_hash = Column(String, nullable=False)
    refresh_token_hash = Column(String, nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def role_set(self) -> FrozenSet[UserRole]:
        """Roles as enum members; an empty or missing list falls back to the default role."""
        return frozenset(UserRole(role) for role in (self.roles or [DEFAULT_ROLE.value]))

    @property
    def is_authenticatable(self) -> bool:
        """Only active accounts in ACTIVE status may authenticate."""
        return bool(self.active) and self.status == AccountStatus.ACTIVE

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', roles={self.roles})>"
