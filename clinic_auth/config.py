"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from pydantic import validator
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    Attributes:
        database_url: Database connection string
        jwt_access_secret: Secret used to sign access tokens
        jwt_refresh_secret: Secret used to sign refresh tokens (must differ from the access secret)
        algorithm: Algorithm used for JWT encoding (typically HS256)
        access_token_expire_minutes: Access token lifetime in minutes
        refresh_token_expire_days: Refresh token lifetime in days
        password_hash_rounds: bcrypt cost factor for password and refresh token hashes
        health_id_max_attempts: How many health identifiers to try before giving up

        # Bootstrap admin settings (optional)
        bootstrap_admin_username: Username for the first admin
        bootstrap_admin_email: Email for the first admin
        bootstrap_admin_password: Password for the first admin

        cors_origins: Origins allowed by the CORS middleware
    """
    # Database settings
    database_url: str

    # JWT settings
    jwt_access_secret: str
    jwt_refresh_secret: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Hashing settings
    password_hash_rounds: int = 12

    # Identifier generation
    health_id_max_attempts: int = 5

    # Bootstrap admin settings (optional - only used for first admin creation)
    bootstrap_admin_username: Optional[str] = None
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None

    # Frontend settings
    cors_origins: List[str] = ["http://localhost:3000"]

    class Config:
        """Configuration for environment variables loading"""
        env_file = ".env"
        case_sensitive = False

    @validator("jwt_access_secret", "jwt_refresh_secret")
    def secret_must_not_be_blank(cls, v):
        """Reject empty signing secrets"""
        if not v or not v.strip():
            raise ValueError("JWT secrets must not be empty")
        return v

    @validator("jwt_refresh_secret")
    def refresh_secret_must_differ(cls, v, values):
        """Access and refresh tokens must be signed with different secrets"""
        if v == values.get("jwt_access_secret"):
            raise ValueError("JWT_REFRESH_SECRET must differ from JWT_ACCESS_SECRET")
        return v

    @validator("password_hash_rounds")
    def rounds_in_bcrypt_range(cls, v):
        """bcrypt accepts cost factors between 4 and 31"""
        if not 4 <= v <= 31:
            raise ValueError("PASSWORD_HASH_ROUNDS must be between 4 and 31")
        return v

    @validator("health_id_max_attempts")
    def at_least_one_attempt(cls, v):
        if v < 1:
            raise ValueError("HEALTH_ID_MAX_ATTEMPTS must be at least 1")
        return v

# Create settings instance
settings = Settings()
