"""
Authentication-specific exceptions.
"""
from fastapi import HTTPException, status

class AuthException(HTTPException):
    """Base class for authentication exceptions."""
    def __init__(self, status_code: int, detail: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class InvalidCredentialsException(AuthException):
    """
    Exception raised when a login handle or password is wrong, or the account cannot sign in.
    The message never says which.
    """
    def __init__(self):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

class UnauthenticatedException(AuthException):
    """Exception raised when the access token is missing, invalid, expired or belongs to an inactive account."""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

class ForbiddenException(AuthException):
    """Exception raised when an authenticated user lacks a role, or a refresh token is not usable."""
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

class UserAlreadyExistsException(AuthException):
    """Exception raised when a username or email is already registered."""
    def __init__(self, detail: str = "Username or email already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class UserNotFoundException(AuthException):
    """Exception raised when the target user of a direct-id operation does not exist."""
    def __init__(self, detail: str = "User not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
