"""Custom exception classes for the application"""

from typing import Optional

from rudra.core.results import AuthFailure, ErrorKind


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error = error
        super().__init__(self.message)


# Validation Errors
class ValidationError(BaseAPIException):
    """Malformed or missing request input, or a rejected OTP"""
    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message, status_code=400, error=error)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class UserNotFoundError(AuthenticationError):
    """Unknown user where one is required"""
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class TokenInvalidError(AuthenticationError):
    """Refresh or access token is invalid or expired"""
    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message)


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


class AccountLockedError(BaseAPIException):
    """Account suspended by an administrator"""
    def __init__(self, message: str = "Your account has been suspended by the administrator"):
        super().__init__(message, status_code=423)


# System Errors
class InternalServiceError(BaseAPIException):
    """Gateway or persistence failure"""
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status_code=500)


_FAILURE_EXCEPTIONS = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: UserNotFoundError,
    ErrorKind.FORBIDDEN: AuthorizationError,
    ErrorKind.LOCKED: AccountLockedError,
    ErrorKind.UNAUTHORIZED: TokenInvalidError,
    ErrorKind.INTERNAL: InternalServiceError,
}


def exception_for_failure(failure: AuthFailure) -> BaseAPIException:
    """Map an orchestrator failure onto the HTTP exception that renders it."""
    return _FAILURE_EXCEPTIONS[failure.kind](failure.message)


def raise_for_failure(failure: AuthFailure) -> None:
    raise exception_for_failure(failure)
