"""Pydantic schemas for API validation"""

from rudra.schemas.user import UserRole, UserStatus, UserResponse
from rudra.schemas.auth import (
    SigninRequest,
    SignupRequest,
    ResendCodeRequest,
    RefreshTokenRequest,
    LogoutRequest,
)
from rudra.schemas.response import MessageResponse, ErrorResponse
from rudra.schemas.validation import ValidBody, InvalidBody, validate_body

__all__ = [
    "UserRole", "UserStatus", "UserResponse",
    "SigninRequest", "SignupRequest", "ResendCodeRequest", "RefreshTokenRequest", "LogoutRequest",
    "MessageResponse", "ErrorResponse",
    "ValidBody", "InvalidBody", "validate_body",
]
