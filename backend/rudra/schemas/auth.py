"""Auth request schemas

Each schema lists its fields in the order they are checked; the first failing
field decides the message returned to the client. ``MESSAGES`` maps a field's
JSON name and pydantic error type onto that message.
"""

from typing import ClassVar, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PHONE_PATTERN = r"^\+[0-9]{10,15}$"
OTP_PATTERN = r"^[0-9]{4,10}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

_PHONE_MESSAGES = {
    "missing": "Phone number is a required field",
    "string_type": "Phone number must be a string",
    "string_pattern_mismatch": "Phone number must be in international format (e.g. +911234567890)",
}


class AuthRequest(BaseModel):
    """Base for auth request bodies"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    MESSAGES: ClassVar[Dict[str, Dict[str, str]]] = {}


class SigninRequest(AuthRequest):
    """First call sends only the phone number, the second adds the OTP"""
    phone_number: str = Field(..., alias="phoneNumber", pattern=PHONE_PATTERN)
    code: Optional[str] = Field(None, pattern=OTP_PATTERN)

    MESSAGES: ClassVar[Dict[str, Dict[str, str]]] = {
        "phoneNumber": _PHONE_MESSAGES,
        "code": {
            "string_type": "Code must be a string",
            "string_pattern_mismatch": "Code must contain only digits (4-10)",
        },
    }


class SignupRequest(AuthRequest):
    """Profile details that complete a pending signup"""
    name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., alias="phoneNumber", pattern=PHONE_PATTERN)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    gender: Optional[str] = Field(None, max_length=20)
    age: Optional[int] = Field(None, ge=1, le=120)
    occupation: Optional[str] = Field(None, max_length=100)
    expires_in: Optional[Union[int, float, str]] = Field(None, alias="expiresIn")

    MESSAGES: ClassVar[Dict[str, Dict[str, str]]] = {
        "name": {
            "missing": "Name is a required field",
            "string_type": "Name must be a string",
            "string_too_short": "Name cannot be empty",
            "string_too_long": "Name must be at most 100 characters",
        },
        "phoneNumber": _PHONE_MESSAGES,
        "email": {
            "string_type": "Email must be a string",
            "string_too_long": "Email must be at most 255 characters",
            "string_pattern_mismatch": "Email must be a valid email",
        },
        "gender": {
            "string_type": "Gender must be a string",
            "string_too_long": "Gender must be at most 20 characters",
        },
        "age": {
            "int_type": "Age must be a number",
            "int_parsing": "Age must be a number",
            "int_from_float": "Age must be a whole number",
            "greater_than_equal": "Age must be greater than or equal to 1",
            "less_than_equal": "Age must be less than or equal to 120",
        },
        "occupation": {
            "string_type": "Occupation must be a string",
            "string_too_long": "Occupation must be at most 100 characters",
        },
        "expiresIn": {
            "default": "ExpiresIn must be a string or a number",
        },
    }


class ResendCodeRequest(AuthRequest):
    phone_number: str = Field(..., alias="phoneNumber", pattern=PHONE_PATTERN)

    MESSAGES: ClassVar[Dict[str, Dict[str, str]]] = {
        "phoneNumber": _PHONE_MESSAGES,
    }


class RefreshTokenRequest(AuthRequest):
    refresh_token: str = Field(..., alias="refreshToken", min_length=1)

    MESSAGES: ClassVar[Dict[str, Dict[str, str]]] = {
        "refreshToken": {
            "missing": "Refresh token is a required field",
            "string_type": "Refresh token must be a string",
            "string_too_short": "Refresh token cannot be empty",
        },
    }


class LogoutRequest(AuthRequest):
    refresh_token: str = Field(..., alias="refreshToken", min_length=1)

    MESSAGES: ClassVar[Dict[str, Dict[str, str]]] = {
        "refreshToken": {"default": "Invalid refresh token"},
    }
