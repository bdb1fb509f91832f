"""API dependencies - service wiring and access-token authentication"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from rudra.config import settings
from rudra.core.database import get_db
from rudra.core.security import decode_access_token
from rudra.core.exceptions import AccountLockedError, AuthenticationError
from rudra.models.user import User
from rudra.schemas.user import UserStatus
from rudra.services.auth_service import AuthService
from rudra.services.credential_store import SqlCredentialStore
from rudra.services.otp_gateway import OTPGateway, build_otp_gateway
from rudra.services.token_service import TokenService
from rudra.services.user_directory import SqlUserDirectory

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


@lru_cache()
def get_otp_gateway() -> OTPGateway:
    """Process-wide OTP gateway built from settings"""
    return build_otp_gateway(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    otp_gateway: OTPGateway = Depends(get_otp_gateway),
) -> AuthService:
    """
    Build the auth flow for one request

    Args:
        db: Database session for this request
        otp_gateway: OTP gateway adapter

    Returns:
        AuthService wired to SQL-backed stores
    """
    return AuthService(
        users=SqlUserDirectory(db),
        otp_gateway=otp_gateway,
        tokens=TokenService(SqlCredentialStore(db)),
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from an access token

    Args:
        credentials: HTTP Bearer credentials
        db: Database session

    Returns:
        Current user

    Raises:
        AuthenticationError: If token is missing, invalid or the user is unknown
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise AuthenticationError("Invalid token payload")

    user = SqlUserDirectory(db).get_by_id(int(user_id))
    if not user:
        raise AuthenticationError("User not found")

    if user.status == UserStatus.SUSPENDED:
        raise AccountLockedError()

    return user
