"""Security utilities - JWT access tokens, refresh secret generation and hashing"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import bcrypt
from rudra.config import settings
import secrets

ACCESS_TOKEN_TYPE = "access"
REFRESH_SECRET_BYTES = 32


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token bound to a user id

    Args:
        user_id: Owner of the token
        expires_delta: Token lifetime, defaults to ACCESS_TOKEN_EXPIRE_DAYS

    Returns:
        str: Encoded JWT token
    """
    now = datetime.utcnow()
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode = {
        "sub": str(user_id),
        "typ": ACCESS_TOKEN_TYPE,
        "exp": expire,
        "iat": now,
        "jti": secrets.token_urlsafe(16)
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify an access token

    Args:
        token: JWT token string

    Returns:
        Optional[Dict]: Decoded payload, or None if the token is invalid,
        expired or not an access token
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def generate_refresh_secret() -> str:
    """Random opaque refresh secret (256 bits, hex encoded)."""
    return secrets.token_hex(REFRESH_SECRET_BYTES)


def hash_refresh_secret(secret: str, rounds: Optional[int] = None) -> str:
    """
    Hash a refresh secret using bcrypt

    Args:
        secret: Plain refresh secret
        rounds: bcrypt cost factor, defaults to REFRESH_TOKEN_HASH_ROUNDS

    Returns:
        str: Hashed secret
    """
    return bcrypt.hashpw(
        secret.encode('utf-8'),
        bcrypt.gensalt(rounds=rounds or settings.REFRESH_TOKEN_HASH_ROUNDS)
    ).decode('utf-8')


def verify_refresh_secret(secret: str, hashed_secret: str) -> bool:
    """
    Verify a refresh secret against a stored hash

    Args:
        secret: Presented refresh secret
        hashed_secret: Stored bcrypt hash

    Returns:
        bool: True if the secret matches
    """
    try:
        return bcrypt.checkpw(
            secret.encode('utf-8'),
            hashed_secret.encode('utf-8')
        )
    except ValueError:
        # Malformed stored hash
        return False
