"""Access token issuance and refresh credential lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional
import logging
import math

from rudra.config import settings
from rudra.core.security import (
    create_access_token,
    generate_refresh_secret,
    hash_refresh_secret,
    verify_refresh_secret,
)
from rudra.models.security import RefreshToken
from rudra.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def refresh_expiry_minutes(value: Any) -> float:
    """
    Lifetime of a refresh credential in minutes

    Numbers and numeric strings are used as given; anything else (missing,
    blank, non-numeric, infinite) falls back to REFRESH_TOKEN_EXPIRE_MINUTES.
    Lifetimes past the datetime range are bounded by TokenService.refresh_expiry.
    """
    default = float(settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        minutes = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            minutes = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return minutes if math.isfinite(minutes) else default


class TokenService:
    """Issue token pairs and resolve presented refresh secrets."""

    def __init__(
        self,
        credentials: CredentialStore,
        hash_rounds: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.credentials = credentials
        self.hash_rounds = hash_rounds
        self.clock = clock

    def issue_access_token(self, user_id: int) -> str:
        return create_access_token(user_id)

    def refresh_expiry(self, expires_in_minutes: Optional[float] = None) -> datetime:
        """Expiry instant for a new credential; out-of-range lifetimes get the default."""
        default = timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
        now = self.clock()
        if expires_in_minutes is None:
            return now + default
        try:
            return now + timedelta(minutes=expires_in_minutes)
        except OverflowError:
            logger.warning(f"Refresh lifetime out of range, using default: minutes={expires_in_minutes}")
            return now + default

    def issue_token_pair(self, user_id: int, expires_in_minutes: Optional[float] = None) -> TokenPair:
        """
        Create an access token and a persisted refresh credential

        The pair is only returned once the credential row is committed; a
        store failure propagates to the caller.

        Args:
            user_id: Token owner
            expires_in_minutes: Refresh lifetime, defaults to REFRESH_TOKEN_EXPIRE_MINUTES

        Returns:
            TokenPair holding the plaintext refresh secret
        """
        access_token = self.issue_access_token(user_id)
        secret = generate_refresh_secret()
        expires_at = self.refresh_expiry(expires_in_minutes)
        self.credentials.insert(user_id, hash_refresh_secret(secret, self.hash_rounds), expires_at)
        return TokenPair(access_token=access_token, refresh_token=secret)

    def find_credential(self, refresh_secret: str) -> Optional[RefreshToken]:
        """
        Find the active credential whose hash matches the presented secret

        Only hashes are stored, so every unexpired, unrevoked row is checked in
        turn. Failed lookups have no side effects.
        """
        for record in self.credentials.list_active(self.clock()):
            if verify_refresh_secret(refresh_secret, record.token_hash):
                return record
        return None

    def revoke_all_for_user(self, user_id: int) -> int:
        return self.credentials.delete_for_user(user_id)
