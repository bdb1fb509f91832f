"""Refresh credential persistence."""

from __future__ import annotations

from datetime import datetime
from typing import List, Protocol

from sqlalchemy.orm import Session

from rudra.models.security import RefreshToken


class CredentialStore(Protocol):
    def insert(self, user_id: int, token_hash: str, expires_at: datetime) -> RefreshToken:
        ...

    def list_active(self, now: datetime) -> List[RefreshToken]:
        ...

    def delete_for_user(self, user_id: int) -> int:
        ...


class SqlCredentialStore:
    """Credential store backed by the ``refresh_tokens`` table."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, user_id: int, token_hash: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            is_revoked=False,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def list_active(self, now: datetime) -> List[RefreshToken]:
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.expires_at > now, RefreshToken.is_revoked == False)  # noqa: E712
            .all()
        )

    def delete_for_user(self, user_id: int) -> int:
        count = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
