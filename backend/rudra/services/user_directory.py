"""User directory - phone-identified accounts and onboarding module lookups"""

from datetime import datetime
from typing import Any, Dict, Optional, Protocol
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rudra.models.module import Module
from rudra.models.user import User

logger = logging.getLogger(__name__)

ONBOARDING_TIER = "ONBOARDING"

PROFILE_FIELDS = ("name", "email", "gender", "age", "occupation", "status", "last_active_at")


class UserDirectory(Protocol):
    def find_by_phone(self, phone_number: str) -> Optional[User]:
        ...

    def insert_minimal(self, phone_number: str) -> User:
        ...

    def update_profile_and_status(self, user_id: int, fields: Dict[str, Any]) -> None:
        ...

    def count_active_onboarding_modules(self) -> int:
        ...


class SqlUserDirectory:
    """User directory backed by the ``users`` and ``modules`` tables"""

    def __init__(self, db: Session):
        self.db = db

    def find_by_phone(self, phone_number: str) -> Optional[User]:
        """Get user by phone number"""
        return self.db.query(User).filter(User.phone_number == phone_number).first()

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def insert_minimal(self, phone_number: str) -> User:
        """
        Create a user holding only a phone number

        A concurrent request may insert the same number first; the unique
        constraint rejects ours and the existing row is returned instead.

        Args:
            phone_number: Phone number in international format

        Returns:
            The persisted user
        """
        user = User(phone_number=phone_number)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.find_by_phone(phone_number)
            if existing is None:
                raise
            return existing

        self.db.refresh(user)
        logger.info(f"Created pending user: id={user.id}")
        return user

    def update_profile_and_status(self, user_id: int, fields: Dict[str, Any]) -> None:
        """
        Write profile fields and status for a user

        Args:
            user_id: User ID
            fields: Subset of PROFILE_FIELDS; unknown keys are rejected
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")

        values = dict(fields)
        values.setdefault("last_active_at", datetime.utcnow())
        self.db.query(User).filter(User.id == user_id).update(values, synchronize_session="fetch")
        self.db.commit()

    def count_active_onboarding_modules(self) -> int:
        """Number of active modules tagged for the onboarding tier"""
        count = (
            self.db.query(func.count(Module.id))
            .filter(Module.tier == ONBOARDING_TIER, Module.is_active == True)  # noqa: E712
            .scalar()
        )
        return int(count or 0)
