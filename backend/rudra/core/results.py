"""Result values returned by the auth orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ErrorKind(str, Enum):
    """Failure categories, mapped to HTTP status codes at the API boundary."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    LOCKED = "locked"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


@dataclass(frozen=True)
class AuthSuccess:
    status_code: int
    message: str
    result: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return True

    def to_body(self) -> dict:
        body = {"message": self.message}
        if self.result is not None:
            body["result"] = self.result
        return body


@dataclass(frozen=True)
class AuthFailure:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


AuthResult = Union[AuthSuccess, AuthFailure]
