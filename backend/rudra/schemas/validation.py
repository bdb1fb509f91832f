"""Request body validation returning a tagged result instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Type, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from rudra.schemas.auth import AuthRequest

T = TypeVar("T", bound=AuthRequest)

BODY_NOT_OBJECT = "Request body must be a JSON object"


@dataclass(frozen=True)
class ValidBody(Generic[T]):
    data: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class InvalidBody:
    message: str

    @property
    def ok(self) -> bool:
        return False


ValidationResult = Union[ValidBody[T], InvalidBody]


def _first_error_message(schema: Type[AuthRequest], exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    loc = error.get("loc") or ()
    if not loc:
        return BODY_NOT_OBJECT

    field = str(loc[0])
    messages = schema.MESSAGES.get(field, {})
    message = messages.get(error["type"]) or messages.get("default")
    if message:
        return message
    return f"{field} is invalid"


def validate_body(schema: Type[T], payload: Any) -> ValidationResult:
    """
    Validate a decoded JSON body against an auth schema

    Args:
        schema: Request schema class
        payload: Decoded JSON body (None is treated as an empty object)

    Returns:
        ValidBody with the parsed model, or InvalidBody carrying the message of
        the first failing field
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return InvalidBody(BODY_NOT_OBJECT)

    try:
        return ValidBody(schema.model_validate(payload))
    except PydanticValidationError as exc:
        return InvalidBody(_first_error_message(schema, exc))
