"""Authentication routes"""

from typing import Any, Callable
import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from rudra.api.deps import get_auth_service
from rudra.core.exceptions import BaseAPIException, InternalServiceError, ValidationError, raise_for_failure
from rudra.core.results import AuthResult
from rudra.schemas.auth import (
    LogoutRequest,
    RefreshTokenRequest,
    ResendCodeRequest,
    SigninRequest,
    SignupRequest,
)
from rudra.schemas.response import ErrorResponse, MessageResponse
from rudra.schemas.validation import InvalidBody, validate_body
from rudra.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()

VALIDATION_ERROR = "Validation error"


def _documented(*failure_codes: int) -> dict:
    responses = {200: {"model": MessageResponse}}
    responses.update({code: {"model": ErrorResponse} for code in (400, 500) + failure_codes})
    return responses


def _validated(schema, payload: Any):
    outcome = validate_body(schema, payload)
    if isinstance(outcome, InvalidBody):
        raise ValidationError(outcome.message, error=VALIDATION_ERROR)
    return outcome.data


def _respond(failure_message: str, operation: Callable[[], AuthResult]) -> JSONResponse:
    """
    Run an auth operation and render its result

    Store and gateway errors are logged and collapsed into ``failure_message``.
    """
    try:
        outcome = operation()
    except BaseAPIException:
        raise
    except Exception:
        logger.exception(failure_message)
        raise InternalServiceError(failure_message)

    if not outcome.ok:
        raise_for_failure(outcome)
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_body())


@router.post("/signin", responses=_documented(401, 403, 423))
def signin(
    payload: Any = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Sign in with a phone number

    Send ``{phoneNumber}`` to receive an OTP, then ``{phoneNumber, code}`` to
    verify it. Verified users with a completed signup receive a token pair;
    others are told to proceed with signup.
    """
    body = _validated(SigninRequest, payload)
    return _respond(
        "Failed to signin user",
        lambda: auth.initiate_or_verify(body.phone_number, body.code),
    )


@router.post("/signup", status_code=201, responses=_documented(423))
def signup(
    payload: Any = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Complete signup for a phone number that has already started sign-in

    ``expiresIn`` sets the refresh token lifetime in minutes (default 7 days).
    """
    body = _validated(SignupRequest, payload)
    return _respond(
        "Failed to signup user",
        lambda: auth.complete_signup(
            body.phone_number,
            body.name,
            email=body.email,
            gender=body.gender,
            age=body.age,
            occupation=body.occupation,
            expires_in=body.expires_in,
        ),
    )


@router.post("/resend", responses=_documented())
def resend_code(
    payload: Any = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """Send a fresh OTP to the phone number"""
    body = _validated(ResendCodeRequest, payload)
    return _respond("Failed to resend OTP", lambda: auth.resend_code(body.phone_number))


@router.post("/refresh-token", responses=_documented(401))
def refresh_token(
    payload: Any = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange a refresh token for a new access token"""
    body = _validated(RefreshTokenRequest, payload)
    return _respond("Failed to refresh token", lambda: auth.refresh(body.refresh_token))


@router.post("/logout", responses=_documented(401))
def logout(
    payload: Any = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke every refresh token of the user owning the presented one"""
    body = _validated(LogoutRequest, payload)
    return _respond("Failed to logout user", lambda: auth.logout(body.refresh_token))
