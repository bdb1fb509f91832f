"""Phone/OTP authentication flow.

Sign-in is two requests correlated only by phone number: the first asks the
OTP gateway for a code, the second verifies it. Nothing is kept in memory
between them; every call rebuilds the account state from the user directory.
Concurrent sign-ins for one number are not serialized, so the last code that
verifies wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
import logging

from rudra.core.results import AuthFailure, AuthResult, AuthSuccess, ErrorKind
from rudra.schemas.user import UserRole, UserStatus
from rudra.services.otp_gateway import OTPGateway
from rudra.services.token_service import TokenPair, TokenService, refresh_expiry_minutes
from rudra.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

PROCEED_WITH_OTP = "proceed-with-otp"
PROCEED_WITH_SIGNUP = "proceed-with-signup"

MSG_SUSPENDED = "Your account has been suspended by the administrator"
MSG_ADMIN = "Login not allowed for admin accounts"
MSG_OTP_FAILED = "Failed to send OTP"
MSG_INVALID_OTP = "Invalid OTP"
MSG_USER_NOT_FOUND = "User not found"
MSG_USER_MISSING = "User does not exist"
MSG_INVALID_REFRESH = "Invalid refresh token"

SUSPENDED = AuthFailure(ErrorKind.LOCKED, MSG_SUSPENDED)
ADMIN_FORBIDDEN = AuthFailure(ErrorKind.FORBIDDEN, MSG_ADMIN)
OTP_SEND_FAILED = AuthFailure(ErrorKind.INTERNAL, MSG_OTP_FAILED)
INVALID_REFRESH = AuthFailure(ErrorKind.UNAUTHORIZED, MSG_INVALID_REFRESH)


def _session_result(tokens: TokenPair, show_onboarding_modules: bool) -> dict:
    return {
        "accessToken": tokens.access_token,
        "refreshToken": tokens.refresh_token,
        "showOnboardingModules": show_onboarding_modules,
    }


@dataclass
class AuthService:
    users: UserDirectory
    otp_gateway: OTPGateway
    tokens: TokenService

    def _send_code(self, phone_number: str) -> bool:
        response = self.otp_gateway.send(phone_number)
        if not response.accepted:
            logger.error(f"OTP send rejected by gateway: status={response.status}")
            return False
        return True

    def _has_onboarding_modules(self) -> bool:
        return self.users.count_active_onboarding_modules() > 0

    def initiate_or_verify(self, phone_number: str, code: Optional[str] = None) -> AuthResult:
        """
        Sign in with a phone number

        Without a code an OTP is sent (creating a pending user for unknown
        numbers). With a code the OTP is verified and, for users that finished
        signup, a session is issued.
        """
        if code:
            return self._verify(phone_number, code)
        return self._initiate(phone_number)

    def _initiate(self, phone_number: str) -> AuthResult:
        user = self.users.find_by_phone(phone_number)

        if user is None:
            self.users.insert_minimal(phone_number)
            if not self._send_code(phone_number):
                return OTP_SEND_FAILED
            return AuthSuccess(201, "User created successfully", {"action": PROCEED_WITH_OTP})

        if user.status == UserStatus.SUSPENDED:
            return SUSPENDED

        if user.role == UserRole.ADMIN:
            return ADMIN_FORBIDDEN

        if not self._send_code(phone_number):
            return OTP_SEND_FAILED
        return AuthSuccess(200, "OTP sent successfully", {"action": PROCEED_WITH_OTP})

    def _verify(self, phone_number: str, code: str) -> AuthResult:
        user = self.users.find_by_phone(phone_number)
        # A vanished row (or one without a role) counts as an unknown user
        if user is None or getattr(user, "role", None) is None:
            return AuthFailure(ErrorKind.NOT_FOUND, MSG_USER_NOT_FOUND)

        if user.role == UserRole.ADMIN:
            return ADMIN_FORBIDDEN

        if not self.otp_gateway.verify(phone_number, code):
            return AuthFailure(ErrorKind.VALIDATION, MSG_INVALID_OTP)

        user = self.users.find_by_phone(phone_number)
        if user is None:
            return AuthFailure(ErrorKind.NOT_FOUND, MSG_USER_NOT_FOUND)

        if user.status == UserStatus.SUSPENDED:
            return SUSPENDED

        if user.signup_pending:
            return AuthSuccess(
                200,
                "User is already registered. Sign up is pending.",
                {"action": PROCEED_WITH_SIGNUP},
            )

        has_onboarding = self._has_onboarding_modules()
        tokens = self.tokens.issue_token_pair(user.id)
        logger.info(f"User signed in: id={user.id}")
        return AuthSuccess(
            200,
            "User signed in successfully",
            _session_result(tokens, has_onboarding and user.status == UserStatus.ONBOARDED),
        )

    def complete_signup(
        self,
        phone_number: str,
        name: str,
        email: Optional[str] = None,
        gender: Optional[str] = None,
        age: Optional[int] = None,
        occupation: Optional[str] = None,
        expires_in: Any = None,
    ) -> AuthResult:
        """
        Attach a profile to the pending user created during sign-in

        The profile update and the credential insert are committed separately;
        if the insert fails the profile stays written and the call fails.
        """
        user = self.users.find_by_phone(phone_number)
        if user is None:
            return AuthFailure(ErrorKind.VALIDATION, MSG_USER_MISSING)

        if user.status == UserStatus.SUSPENDED:
            return SUSPENDED

        has_onboarding = self._has_onboarding_modules()
        status = UserStatus.ONBOARDED if has_onboarding else UserStatus.ACTIVE
        expires_in_minutes = refresh_expiry_minutes(expires_in)

        self.users.update_profile_and_status(
            user.id,
            {
                "name": name,
                "email": email,
                "gender": gender,
                "age": age,
                "occupation": occupation,
                "status": status.value,
                "last_active_at": datetime.utcnow(),
            },
        )

        tokens = self.tokens.issue_token_pair(user.id, expires_in_minutes)
        logger.info(f"User signed up: id={user.id} status={status.value}")
        return AuthSuccess(
            201,
            "User signed up successfully",
            _session_result(tokens, has_onboarding and status == UserStatus.ONBOARDED),
        )

    def resend_code(self, phone_number: str) -> AuthResult:
        if not self._send_code(phone_number):
            return OTP_SEND_FAILED
        return AuthSuccess(200, "OTP resend successfully")

    def refresh(self, refresh_secret: str) -> AuthResult:
        """
        Exchange a refresh secret for a new access token

        The presented refresh credential stays valid; it is not rotated.
        """
        record = self.tokens.find_credential(refresh_secret)
        if record is None:
            return INVALID_REFRESH

        access_token = self.tokens.issue_access_token(record.user_id)
        return AuthSuccess(200, "Token refreshed successfully", access_token)

    def logout(self, refresh_secret: str) -> AuthResult:
        """Sign the owner of ``refresh_secret`` out of every session."""
        record = self.tokens.find_credential(refresh_secret)
        if record is None:
            return INVALID_REFRESH

        count = self.tokens.revoke_all_for_user(record.user_id)
        logger.info(f"User logged out: id={record.user_id} credentials_removed={count}")
        return AuthSuccess(200, "Logged out successfully")
