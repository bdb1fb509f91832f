"""OTP gateway adapters (Twilio Verify and a local development stand-in)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
import logging

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client as TwilioClient

from rudra.config import Settings

logger = logging.getLogger(__name__)

SEND_OK_STATUSES = frozenset({"approved", "pending"})
SEND_FAILED = "failed"


@dataclass(frozen=True)
class OTPSendResult:
    status: str

    @property
    def accepted(self) -> bool:
        return self.status in SEND_OK_STATUSES


class OTPGateway(Protocol):
    def send(self, phone_number: str) -> OTPSendResult:
        ...

    def verify(self, phone_number: str, code: str) -> bool:
        ...


class TwilioVerifyGateway:
    """Send and check codes through a Twilio Verify v2 service."""

    def __init__(
        self,
        client: TwilioClient,
        service_sid: str,
        app_hash: Optional[str] = None,
        channel: str = "sms",
    ) -> None:
        self._client = client
        self._service_sid = service_sid
        self._app_hash = app_hash
        self._channel = channel

    @property
    def _service(self):
        return self._client.verify.v2.services(self._service_sid)

    def send(self, phone_number: str) -> OTPSendResult:
        params = {"to": phone_number, "channel": self._channel}
        if self._app_hash:
            params["app_hash"] = self._app_hash
        try:
            verification = self._service.verifications.create(**params)
        except TwilioRestException as exc:
            logger.error("Twilio send failed: status=%s code=%s", exc.status, exc.code)
            return OTPSendResult(status=SEND_FAILED)
        return OTPSendResult(status=str(verification.status))

    def verify(self, phone_number: str, code: str) -> bool:
        try:
            check = self._service.verification_checks.create(to=phone_number, code=code)
        except TwilioRestException as exc:
            # 404: no pending verification for this number (expired or already used)
            if exc.status == 404:
                return False
            raise
        return check.status == "approved"


class DevelopmentOTPGateway:
    """Offline gateway: every send is pending, only ``code`` verifies."""

    def __init__(self, code: str) -> None:
        self._code = code

    def send(self, phone_number: str) -> OTPSendResult:
        logger.warning("Twilio not configured; development OTP gateway in use")
        return OTPSendResult(status="pending")

    def verify(self, phone_number: str, code: str) -> bool:
        return code == self._code


def build_otp_gateway(settings: Settings) -> OTPGateway:
    """Twilio Verify when credentials are present, development gateway otherwise."""
    if settings.twilio_configured():
        client = TwilioClient(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        return TwilioVerifyGateway(
            client,
            settings.TWILIO_SERVICE_SID,
            app_hash=settings.TWILIO_APP_HASH or None,
        )
    if settings.ENVIRONMENT.lower() == "production":
        raise RuntimeError("Twilio Verify credentials are required in production")
    return DevelopmentOTPGateway(settings.DEV_OTP_CODE)
