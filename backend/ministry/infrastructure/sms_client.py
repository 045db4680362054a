"""Twilio SMS Client — async outbound SMS with friendly error mapping.

Invariants:
    - Destination numbers must already be E.164 (core/phone.py normalises them)
    - TwilioRestException is always mapped to SmsDeliveryError with a readable message
    - Missing credentials raise ProviderNotConfiguredError on first send

Design Decisions:
    - AsyncTwilioHttpClient + messages.create_async: no thread pool around the
      blocking client
"""

import logging
from dataclasses import dataclass

from twilio.base.exceptions import TwilioRestException
from twilio.http.async_http_client import AsyncTwilioHttpClient
from twilio.rest import Client

from ministry.core.errors import ProviderNotConfiguredError, SmsDeliveryError

logger = logging.getLogger(__name__)

TWILIO_ERROR_MESSAGES: dict[int, str] = {
    21211: "Invalid phone number. Please check the number and try again.",
    21408: (
        "This number must be verified in your Twilio account (trial limitation)."
    ),
    21610: "This number has unsubscribed from receiving messages.",
    20003: "Authentication failed. Please check your Twilio credentials.",
    429: "Sending too fast. Please wait a moment and try again.",
}


def friendly_error(code: int | None, status: int | None, fallback: str) -> str:
    if code in TWILIO_ERROR_MESSAGES:
        return TWILIO_ERROR_MESSAGES[code]
    if status == 429:
        return TWILIO_ERROR_MESSAGES[429]
    return fallback or "Failed to send SMS"


@dataclass(frozen=True)
class SmsReceipt:
    sid: str
    status: str
    to: str


class TwilioSmsClient:
    """Sends SMS from the configured Twilio number."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client: Client | None = None

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def _twilio(self) -> Client:
        if self._client is None:
            self._client = Client(
                self.account_sid, self.auth_token,
                http_client=AsyncTwilioHttpClient(),
            )
        return self._client

    async def send(self, to: str, body: str) -> SmsReceipt:
        if not self.configured:
            raise ProviderNotConfiguredError("twilio")
        try:
            message = await self._twilio().messages.create_async(
                body=body, from_=self.from_number, to=to,
            )
        except TwilioRestException as e:
            logger.warning(
                f"Twilio rejected SMS: {e.msg}", extra={"error_code": e.code},
            )
            raise SmsDeliveryError(
                friendly_error(e.code, e.status, e.msg), provider_code=e.code,
            )
        return SmsReceipt(sid=message.sid, status=message.status, to=message.to)

    async def aclose(self) -> None:
        if self._client is not None:
            http_client = self._client.http_client
            if isinstance(http_client, AsyncTwilioHttpClient):
                await http_client.close()
            self._client = None
