"""Resend Email Client — transactional and bulk email over the Resend REST API.

Invariants:
    - One HTTP call per message; batching and pacing belong to the caller
    - Non-2xx responses, transport failures and malformed URLs raise EmailDeliveryError
    - A 2xx reply is a delivery even when its body is not JSON (provider id is then "")
    - Missing API key raises ProviderNotConfiguredError on first send, not at startup

Design Decisions:
    - httpx.AsyncClient over the vendor SDK: the API is a single POST and httpx is
      already in the stack for tests
    - Client owned by the process (created lazily, closed in lifespan)
"""

import logging
from dataclasses import dataclass

import httpx

from ministry.core.errors import (
    EmailDeliveryError, ErrorContext, ProviderNotConfiguredError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str | None = None
    reply_to: str | None = None


class ResendEmailClient:
    """Sends EmailMessage objects through Resend."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 15.0,
    ):
        self.api_key = api_key
        self.sender = sender
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._http: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        return self._http

    async def send(self, message: EmailMessage) -> str:
        """Send one email; returns the provider message id."""
        if not self.configured:
            raise ProviderNotConfiguredError("resend")
        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        try:
            response = await self._client().post("/emails", json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Resend transport error: {e}")
            raise EmailDeliveryError(
                f"transport error: {e}", ErrorContext(provider="resend"),
            )
        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(
                f"Resend rejected email: {detail}",
                extra={"error_code": response.status_code},
            )
            raise EmailDeliveryError(detail)
        try:
            body = response.json()
        except ValueError:
            logger.warning(
                "Resend accepted email but returned a non-JSON body",
                extra={"error_code": response.status_code},
            )
            return ""
        return body.get("id", "") if isinstance(body, dict) else ""

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return f"HTTP {response.status_code}"
