"""Provider fakes and token helper for route tests.

Invariants:
    - Fakes expose the same call surface the services use on the real clients
    - Every call is recorded so tests can assert on what was sent
    - Failures are opt-in per recipient (`fail_for`) or per client (`error`)
"""

from datetime import datetime, timedelta, timezone

import jwt

from ministry.config import get_settings
from ministry.core.errors import AnthropicAPIError, EmailDeliveryError, SmsDeliveryError
from ministry.infrastructure.anthropic_client import Completion
from ministry.infrastructure.sms_client import SmsReceipt
from ministry.models.member import Member


class FakeLLM:
    """Returns queued replies (or `default_reply`), records every call."""

    def __init__(self):
        self.calls: list[dict] = []
        self.replies: list[str] = []
        self.default_reply = "Grace and peace to you."
        self.error: AnthropicAPIError | None = None

    async def complete(self, *, system, messages, max_tokens=1000, temperature=0.7, context=None):
        self.calls.append({"system": system, "messages": messages, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        text = self.replies.pop(0) if self.replies else self.default_reply
        return Completion(text=text, input_tokens=12, output_tokens=8, model="fake-model")


class FakeEmail:
    """Records sent messages; addresses in `fail_for` raise EmailDeliveryError."""

    configured = True

    def __init__(self):
        self.sent = []
        self.fail_for: set[str] = set()

    async def send(self, message):
        if message.to in self.fail_for:
            raise EmailDeliveryError(f"Rejected {message.to}")
        self.sent.append(message)
        return f"email-{len(self.sent)}"

    async def aclose(self):
        return None


class FakeSms:
    """Records sent texts; numbers in `fail_for` raise SmsDeliveryError."""

    configured = True
    from_number = "+15550001111"

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail_for: set[str] = set()

    async def send(self, to, body):
        if to in self.fail_for:
            raise SmsDeliveryError("Invalid phone number format", provider_code=21211)
        self.sent.append((to, body))
        return SmsReceipt(sid=f"SM{len(self.sent)}", status="queued", to=to)

    async def aclose(self):
        return None


def auth_headers(member: Member) -> dict[str, str]:
    """Bearer header with a token the real auth dependency accepts."""
    settings = get_settings()
    token = jwt.encode(
        {
            "sub": member.user_id,
            "aud": settings.auth_jwt_audience,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        settings.auth_jwt_secret,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}
