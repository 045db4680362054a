"""API Dependencies — authentication, role guards, cron secret, and shared provider clients.

Invariants:
    - Bearer JWT verified with HS256 against auth_jwt_secret and auth_jwt_audience
    - `sub` claim is the auth user id; the member row is looked up by Member.user_id
    - Missing/invalid token → 401; valid token without a member row → 404
    - require_staff: role >= staff; require_admin: role == admin (403 otherwise)
    - Cron endpoints accept only `Authorization: Bearer <cron_secret>`

Design Decisions:
    - Provider clients are process-wide singletons behind dependency functions:
      one connection pool per provider, and tests swap them via
      app.dependency_overrides (ADR: no global import side effects)
    - close_clients() called from the lifespan shutdown
"""

import hmac
import logging

import jwt
from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.access import is_admin, is_staff_or_above
from ministry.core.domain_types import Role
from ministry.core.errors import (
    AuthenticationError, PermissionDeniedError, ResourceNotFoundError,
)
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.infrastructure.database import get_db
from ministry.infrastructure.email_client import ResendEmailClient
from ministry.infrastructure.sms_client import TwilioSmsClient
from ministry.models.member import Member

logger = logging.getLogger(__name__)


# ─── Authentication ──────────────────────────────────────────────

def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def decode_user_id(token: str) -> str:
    """Verify the access token and return its subject. Raises AuthenticationError."""
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=["HS256"],
            audience=settings.auth_jwt_audience,
        )
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise AuthenticationError("Invalid or expired token")
    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")
    return str(user_id)


async def _member_for_user(db: AsyncSession, user_id: str) -> Member | None:
    result = await db.execute(select(Member).where(Member.user_id == user_id))
    return result.scalar_one_or_none()


async def get_current_member(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Member:
    """Authenticated member or 401/404."""
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError()
    user_id = decode_user_id(token)
    member = await _member_for_user(db, user_id)
    if member is None:
        raise ResourceNotFoundError("Member", user_id)
    return member


async def get_optional_member(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Member | None:
    """Member when a valid token is present, else None (never raises)."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        user_id = decode_user_id(token)
    except AuthenticationError:
        return None
    return await _member_for_user(db, user_id)


async def require_staff(member: Member = Depends(get_current_member)) -> Member:
    if not is_staff_or_above(member.role):
        raise PermissionDeniedError(Role.STAFF.value)
    return member


async def require_admin(member: Member = Depends(get_current_member)) -> Member:
    if not is_admin(member.role):
        raise PermissionDeniedError(Role.ADMIN.value)
    return member


async def verify_cron_secret(authorization: str | None = Header(None)) -> None:
    token = _bearer_token(authorization)
    expected = get_settings().cron_secret
    if token is None or not hmac.compare_digest(token, expected):
        raise AuthenticationError("Invalid cron secret")


# ─── Provider clients ────────────────────────────────────────────

_anthropic_client: ResilientAnthropicClient | None = None
_email_client: ResendEmailClient | None = None
_sms_client: TwilioSmsClient | None = None


def get_anthropic_client() -> ResilientAnthropicClient:
    """Singleton Anthropic client — reused across requests."""
    global _anthropic_client
    if _anthropic_client is None:
        settings = get_settings()
        _anthropic_client = ResilientAnthropicClient(
            api_key=settings.anthropic_api_key,
            model=settings.ai_model,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        )
    return _anthropic_client


def get_email_client() -> ResendEmailClient:
    global _email_client
    if _email_client is None:
        settings = get_settings()
        _email_client = ResendEmailClient(
            api_key=settings.resend_api_key,
            sender=settings.email_from,
            base_url=settings.resend_base_url,
        )
    return _email_client


def get_sms_client() -> TwilioSmsClient:
    global _sms_client
    if _sms_client is None:
        settings = get_settings()
        _sms_client = TwilioSmsClient(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_phone_number,
        )
    return _sms_client


async def close_clients() -> None:
    global _email_client, _sms_client
    if _email_client is not None:
        await _email_client.aclose()
        _email_client = None
    if _sms_client is not None:
        await _sms_client.aclose()
        _sms_client = None
