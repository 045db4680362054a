"""Error Hierarchy — typed, categorized exceptions for all platform failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (503) are critical
    - to_response() produces the REST envelope used by every error handler
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MinistryError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    member_id: str | None = None
    resource_id: str | None = None
    provider: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class MinistryError(Exception):
    """Base exception for all platform errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource_id": self.context.resource_id,
                    "provider": self.context.provider,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationFailedError(MinistryError):
    """Request passed schema validation but violates a field rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class BusinessRuleError(MinistryError):
    """Operation not allowed in the resource's current state."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class AuthenticationError(MinistryError):
    """Missing, malformed, or expired credentials."""
    def __init__(self, message: str = "Unauthorized", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(MinistryError):
    """Caller's role is below the required role."""
    def __init__(self, required_role: str, context: ErrorContext | None = None):
        super().__init__(
            f"{required_role.capitalize()} access required",
            "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.required_role = required_role


class TierAccessError(MinistryError):
    """Content requires a higher membership tier."""
    def __init__(
        self, tier_required: str, upgrade_message: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            upgrade_message, "TIER_REQUIRED", ErrorCategory.PERMISSION,
            ErrorSeverity.INFO, context, 403,
        )
        self.tier_required = tier_required

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["tier_required"] = self.tier_required
        return response


class ResourceNotFoundError(MinistryError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class ConflictError(MinistryError):
    """Duplicate join/registration/schedule."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (503) ────────────────────────────────

class DatabaseError(MinistryError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class AnthropicAPIError(MinistryError):
    """Anthropic API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        ctx.provider = "anthropic"
        super().__init__(
            f"Anthropic API error ({api_error_type}): {message}",
            "ANTHROPIC_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type


class EmailDeliveryError(MinistryError):
    """Email provider rejected or failed to accept a message."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.provider = "resend"
        super().__init__(
            f"Email delivery failed: {message}",
            "EMAIL_DELIVERY_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 503,
        )


class SmsDeliveryError(MinistryError):
    """SMS provider rejected the message."""
    def __init__(
        self, message: str, provider_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.provider = "twilio"
        super().__init__(
            message, "SMS_DELIVERY_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 503,
        )
        self.provider_code = provider_code


class ProviderNotConfiguredError(MinistryError):
    """Credentials for an external provider are missing."""
    def __init__(self, provider: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.provider = provider
        super().__init__(
            f"{provider} is not configured",
            "PROVIDER_NOT_CONFIGURED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
