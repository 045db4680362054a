"""Resilient Anthropic Client — wraps AsyncAnthropic with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, 529 overloaded): max_retries with backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to AnthropicAPIError (core/errors.py)

Design Decisions:
    - Wrapper over raw client: services only see complete() -> Completion
      (ADR: single responsibility, trivially faked in tests)
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
"""

import asyncio
import logging
import random
from dataclasses import dataclass

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from ministry.core.errors import AnthropicAPIError, ErrorContext

logger = logging.getLogger(__name__)

# OverloadedError (HTTP 529) is not re-exported by every SDK release;
# detect it via the status code on APIStatusError.
_OVERLOADED_STATUS = 529


def _is_overloaded(e: APIError) -> bool:
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


@dataclass(frozen=True)
class Completion:
    """Text reply plus token usage for persistence."""
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


class ResilientAnthropicClient:
    """Wraps Anthropic client with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
        )
        self.model = model
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def complete(
        self,
        *,
        system: str,
        messages: list[dict],
        max_tokens: int = 1000,
        temperature: float = 0.7,
        context: ErrorContext | None = None,
    ) -> Completion:
        """Single-turn completion with automatic retry on transient failures."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=messages,
                )
                self._log_success(response, attempt)
                return Completion(
                    text=_text_of(response),
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                    model=self.model,
                )

            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt, context)

            except (APIConnectionError, InternalServerError) as e:
                if isinstance(e, APITimeoutError):
                    raise AnthropicAPIError(
                        "API timeout", "timeout", context=context,
                    )
                await self._handle_transient_error(e, attempt, context)

            except APIError as e:
                if _is_overloaded(e):
                    await self._handle_transient_error(e, attempt, context)
                    continue
                raise AnthropicAPIError(
                    str(e), "client_error", context=context,
                )

        raise AnthropicAPIError(
            "Retries exhausted", "connection_error", context=context,
        )

    def _log_success(self, response, attempt: int) -> None:
        usage = response.usage
        logger.info(
            "Anthropic API success",
            extra={
                "attempt": attempt + 1,
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int, context: ErrorContext | None,
    ) -> None:
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise AnthropicAPIError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        if attempt >= self.max_retries:
            raise AnthropicAPIError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"Transient error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Retry-After header in milliseconds, when present and numeric."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        value = response.headers.get("retry-after")
        if value and value.isdigit():
            return int(value) * 1000
        return None


def _text_of(response) -> str:
    return "".join(
        block.text for block in response.content
        if getattr(block, "type", None) == "text"
    ).strip()
