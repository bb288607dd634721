"""
Completion Gateway - timeout, retry and backoff around the completion client.

Only transport-level failures are retried. A reply that arrives but is not
well-formed is returned as-is; recovering structure is the extractor's job.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional

from ..config import CritiqueSettings
from ..core.errors import AnalysisCancelled, ProviderTimeout, ProviderUnavailable
from .model_client import CompletionClient

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)

RETRYABLE_PATTERNS = [
    "429", "rate limit", "rate_limit", "ratelimit",
    "500", "502", "503", "504",
    "timeout", "timed out", "connection",
    "overloaded", "overload", "capacity",
    "temporarily unavailable", "service unavailable",
    "internal server error", "bad gateway", "gateway timeout",
]

NON_RETRYABLE_PATTERNS = [
    "401", "403", "400",
    "invalid api key", "invalid_api_key", "authentication",
    "unauthorized", "forbidden", "invalid model",
    "model not found", "does not exist",
]

RETRYABLE_TYPE_NAMES = ["timeout", "connection", "network", "http"]


def is_timeout_error(error: BaseException) -> bool:
    return isinstance(error, asyncio.TimeoutError) or "timeout" in type(error).__name__.lower()


def is_retryable_error(error: BaseException) -> bool:
    """Check if an error is retryable (transient network/API errors).

    Retryable errors include:
    - Per-attempt deadline overruns and connection errors
    - HTTP 429 (rate limit), 500, 502, 503, 504 (server errors)
    - Provider-specific overload/rate limit exceptions

    Non-retryable errors include:
    - HTTP 400 (bad request), 401 (auth), 403 (forbidden)
    - Invalid API key or model errors
    """
    if isinstance(error, asyncio.TimeoutError):
        return True

    # SDK errors carry the HTTP status directly
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return status_code in RETRYABLE_STATUS_CODES

    error_str = str(error).lower()
    error_type = type(error).__name__.lower()

    # First check if it's explicitly non-retryable
    for pattern in NON_RETRYABLE_PATTERNS:
        if pattern in error_str:
            return False

    for pattern in RETRYABLE_PATTERNS:
        if pattern in error_str:
            return True

    for rtype in RETRYABLE_TYPE_NAMES:
        if rtype in error_type:
            return True

    return False


def _retry_after(error: BaseException) -> Optional[float]:
    value = getattr(error, "retry_after", None)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return float(value)
    return None


class CompletionGateway:
    """
    Wraps a CompletionClient with a per-attempt deadline and bounded retries.

    max_retries is the total number of attempts. Retry counters live in the
    invoke() call, so one gateway can serve concurrent invocations.
    """

    def __init__(
        self,
        client: CompletionClient,
        max_retries: int = 3,
        timeout_seconds: float = 120.0,
        base_delay: float = 1.0,
        max_jitter: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.client = client
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self.base_delay = base_delay
        self.max_jitter = max_jitter
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        client: CompletionClient,
        settings: CritiqueSettings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> "CompletionGateway":
        return cls(
            client,
            max_retries=settings.max_retries,
            timeout_seconds=settings.timeout_seconds,
            base_delay=settings.retry_base_delay,
            max_jitter=settings.retry_max_jitter,
            sleep=sleep,
        )

    def backoff_delay(self, failed_attempt: int, error: Optional[BaseException] = None) -> float:
        """Delay after the given (1-based) failed attempt: base * 3^(n-1) plus jitter."""
        delay = self.base_delay * 3 ** (failed_attempt - 1) + random.uniform(0, self.max_jitter)
        hint = _retry_after(error) if error is not None else None
        if hint is not None and hint > delay:
            delay = hint
        return delay

    async def invoke(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Return the reply text of the first successful attempt.

        Raises:
            ProviderTimeout: attempts exhausted and the last one hit the deadline
            ProviderUnavailable: attempts exhausted, or a non-retryable error
            AnalysisCancelled: cancel_event was set before an attempt started
        """
        provider = getattr(self.client, "provider", None)
        provider_name = getattr(provider, "value", provider)
        model = getattr(self.client, "model", "")
        logger.info(
            f"[invoke] Provider: {provider_name}, Model: '{model}', "
            f"max_tokens: {max_output_tokens}, max_retries: {self.max_retries}"
        )

        last_error: Optional[BaseException] = None
        for attempt in range(1, self.max_retries + 1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"[invoke] Cancelled before attempt {attempt}/{self.max_retries}")
                raise AnalysisCancelled(f"Cancelled before attempt {attempt}")

            try:
                response = await asyncio.wait_for(
                    self.client.complete(system_prompt, user_prompt, max_output_tokens),
                    timeout=self.timeout_seconds,
                )
            except Exception as e:
                last_error = e
                if isinstance(e, asyncio.TimeoutError):
                    logger.warning(
                        f"[invoke] Attempt {attempt}/{self.max_retries} exceeded {self.timeout_seconds}s deadline"
                    )
                else:
                    logger.warning(f"[invoke] Attempt {attempt}/{self.max_retries} failed: {e}")

                if not is_retryable_error(e):
                    logger.error(f"[invoke] Non-retryable error: {e}")
                    raise ProviderUnavailable(
                        f"Provider rejected the request: {e}",
                        attempts=attempt,
                        retryable=False,
                        cause=e,
                    ) from e

                if attempt < self.max_retries:
                    delay = self.backoff_delay(attempt, e)
                    logger.info(f"[invoke] Retry attempt {attempt + 1}/{self.max_retries} after {delay:.1f}s delay")
                    await self._sleep(delay)
                continue

            logger.info(
                f"[invoke] finish_reason: {response.finish_reason}, usage: {response.usage}, attempts: {attempt}"
            )
            if response.truncated:
                logger.warning(f"[invoke] Response was TRUNCATED (finish_reason={response.finish_reason})")
            return response.content

        logger.error(f"[invoke] All {self.max_retries} retry attempts exhausted")
        if last_error is not None and is_timeout_error(last_error):
            raise ProviderTimeout(
                f"Provider timed out after {self.max_retries} attempts",
                attempts=self.max_retries,
                cause=last_error,
            ) from last_error
        raise ProviderUnavailable(
            f"Provider unavailable after {self.max_retries} attempts: {last_error}",
            attempts=self.max_retries,
            cause=last_error,
        ) from last_error
