# src/llm/retry.py - v1
"""Opt-in retry policy for oracle calls.

Discovery runs default to NO_RETRY: a failed call is one missing profile or
one unvalidated candidate, never a failed run. ORACLE_RETRY_ENABLED switches
to DEFAULT_RETRY_CONFIGS, keyed by the error class of the last failure.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

ErrorType = str  # rate_limit | timeout | server_error | parse_error | unknown


class OracleRetryExhausted(Exception):
    """The oracle call failed and the policy allows no further attempt."""

    def __init__(self, component: str, error_type: ErrorType, attempts: int, last_error: Exception):
        self.component = component
        self.error_type = error_type
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{component}: gave up after {attempts} attempt(s) ({error_type}): {last_error}"
        )


@dataclass(frozen=True)
class RetryConfig:
    """Backoff for one error class."""

    max_retries: int
    base_delay_s: float
    backoff_factor: float = 2.0
    jitter: bool = True

    def delay(self, retry_index: int) -> float:
        """Seconds to wait before retry ``retry_index`` (0-based)."""
        seconds = self.base_delay_s * (self.backoff_factor ** retry_index)
        if self.jitter:
            seconds *= 0.5 + random.random()  # noqa: S311
        return seconds


DEFAULT_RETRY_CONFIGS: dict[ErrorType, RetryConfig] = {
    "rate_limit": RetryConfig(max_retries=3, base_delay_s=2.0),
    "timeout": RetryConfig(max_retries=2, base_delay_s=1.0, backoff_factor=1.0),
    "server_error": RetryConfig(max_retries=3, base_delay_s=5.0),
    "parse_error": RetryConfig(max_retries=1, base_delay_s=1.0, backoff_factor=1.0),
}

NO_RETRY: dict[ErrorType, RetryConfig] = {}

_SERVER_MARKERS = ("500", "502", "503", "504", "server", "overloaded", "connection")


def classify_error(error: Exception) -> ErrorType:
    """Map a provider or oracle exception onto a retry error class.

    Provider SDK errors carry an HTTP ``status_code``; everything else is
    classified from the exception type and message.
    """
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        if status == 429:
            return "rate_limit"
        if status in (408, 504):
            return "timeout"
        if status >= 500:
            return "server_error"

    msg = str(error).lower()
    name = type(error).__name__.lower()
    if "429" in msg or "rate" in msg:
        return "rate_limit"
    if isinstance(error, asyncio.TimeoutError) or "timeout" in name or "timeout" in msg:
        return "timeout"
    if any(marker in msg for marker in _SERVER_MARKERS):
        return "server_error"
    if "json" in msg or "parse" in msg or "decode" in msg or "validation" in name:
        return "parse_error"
    return "unknown"


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    component: str = "oracle",
    retry_configs: dict[ErrorType, RetryConfig] | None = None,
    **kwargs: Any,
) -> Any:
    """Await ``fn(*args, **kwargs)``, retrying per error class.

    Raises:
        OracleRetryExhausted: The error class has no policy or its retries
            are used up. Cancellation is never retried.
    """
    configs = DEFAULT_RETRY_CONFIGS if retry_configs is None else retry_configs
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error_type = classify_error(exc)
            config = configs.get(error_type)
            if config is None or attempt > config.max_retries:
                raise OracleRetryExhausted(component, error_type, attempt, exc) from exc

            wait = config.delay(attempt - 1)
            logger.warning(
                "%s: %s on attempt %d of %d, retrying in %.1fs",
                component, error_type, attempt, config.max_retries + 1, wait,
            )
            await asyncio.sleep(wait)
