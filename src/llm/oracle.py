# src/llm/oracle.py - v1
"""Structured oracle calls that fail closed.

StructuredOracle wraps one BaseLLMClient call with a timeout, the optional
retry policy, markdown fence stripping and pydantic schema validation. Any
failure is logged, counted in OracleStats and reported as ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from plexweave.discovery.errors import OracleFailure
from plexweave.llm.base_client import BaseLLMClient
from plexweave.llm.models import Message, OracleStats
from plexweave.llm.retry import (
    DEFAULT_RETRY_CONFIGS,
    NO_RETRY,
    OracleRetryExhausted,
    RetryConfig,
    with_retry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def strip_json_fences(content: str) -> str:
    """Remove markdown code fences around a JSON payload."""
    text = content.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [ln for ln in lines if not ln.strip().startswith("```")]
        text = "\n".join(lines)
    return text.strip()


@dataclass
class OracleOptions:
    """Per-agent oracle call settings, shared by every call an agent makes."""

    timeout_s: float = 60.0
    retry_configs: dict[str, RetryConfig] = field(default_factory=dict)
    stats: OracleStats = field(default_factory=OracleStats)
    max_tokens: int = 4096
    temperature: float = 0.2


class StructuredOracle:
    """One component's view of the oracle."""

    def __init__(
        self,
        llm: BaseLLMClient,
        component: str,
        timeout_s: float = 60.0,
        retry_configs: dict[str, RetryConfig] | None = None,
        stats: OracleStats | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm
        self._component = component
        self._timeout_s = timeout_s
        self._retry_configs = NO_RETRY if retry_configs is None else retry_configs
        self.stats = stats if stats is not None else OracleStats()
        self._max_tokens = max_tokens
        self._temperature = temperature

    @classmethod
    def from_options(
        cls, llm: BaseLLMClient, component: str, options: OracleOptions,
    ) -> StructuredOracle:
        return cls(
            llm,
            component,
            timeout_s=options.timeout_s,
            retry_configs=options.retry_configs,
            stats=options.stats,
            max_tokens=options.max_tokens,
            temperature=options.temperature,
        )

    async def ask(
        self,
        prompt: str,
        schema: type[T],
        system: str | None = None,
    ) -> T | None:
        """Ask for a ``schema`` instance; ``None`` on any oracle failure."""
        self.stats.calls += 1
        try:
            return await with_retry(
                self._call,
                prompt,
                schema,
                system,
                component=self._component,
                retry_configs=self._retry_configs,
            )
        except OracleRetryExhausted as exc:
            self.stats.failures += 1
            logger.warning(
                "Oracle call for %s failed (%s): %s",
                self._component, exc.error_type, exc.last_error,
            )
            return None

    async def _call(self, prompt: str, schema: type[T], system: str | None) -> T:
        try:
            response = await asyncio.wait_for(
                self._llm.complete(
                    messages=[Message(role="user", content=prompt)],
                    system=system,
                    max_tokens=self._max_tokens,
                    temperature=self._temperature,
                    response_format=schema,
                ),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise OracleFailure(
                f"timeout after {self._timeout_s:.0f}s waiting for {schema.__name__}"
            ) from exc

        self.stats.record_usage(response)
        try:
            return schema.model_validate_json(strip_json_fences(response.content))
        except ValidationError as exc:
            raise OracleFailure(
                f"could not parse {schema.__name__} response: {exc.error_count()} error(s)"
            ) from exc


def retry_policy(enabled: bool) -> dict[str, RetryConfig]:
    """Retry configuration for the ``oracle_retry_enabled`` setting."""
    return DEFAULT_RETRY_CONFIGS if enabled else NO_RETRY
