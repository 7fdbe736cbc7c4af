# src/llm/models.py - v1
"""LLM-specific types: Message, ProviderReply, LLMResponse, OracleStats."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class LLMResponse(BaseModel):
    """Normalized response from any LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    latency_ms: int
    raw_response: Any = None


class ProviderReply(BaseModel):
    """What an adapter got back from its SDK, before timing and normalization."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str | None = None
    raw_response: Any = None


class OracleStats(BaseModel):
    """Running totals for structured oracle calls within one discovery run."""

    calls: int = 0
    failures: int = 0
    input_tokens: int = 0
    output_tokens: int = 0

    def record_usage(self, response: LLMResponse) -> None:
        self.input_tokens += response.input_tokens
        self.output_tokens += response.output_tokens
