# src/llm/base_client.py - v1
"""Abstract LLM client interface.

The discovery pipelines only ever ask for structured completions: a system
instruction, one user prompt and a pydantic schema the answer must follow.
Adapters implement ``_send`` against their SDK; ``complete`` times the call
and normalizes the reply.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod

from pydantic import BaseModel

from plexweave.llm.models import LLMResponse, Message, ProviderReply

logger = logging.getLogger(__name__)


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        response_format: type[BaseModel] | None = None,
    ) -> LLMResponse:
        """Text completion, constrained to ``response_format`` when given."""
        start = time.monotonic()
        reply = await self._send(messages, system, max_tokens, temperature, response_format)
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "%s:%s answered %s in %dms (%d in / %d out tokens)",
            self.provider_name, self.model_name,
            response_format.__name__ if response_format else "text",
            latency_ms, reply.input_tokens, reply.output_tokens,
        )
        return LLMResponse(
            content=reply.content,
            input_tokens=reply.input_tokens,
            output_tokens=reply.output_tokens,
            model=reply.model or self.model_name,
            provider=self.provider_name,
            latency_ms=latency_ms,
            raw_response=reply.raw_response,
        )

    @abstractmethod
    async def _send(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
        response_format: type[BaseModel] | None,
    ) -> ProviderReply:
        """One provider round trip."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, openai, google, ollama)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier sent to the provider."""

    @staticmethod
    def chat_messages(messages: list[Message], system: str | None) -> list[dict[str, str]]:
        """OpenAI-style role/content dicts, system instruction first."""
        chat = [{"role": "system", "content": system}] if system else []
        chat.extend({"role": m.role, "content": m.content} for m in messages)
        return chat

    @staticmethod
    def schema_instruction(system: str | None, response_format: type[BaseModel]) -> str:
        """Append the JSON schema to the system instruction.

        For providers whose native schema support rejects pydantic's JSON
        schema dialect.
        """
        schema = json.dumps(response_format.model_json_schema(), separators=(",", ":"))
        instruction = f"Answer with a single JSON object matching this JSON schema:\n{schema}"
        return f"{system}\n\n{instruction}" if system else instruction
