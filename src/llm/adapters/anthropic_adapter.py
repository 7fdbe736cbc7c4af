# src/llm/adapters/anthropic_adapter.py - v1
"""Anthropic Claude adapter.

Structured answers come from a forced call to a single tool whose input
schema is the requested pydantic model; the tool input is the answer.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from plexweave.llm.base_client import BaseLLMClient
from plexweave.llm.models import Message, ProviderReply

_ANSWER_TOOL = "record_answer"


class AnthropicAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self.__client = None

    @property
    def _client(self):
        """SDK client, created on the first oracle call."""
        if self.__client is None:
            import anthropic

            self.__client = anthropic.AsyncAnthropic(api_key=self._api_key or "")
        return self.__client

    async def _send(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
        response_format: type[BaseModel] | None,
    ) -> ProviderReply:
        request: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": m.role, "content": m.content} for m in messages if m.role != "system"
            ],
        }
        if system:
            request["system"] = system
        if response_format is not None:
            request["tools"] = [{
                "name": _ANSWER_TOOL,
                "description": f"Record the {response_format.__name__} answer",
                "input_schema": response_format.model_json_schema(),
            }]
            request["tool_choice"] = {"type": "tool", "name": _ANSWER_TOOL}

        response = await self._client.messages.create(**request)
        return ProviderReply(
            content=_answer_text(response, response_format is not None),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            raw_response=response,
        )

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model


def _answer_text(response: Any, structured: bool) -> str:
    """The forced tool input as JSON, else the first text block."""
    blocks = list(response.content)
    if structured:
        for block in blocks:
            if getattr(block, "type", None) == "tool_use" and block.name == _ANSWER_TOOL:
                return json.dumps(block.input)
    return next((b.text for b in blocks if getattr(b, "type", None) == "text"), "")
