# src/llm/adapters/ollama_adapter.py - v1
"""Ollama local inference adapter.

Structured answers use Ollama's schema-constrained ``format``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from plexweave.llm.base_client import BaseLLMClient
from plexweave.llm.models import Message, ProviderReply


class OllamaAdapter(BaseLLMClient):
    """Ollama local inference adapter."""

    def __init__(
        self,
        model: str = "llama3",
        base_url: str = "http://localhost:11434",
        **kwargs: Any,
    ):
        self._model = model
        self._base_url = base_url
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            import ollama

            self.__client = ollama.AsyncClient(host=self._base_url)
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
            "messages": self.chat_messages(messages, system),
            "options": {"num_predict": max_tokens, "temperature": temperature},
        }
        if response_format is not None:
            request["format"] = response_format.model_json_schema()

        resp = await self._client.chat(**request)
        return ProviderReply(
            content=resp["message"]["content"],
            input_tokens=resp.get("prompt_eval_count") or 0,
            output_tokens=resp.get("eval_count") or 0,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model
