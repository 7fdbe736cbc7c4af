# src/llm/adapters/openai_adapter.py - v1
"""OpenAI adapter: chat completions with a JSON-schema response format."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from plexweave.llm.base_client import BaseLLMClient
from plexweave.llm.models import Message, ProviderReply


class OpenAIAdapter(BaseLLMClient):
    """OpenAI GPT adapter."""

    def __init__(self, model: str = "gpt-4o-mini", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(api_key=self._api_key)
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
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": response_format.__name__,
                    "schema": response_format.model_json_schema(),
                },
            }

        resp = await self._client.chat.completions.create(**request)
        usage = resp.usage
        return ProviderReply(
            content=resp.choices[0].message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=resp.model,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
