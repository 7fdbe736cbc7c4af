# src/llm/adapters/google_adapter.py - v1
"""Google Gemini adapter.

Gemini's ``response_schema`` accepts only an OpenAPI subset, so the pydantic
schema travels in the system instruction and the reply is forced to JSON.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from plexweave.llm.base_client import BaseLLMClient
from plexweave.llm.models import Message, ProviderReply


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-1.5-flash", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self._configured = False

    def _generative_model(self, system: str | None):
        import google.generativeai as genai

        if not self._configured:
            genai.configure(api_key=self._api_key)
            self._configured = True
        return genai.GenerativeModel(self._model, system_instruction=system)

    async def _send(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
        response_format: type[BaseModel] | None,
    ) -> ProviderReply:
        generation_config: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if response_format is not None:
            system = self.schema_instruction(system, response_format)
            generation_config["response_mime_type"] = "application/json"

        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages
            if m.role != "system"
        ]
        resp = await self._generative_model(system).generate_content_async(
            contents, generation_config=generation_config,
        )

        usage = getattr(resp, "usage_metadata", None)
        return ProviderReply(
            content=resp.text or "",
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model
