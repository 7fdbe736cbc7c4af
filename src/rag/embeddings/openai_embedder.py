# src/rag/embeddings/openai_embedder.py - v1
"""OpenAI embeddings (text-embedding-3-small / -large).

The v3 models accept a ``dimensions`` argument, so the collection width
comes straight from EMBEDDING_DIMENSIONS.
"""

from __future__ import annotations

from plexweave.rag.embeddings.base_embedder import BaseEmbedder


class OpenAIEmbedder(BaseEmbedder):
    batch_size = 256

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str = "",
        dimensions: int = 1536,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._dimensions = dimensions
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(api_key=self._api_key)
        return self.__client

    async def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        response = await self._client.embeddings.create(
            input=texts, model=self._model, dimensions=self._dimensions,
        )
        ordered = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in ordered]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
