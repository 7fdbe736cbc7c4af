# src/rag/embeddings/ollama_embedder.py - v1
"""Local embeddings through an Ollama server (nomic-embed-text, mxbai-embed-large)."""

from __future__ import annotations

from plexweave.rag.embeddings.base_embedder import BaseEmbedder


class OllamaEmbedder(BaseEmbedder):
    batch_size = 32

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimensions: int = 768,
    ) -> None:
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._dimensions = dimensions
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            import ollama

            self.__client = ollama.AsyncClient(host=self._base_url)
        return self.__client

    async def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        resp = await self._client.embed(model=self._model, input=texts)
        return [list(vector) for vector in resp["embeddings"]]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model
