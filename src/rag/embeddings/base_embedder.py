# src/rag/embeddings/base_embedder.py - v1
"""Embedding providers used by the fragment indexer and the retriever.

``embed_texts`` splits its input into provider-sized batches and checks
that every batch comes back with one vector per text, each of the
advertised width. Providers only implement ``_embed_batch``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class EmbeddingShapeError(RuntimeError):
    """Raised when a provider answers with the wrong number or width of vectors."""


class BaseEmbedder(ABC):
    """Unified interface for all embedding providers."""

    batch_size: int = 64

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed ``texts`` into vectors, one per input, in order."""
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start:start + self.batch_size]
            answer = await self._embed_batch(batch)
            self._check_shape(batch, answer)
            vectors.extend(answer)
        if texts:
            logger.debug(
                "Embedded %d texts with %s/%s", len(texts), self.provider_name, self.model_name,
            )
        return vectors

    async def embed_query(self, query: str) -> list[float]:
        (vector,) = await self.embed_texts([query])
        return vector

    def _check_shape(self, batch: list[str], answer: list[list[float]]) -> None:
        if len(answer) != len(batch):
            raise EmbeddingShapeError(
                f"{self.provider_name} returned {len(answer)} vectors for "
                f"{len(batch)} inputs (model {self.model_name})"
            )
        for vector in answer:
            if len(vector) != self.dimensions:
                raise EmbeddingShapeError(
                    f"{self.provider_name} returned a {len(vector)}-wide vector, "
                    f"expected {self.dimensions} (model {self.model_name})"
                )

    @abstractmethod
    async def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed one non-empty batch no larger than ``batch_size``."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Output vector dimensions."""

    @property
    @abstractmethod
    def provider_name(self) -> str: ...

    @property
    @abstractmethod
    def model_name(self) -> str: ...
