# src/rag/embeddings/sentence_tf_embedder.py - v1
"""In-process embeddings with sentence-transformers.

The model is loaded on first use, including the first read of
``dimensions``, and its native embedding width replaces the configured
one. Encoding runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging

from plexweave.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder(BaseEmbedder):
    batch_size = 128

    def __init__(self, model: str = "all-MiniLM-L6-v2", dimensions: int = 384) -> None:
        self._model_name = model
        self._dimensions = dimensions
        self.__model = None

    def _load(self):
        if self.__model is None:
            from sentence_transformers import SentenceTransformer

            self.__model = SentenceTransformer(self._model_name)
            native = self.__model.get_sentence_embedding_dimension()
            if native and native != self._dimensions:
                logger.info(
                    "%s produces %d-wide vectors; ignoring configured %d",
                    self._model_name, native, self._dimensions,
                )
                self._dimensions = native
        return self.__model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        matrix = self._load().encode(
            texts, batch_size=self.batch_size, show_progress_bar=False, normalize_embeddings=True,
        )
        return matrix.tolist()

    async def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        return await asyncio.to_thread(self._encode, texts)

    @property
    def dimensions(self) -> int:
        self._load()
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "sentence_transformers"

    @property
    def model_name(self) -> str:
        return self._model_name
