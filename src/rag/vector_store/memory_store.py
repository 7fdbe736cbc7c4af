# src/rag/vector_store/memory_store.py - v1
"""In-process vector store backed by numpy arrays.

Suitable for tests and single-run discovery over small plexuses; nothing is
persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from plexweave.core.similarity import rank_by_similarity
from plexweave.rag.models import SearchResult, StoredVector
from plexweave.rag.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    embedding: np.ndarray
    document: str
    metadata: dict[str, Any] = field(default_factory=dict)


def _matches(metadata: dict[str, Any], where: dict[str, Any] | None) -> bool:
    if not where:
        return True
    return all(metadata.get(k) == v for k, v in where.items())


class InMemoryVectorStore(BaseVectorStore):
    """Vector store keeping every collection in memory."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, _Entry]] = {}
        self._dimensions: dict[str, int] = {}

    async def upsert(
        self,
        collection: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]] | None = None,
    ) -> None:
        if not (len(ids) == len(embeddings) == len(documents)):
            raise ValueError("ids, embeddings and documents must have the same length")
        metadatas = metadatas or [{} for _ in ids]
        entries = self._collections.setdefault(collection, {})
        for id_, emb, doc, meta in zip(ids, embeddings, documents, metadatas):
            vector = np.asarray(emb, dtype=np.float64)
            dims = self._dimensions.setdefault(collection, vector.shape[0])
            if vector.shape[0] != dims:
                raise ValueError(
                    f"Embedding for {id_!r} has {vector.shape[0]} dimensions, "
                    f"collection {collection!r} expects {dims}"
                )
            entries[id_] = _Entry(embedding=vector, document=doc, metadata=dict(meta))

    async def query(
        self,
        collection: str,
        query_embedding: list[float],
        top_k: int = 10,
        where: dict[str, Any] | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]:
        entries = self._collections.get(collection, {})
        candidates = [(id_, e) for id_, e in entries.items() if _matches(e.metadata, where)]
        if not candidates:
            return []

        matrix = np.vstack([e.embedding for _, e in candidates])
        query = np.asarray(query_embedding, dtype=np.float64)
        results: list[SearchResult] = []
        for row, score in rank_by_similarity(query, matrix, top_k, min_score):
            id_, entry = candidates[row]
            results.append(SearchResult(
                source_id=id_, content=entry.document, score=score, metadata=dict(entry.metadata),
            ))
        return results

    async def get_by_filter(
        self, collection: str, where: dict[str, Any] | None = None,
    ) -> list[StoredVector]:
        entries = self._collections.get(collection, {})
        return [
            StoredVector(
                id=id_,
                document=e.document,
                embedding=e.embedding.tolist(),
                metadata=dict(e.metadata),
            )
            for id_, e in entries.items()
            if _matches(e.metadata, where)
        ]

    async def delete(self, collection: str, ids: list[str]) -> None:
        entries = self._collections.get(collection, {})
        for id_ in ids:
            entries.pop(id_, None)

    async def create_collection(self, collection: str, dimensions: int) -> None:
        self._collections.setdefault(collection, {})
        self._dimensions.setdefault(collection, dimensions)

    async def collection_exists(self, collection: str) -> bool:
        return collection in self._collections

    async def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))

    @property
    def provider_name(self) -> str:
        return "memory"
