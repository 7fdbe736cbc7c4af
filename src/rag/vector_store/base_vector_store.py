# src/rag/vector_store/base_vector_store.py - v1
"""Fragment index backends.

Entries carry flat metadata (``repo_id``, ``file_path``, ``chunk_index``);
``where`` arguments are equality filters over it. Query scores are cosine
similarities, highest first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from plexweave.rag.models import SearchResult, StoredVector

Where = dict[str, Any]


class BaseVectorStore(ABC):
    @abstractmethod
    async def upsert(
        self,
        collection: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]] | None = None,
    ) -> None:
        """Insert or replace entries; all lists are parallel."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        query_embedding: list[float],
        top_k: int = 10,
        where: Where | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]:
        """Nearest ``top_k`` entries, dropping those scoring under ``min_score``."""

    @abstractmethod
    async def get_by_filter(self, collection: str, where: Where | None = None) -> list[StoredVector]:
        """Every entry matching ``where``, embeddings included."""

    @abstractmethod
    async def delete(self, collection: str, ids: list[str]) -> None: ...

    @abstractmethod
    async def create_collection(self, collection: str, dimensions: int) -> None: ...

    @abstractmethod
    async def collection_exists(self, collection: str) -> bool: ...

    @abstractmethod
    async def count(self, collection: str) -> int: ...

    @property
    @abstractmethod
    def provider_name(self) -> str: ...
