# src/rag/vector_store/chromadb_store.py - v1
"""ChromaDB fragment index (embedded persistent store or remote server).

Collections use the cosine space, so a query distance ``d`` maps to the
score ``1 - d``. The chromadb client is synchronous; every call is pushed
to a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from plexweave.core.similarity import cosine_distance_to_score
from plexweave.rag.models import SearchResult, StoredVector
from plexweave.rag.vector_store.base_vector_store import BaseVectorStore, Where

logger = logging.getLogger(__name__)

_COSINE_SPACE = {"hnsw:space": "cosine"}


def chroma_where(where: Where | None) -> dict[str, Any] | None:
    """Chroma wants ``$and`` around more than one equality clause."""
    if not where:
        return None
    if len(where) == 1:
        return dict(where)
    return {"$and": [{key: value} for key, value in where.items()]}


def _first(results: dict[str, Any], key: str) -> list[Any]:
    rows = results.get(key)
    if rows is None or len(rows) == 0:
        return []
    return list(rows[0])


class ChromaDBStore(BaseVectorStore):
    def __init__(
        self,
        persist_path: str | Path | None = None,
        host: str | None = None,
        port: int = 8000,
    ) -> None:
        import chromadb

        if host:
            self._client = chromadb.HttpClient(host=host, port=port)
            logger.debug("ChromaDB server at %s:%d", host, port)
        elif persist_path:
            path = Path(persist_path).expanduser()
            self._client = chromadb.PersistentClient(path=str(path))
            logger.debug("ChromaDB persisted under %s", path)
        else:
            self._client = chromadb.EphemeralClient()
        self._collections: dict[str, Any] = {}

    async def _collection(self, name: str, dimensions: int | None = None):
        if name not in self._collections:
            metadata = dict(_COSINE_SPACE)
            if dimensions is not None:
                metadata["dimensions"] = dimensions
            self._collections[name] = await asyncio.to_thread(
                self._client.get_or_create_collection, name, metadata=metadata,
            )
        return self._collections[name]

    async def upsert(
        self,
        collection: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]] | None = None,
    ) -> None:
        if not ids:
            return
        target = await self._collection(collection)
        await asyncio.to_thread(
            target.upsert,
            ids=ids, embeddings=embeddings, documents=documents, metadatas=metadatas,
        )

    async def query(
        self,
        collection: str,
        query_embedding: list[float],
        top_k: int = 10,
        where: Where | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]:
        request: dict[str, Any] = {
            "query_embeddings": [query_embedding],
            "n_results": top_k,
            "include": ["documents", "metadatas", "distances"],
        }
        clause = chroma_where(where)
        if clause:
            request["where"] = clause
        target = await self._collection(collection)
        results = await asyncio.to_thread(target.query, **request)

        ids = _first(results, "ids")
        documents = _first(results, "documents") or [""] * len(ids)
        metadatas = _first(results, "metadatas") or [{}] * len(ids)
        distances = _first(results, "distances") or [0.0] * len(ids)

        hits: list[SearchResult] = []
        for doc_id, document, metadata, distance in zip(ids, documents, metadatas, distances):
            score = cosine_distance_to_score(distance)
            if min_score is not None and score < min_score:
                continue
            hits.append(SearchResult(
                source_id=doc_id, content=document or "", score=score, metadata=dict(metadata or {}),
            ))
        return hits

    async def get_by_filter(self, collection: str, where: Where | None = None) -> list[StoredVector]:
        request: dict[str, Any] = {"include": ["documents", "metadatas", "embeddings"]}
        clause = chroma_where(where)
        if clause:
            request["where"] = clause
        target = await self._collection(collection)
        results = await asyncio.to_thread(target.get, **request)

        ids = list(results["ids"])
        embeddings = results.get("embeddings")
        if embeddings is None:
            embeddings = []
        documents = results.get("documents") or [""] * len(ids)
        metadatas = results.get("metadatas") or [{}] * len(ids)
        return [
            StoredVector(
                id=doc_id,
                document=document or "",
                embedding=[float(x) for x in embedding],
                metadata=dict(metadata or {}),
            )
            for doc_id, embedding, document, metadata in zip(ids, embeddings, documents, metadatas)
        ]

    async def delete(self, collection: str, ids: list[str]) -> None:
        if ids:
            target = await self._collection(collection)
            await asyncio.to_thread(target.delete, ids=ids)

    async def create_collection(self, collection: str, dimensions: int) -> None:
        await self._collection(collection, dimensions)

    async def collection_exists(self, collection: str) -> bool:
        if collection in self._collections:
            return True
        listed = await asyncio.to_thread(self._client.list_collections)
        return collection in {getattr(c, "name", c) for c in listed}

    async def count(self, collection: str) -> int:
        target = await self._collection(collection)
        return await asyncio.to_thread(target.count)

    @property
    def provider_name(self) -> str:
        return "chromadb"
