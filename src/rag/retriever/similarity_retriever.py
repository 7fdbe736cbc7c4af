# src/rag/retriever/similarity_retriever.py - v1
"""Cross-repository fragment similarity retrieval.

For every fragment of a source repository, ask the vector index for the
nearest fragments of a target repository. Pure read path: nothing is
written to the index.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from plexweave.rag.models import FragmentMatch

if TYPE_CHECKING:
    from plexweave.rag.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.85
DEFAULT_MAX_PAIRS = 200
DEFAULT_TOP_K = 5


class SimilarityRetriever:
    """Finds similar fragment pairs between two repositories."""

    def __init__(self, vector_store: BaseVectorStore, collection: str = "fragments") -> None:
        self._store = vector_store
        self._collection = collection

    async def find_similar_fragments(
        self,
        source_repo_id: str,
        target_repo_id: str,
        threshold: float = DEFAULT_THRESHOLD,
        max_pairs: int = DEFAULT_MAX_PAIRS,
        k: int = DEFAULT_TOP_K,
    ) -> list[FragmentMatch]:
        """Top-k target neighbours per source fragment, strictly above ``threshold``.

        Returns at most ``max_pairs`` matches, highest similarity first.
        """
        matches = await self._nearest(source_repo_id, target_repo_id, k)
        matches = [m for m in matches if m.similarity > threshold]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        logger.debug(
            "Found %d fragment pairs above %.2f between %s and %s",
            len(matches), threshold, source_repo_id, target_repo_id,
        )
        return matches[:max_pairs]

    async def find_top_similar_fragments(
        self,
        source_repo_id: str,
        target_repo_id: str,
        limit: int = 10,
    ) -> list[FragmentMatch]:
        """Best target match per source fragment, no threshold (near-miss reporting)."""
        matches = await self._nearest(source_repo_id, target_repo_id, 1)
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    async def fragment_counts(self, repo_ids: list[str]) -> dict[str, int]:
        """Number of indexed fragments per repository."""
        counts: dict[str, int] = {}
        for repo_id in repo_ids:
            stored = await self._store.get_by_filter(self._collection, {"repo_id": repo_id})
            counts[repo_id] = len(stored)
        return counts

    async def _nearest(
        self, source_repo_id: str, target_repo_id: str, k: int,
    ) -> list[FragmentMatch]:
        sources = await self._store.get_by_filter(self._collection, {"repo_id": source_repo_id})
        matches: list[FragmentMatch] = []
        for src in sources:
            hits = await self._store.query(
                self._collection,
                src.embedding,
                top_k=k,
                where={"repo_id": target_repo_id},
            )
            for hit in hits:
                matches.append(
                    FragmentMatch(
                        source_fragment_id=src.id,
                        source_file=str(src.metadata.get("file_path", "")),
                        source_content=src.document,
                        target_fragment_id=hit.source_id,
                        target_file=str(hit.metadata.get("file_path", "")),
                        target_content=hit.content,
                        similarity=hit.score,
                    )
                )
        return matches
