# src/matching/file_pairs.py - v1
"""Group fragment matches by (source file, target file)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from plexweave.rag.models import FragmentMatch


class FilePairMatch(BaseModel):
    """Aggregated evidence for one pair of files."""

    source_file: str
    target_file: str
    avg_similarity: float = 0.0
    max_similarity: float = 0.0
    chunk_count: int = 0
    matches: list[FragmentMatch] = Field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        """Metadata form stored on integration weaves (no fragment text)."""
        return {
            "source_file": self.source_file,
            "target_file": self.target_file,
            "avg_similarity": self.avg_similarity,
            "max_similarity": self.max_similarity,
            "chunk_count": self.chunk_count,
        }


def aggregate_by_file_pairs(results: list[FragmentMatch]) -> list[FilePairMatch]:
    """Group matches per file pair, in first-seen order."""
    pairs: dict[tuple[str, str], FilePairMatch] = {}
    for match in results:
        key = (match.source_file, match.target_file)
        pair = pairs.get(key)
        if pair is None:
            pair = pairs[key] = FilePairMatch(source_file=key[0], target_file=key[1])
        pair.matches.append(match)
        pair.max_similarity = max(pair.max_similarity, match.similarity)
        pair.chunk_count = len(pair.matches)

    for pair in pairs.values():
        pair.avg_similarity = sum(m.similarity for m in pair.matches) / len(pair.matches)
    return list(pairs.values())


def select_file_pairs(
    pairs: list[FilePairMatch],
    min_matching_chunks: int = 3,
    min_avg_similarity: float = 0.83,
    limit: int = 7,
) -> list[FilePairMatch]:
    """Drop weak file pairs and keep the ``limit`` best by average similarity."""
    kept = [
        p for p in pairs
        if p.chunk_count >= min_matching_chunks and p.avg_similarity >= min_avg_similarity
    ]
    kept.sort(key=lambda p: p.avg_similarity, reverse=True)
    return kept[:limit]
