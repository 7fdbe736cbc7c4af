# src/rag/models.py - v1
"""RAG types: indexed fragments, search results and fragment-level matches."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Fragment(BaseModel):
    """A chunk of repository content, the unit stored in the vector index."""

    id: str
    repo_id: str
    file_path: str
    chunk_index: int
    content: str

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "repo_id": self.repo_id,
            "file_path": self.file_path,
            "chunk_index": self.chunk_index,
        }


class SearchResult(BaseModel):
    """A ranked hit returned by BaseVectorStore.query."""

    source_id: str
    content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class StoredVector(BaseModel):
    """A stored entry with its embedding, returned by get_by_filter."""

    id: str
    document: str
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class FragmentMatch(BaseModel):
    """A source fragment paired with a similar target fragment."""

    source_fragment_id: str
    source_file: str
    source_content: str
    target_fragment_id: str
    target_file: str
    target_content: str
    similarity: float
