# src/rag/indexer.py - v1
"""Fragment indexer: chunk repository files, embed them and upsert.

Re-indexing a repository first removes its previous fragments so the index
mirrors the current file set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from plexweave.rag.models import Fragment

if TYPE_CHECKING:
    from plexweave.core.models import RepoRecord
    from plexweave.rag.embeddings.base_embedder import BaseEmbedder
    from plexweave.rag.vector_store.base_vector_store import BaseVectorStore
    from plexweave.sources.base_source import BaseRepositorySource

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1500
DEFAULT_CHUNK_OVERLAP = 200
_EMBED_BATCH = 64


@dataclass(frozen=True)
class TextWindow:
    """A character window of a file."""

    content: str
    start_char: int
    end_char: int
    chunk_index: int


@dataclass
class IndexingReport:
    """Counts produced by index_repository."""

    repo_id: str
    files_indexed: int = 0
    fragments_indexed: int = 0
    fragments_removed: int = 0
    errors: list[str] = field(default_factory=list)


def chunk_content(
    content: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[TextWindow]:
    """Split text into overlapping fixed-size character windows."""
    if not content:
        return []
    if len(content) <= chunk_size:
        return [TextWindow(content, 0, len(content), 0)]

    windows: list[TextWindow] = []
    start = 0
    while start < len(content):
        end = min(start + chunk_size, len(content))
        windows.append(TextWindow(content[start:end], start, end, len(windows)))
        if end >= len(content):
            break
        next_start = end - overlap
        if next_start <= start:
            break
        start = next_start
    return windows


def build_fragments(
    repo_id: str,
    file_path: str,
    content: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Fragment]:
    return [
        Fragment(
            id=f"{repo_id}:{file_path}:{w.chunk_index}",
            repo_id=repo_id,
            file_path=file_path,
            chunk_index=w.chunk_index,
            content=w.content,
        )
        for w in chunk_content(content, chunk_size, overlap)
    ]


async def index_repository(
    repo: RepoRecord,
    source: BaseRepositorySource,
    embedder: BaseEmbedder,
    vector_store: BaseVectorStore,
    collection: str = "fragments",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> IndexingReport:
    """Chunk, embed and upsert every text file of ``repo``."""
    report = IndexingReport(repo_id=repo.repo_id)

    if not await vector_store.collection_exists(collection):
        await vector_store.create_collection(collection, embedder.dimensions)

    stale = await vector_store.get_by_filter(collection, {"repo_id": repo.repo_id})
    if stale:
        await vector_store.delete(collection, [s.id for s in stale])
        report.fragments_removed = len(stale)

    fragments: list[Fragment] = []
    for repo_file in await source.list_files(repo):
        file_fragments = build_fragments(
            repo.repo_id, repo_file.path, repo_file.content, chunk_size, overlap,
        )
        if file_fragments:
            fragments.extend(file_fragments)
            report.files_indexed += 1

    for start in range(0, len(fragments), _EMBED_BATCH):
        batch = fragments[start:start + _EMBED_BATCH]
        try:
            embeddings = await embedder.embed_texts([f.content for f in batch])
            await vector_store.upsert(
                collection=collection,
                ids=[f.id for f in batch],
                embeddings=embeddings,
                documents=[f.content for f in batch],
                metadatas=[f.metadata for f in batch],
            )
        except Exception as e:
            logger.warning("Failed to index batch for %s: %s", repo.repo_id, e)
            report.errors.append(f"batch {start // _EMBED_BATCH}: {e}")
            continue
        report.fragments_indexed += len(batch)

    logger.info(
        "Indexed %s: %d files, %d fragments (%d removed, %d errors)",
        repo.repo_id, report.files_indexed, report.fragments_indexed,
        report.fragments_removed, len(report.errors),
    )
    return report
