# src/rag/vector_store/vector_store_factory.py - v1
"""Factory: pick the fragment index backend from VECTOR_DB_TYPE.

``memory`` lives only as long as the process. ``chromadb`` talks to a
server when VECTOR_DB_URL is set and otherwise persists under
VECTOR_DB_PATH.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from plexweave.config.settings import Settings
from plexweave.rag.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)

CHROMA_DEFAULT_PORT = 8000


class UnsupportedVectorStoreError(ValueError):
    """Raised when VECTOR_DB_TYPE names no known backend."""


def server_address(url: str) -> tuple[str, int]:
    """``(host, port)`` of a server URL; the scheme and port may be omitted."""
    parts = urlsplit(url if "://" in url else f"http://{url}")
    return parts.hostname or "localhost", parts.port or CHROMA_DEFAULT_PORT


def create_vector_store(settings: Settings) -> BaseVectorStore:
    kind = settings.vector_db_type
    logger.debug("Creating vector store: %s", kind)

    if kind == "memory":
        from plexweave.rag.vector_store.memory_store import InMemoryVectorStore

        return InMemoryVectorStore()

    if kind == "chromadb":
        from plexweave.rag.vector_store.chromadb_store import ChromaDBStore

        if settings.vector_db_url:
            host, port = server_address(settings.vector_db_url)
            return ChromaDBStore(host=host, port=port)
        return ChromaDBStore(persist_path=settings.vector_db_path)

    raise UnsupportedVectorStoreError(
        f"Unsupported vector store type: {kind!r}. Available: memory, chromadb"
    )
