# src/storage/store_factory.py - v1
"""Factory: instantiate the weave store from configuration."""

from __future__ import annotations

from plexweave.config.settings import Settings
from plexweave.storage.base_weave_store import BaseWeaveStore


class UnsupportedStoreError(ValueError):
    """Raised when the configured store backend is not supported."""


def create_weave_store(settings: Settings | None = None) -> BaseWeaveStore:
    """Instantiate the configured weave store backend.

    Args:
        settings: Application settings. Defaults to SQLite at the default path.

    Raises:
        UnsupportedStoreError: If the backend is unknown.
    """
    settings = settings or Settings(_env_file=None)
    backend = settings.store_backend

    if backend == "sqlite":
        from plexweave.storage.sqlite_store import SqliteWeaveStore
        return SqliteWeaveStore(
            db_path=settings.store_path,
            enforce_unique=settings.store_enforce_unique,
        )

    if backend == "json":
        from plexweave.storage.json_store import JsonWeaveStore
        path = settings.store_path
        return JsonWeaveStore(root=path.with_suffix("") if path.suffix else path)

    raise UnsupportedStoreError(f"Unsupported store backend: {backend!r}")
