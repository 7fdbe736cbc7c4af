# src/storage/run_manager.py - v1
"""Run lifecycle management: create, log, count, finalize.

Every mutation is written through to the store so that observers polling
``get_run`` see progress while a run is in flight.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from plexweave.discovery.errors import RunFinalizedError
from plexweave.storage.base_weave_store import BaseWeaveStore
from plexweave.storage.models import (
    RUN_COUNTERS,
    DiscoveryRun,
    LogLevel,
    RunLogEntry,
    RunMode,
    RunStatus,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class RunManager:
    """Owns one DiscoveryRun record from creation to its terminal status."""

    def __init__(self, store: BaseWeaveStore, run: DiscoveryRun) -> None:
        self._store = store
        self.run = run

    @classmethod
    async def start(
        cls,
        store: BaseWeaveStore,
        plexus_id: str,
        mode: RunMode = "profile",
        config: dict[str, Any] | None = None,
    ) -> RunManager:
        """Create and persist a RUNNING run.

        Args:
            store: Weave store backend.
            plexus_id: Scope of the run.
            mode: ``profile`` or ``similarity``.
            config: Options captured for provenance.
        """
        run = DiscoveryRun(plexus_id=plexus_id, mode=mode, config=config or {})
        await store.create_run(run)
        logger.info("Created %s discovery run %s for plexus %s", mode, run.id, plexus_id)
        return cls(store, run)

    @property
    def run_id(self) -> str:
        return self.run.id

    async def log(
        self, level: LogLevel, message: str, data: dict[str, Any] | None = None,
    ) -> None:
        """Append to the run log and forward to the module logger."""
        self.run.logs.append(RunLogEntry(level=level, message=message, data=data))
        logger.log(_LOG_LEVELS[level], message, extra={"data": data} if data else None)
        await self._store.save_run(self.run)

    async def update(self, **counters: int) -> None:
        """Set counters to absolute values."""
        for name, value in counters.items():
            self._check_counter(name)
            setattr(self.run, name, value)
        await self._store.save_run(self.run)

    async def increment(self, counter: str, by: int = 1) -> None:
        self._check_counter(counter)
        setattr(self.run, counter, getattr(self.run, counter) + by)
        await self._store.save_run(self.run)

    async def complete(self) -> DiscoveryRun:
        return await self.finalize("COMPLETED")

    async def fail(self, error: str) -> DiscoveryRun:
        return await self.finalize("FAILED", error=error)

    async def finalize(self, status: RunStatus, error: str | None = None) -> DiscoveryRun:
        """Move the run to a terminal status. Allowed exactly once.

        Raises:
            RunFinalizedError: If the run is already COMPLETED or FAILED.
        """
        if self.run.is_terminal:
            raise RunFinalizedError(f"Run {self.run.id} is already {self.run.status}")
        if status == "RUNNING":
            raise ValueError("finalize() needs a terminal status")

        self.run.status = status
        self.run.error = error
        self.run.completed_at = datetime.now(timezone.utc)
        await self._store.save_run(self.run)
        logger.info(
            "Run %s finished %s: %s", self.run.id, status,
            ", ".join(f"{k}={v}" for k, v in self.run.counters().items()),
        )
        return self.run

    @staticmethod
    def _check_counter(name: str) -> None:
        if name not in RUN_COUNTERS:
            raise ValueError(f"Unknown run counter: {name!r}")
