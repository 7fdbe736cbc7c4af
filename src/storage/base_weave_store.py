# src/storage/base_weave_store.py - v1
"""Abstract weave store: discovery runs and the weaves they produce."""

from __future__ import annotations

from abc import ABC, abstractmethod

from plexweave.storage.models import DiscoveryRun, Weave, WeaveType


class DuplicateWeaveError(Exception):
    """A non-dismissed weave already exists for this pair, type and plexus."""


class BaseWeaveStore(ABC):
    """Unified interface for weave storage backends."""

    # --- Runs ---

    @abstractmethod
    async def create_run(self, run: DiscoveryRun) -> None:
        """Insert a new run record."""

    @abstractmethod
    async def save_run(self, run: DiscoveryRun) -> None:
        """Overwrite a run record with its current state."""

    @abstractmethod
    async def get_run(self, run_id: str) -> DiscoveryRun | None:
        """Retrieve a run by id."""

    @abstractmethod
    async def list_runs(
        self, plexus_id: str | None = None, limit: int = 20,
    ) -> list[DiscoveryRun]:
        """Most recent runs first, optionally restricted to one plexus."""

    # --- Weaves ---

    @abstractmethod
    async def find_existing_weave(
        self,
        plexus_id: str,
        source_repo_id: str,
        target_repo_id: str,
        weave_type: WeaveType,
    ) -> Weave | None:
        """Non-dismissed weave for the unordered pair, type and plexus."""

    @abstractmethod
    async def create_weave(self, weave: Weave) -> Weave:
        """Insert a weave.

        Raises:
            DuplicateWeaveError: If the backend enforces pair uniqueness
                and a live weave already exists.
        """

    @abstractmethod
    async def list_weaves(
        self,
        plexus_id: str,
        weave_type: WeaveType | None = None,
        include_dismissed: bool = False,
    ) -> list[Weave]:
        """Weaves of a plexus, highest score first."""

    @abstractmethod
    async def dismiss_weave(self, weave_id: str) -> bool:
        """Mark a weave dismissed. Returns False if it does not exist."""

    @abstractmethod
    async def count_weaves(
        self,
        plexus_id: str,
        weave_type: WeaveType | None = None,
        include_dismissed: bool = False,
    ) -> int:
        """Number of weaves of a plexus."""

    def close(self) -> None:
        """Release backend resources."""
