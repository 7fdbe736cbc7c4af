# src/sources/base_source.py - v1
"""Abstract repository source: where plexus members and their content live."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from plexweave.core.models import RepoRecord, RepoSourceMaterial


class RepoFile(BaseModel):
    """A text file of a repository, path relative to the repository root."""

    path: str
    content: str


class BaseRepositorySource(ABC):
    """Unified interface for repository content providers."""

    @abstractmethod
    async def list_repos(self, plexus_id: str) -> list[RepoRecord]:
        """Return the repositories of a plexus.

        Raises:
            LookupError: If the plexus does not exist.
        """

    @abstractmethod
    async def get_source_material(self, repo: RepoRecord) -> RepoSourceMaterial:
        """Gather the README, manifest and top-level directories of a repository."""

    @abstractmethod
    async def list_files(self, repo: RepoRecord) -> list[RepoFile]:
        """Return the indexable text files of a repository."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""
