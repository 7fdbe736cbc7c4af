# src/discovery/models.py - v1
"""Discovery run options and results."""

from __future__ import annotations

from pydantic import BaseModel, Field

from plexweave.config.settings import Settings
from plexweave.core.models import PhilosophicalProfile, RepoProfile
from plexweave.storage.models import DiscoveryRun, RunStatus, Weave


class DiscoveryOptions(BaseModel):
    """Per-run options, captured verbatim into DiscoveryRun.config."""

    # Profile mode
    min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    max_candidates: int = Field(default=20, ge=1)
    philosophy_enabled: bool = True
    philosophy_min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)

    # Similarity mode
    similarity_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    similarity_top_k: int = Field(default=5, ge=1)
    max_chunk_pairs: int = Field(default=200, ge=1)
    min_matching_chunks: int = Field(default=3, ge=1)
    min_file_pair_similarity: float = Field(default=0.83, ge=0.0, le=1.0)
    max_file_pairs_to_llm: int = Field(default=7, ge=1)
    llm_score_threshold: float = Field(default=0.75, ge=0.0, le=1.0)

    # Execution
    max_concurrency: int = Field(default=1, ge=1)
    dry_run: bool = False
    verbose: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> DiscoveryOptions:
        """Defaults taken from settings, then explicit overrides."""
        values = {name: getattr(settings, name) for name in cls.model_fields if hasattr(settings, name)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class DiscoveryResult(BaseModel):
    """Outcome of one discovery run.

    ``weaves`` holds the weaves written by this run, or in a dry run the
    weaves that would have been written.
    """

    run: DiscoveryRun
    profiles: list[RepoProfile] = Field(default_factory=list)
    philosophical_profiles: list[PhilosophicalProfile] = Field(default_factory=list)
    weaves: list[Weave] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def run_id(self) -> str:
        return self.run.id

    @property
    def status(self) -> RunStatus:
        return self.run.status
