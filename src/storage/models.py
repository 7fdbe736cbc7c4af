# src/storage/models.py - v1
"""Persisted records: Weave, DiscoveryRun, RunLogEntry."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from plexweave.core.models import unordered_pair
from plexweave.llm.models import OracleStats

WeaveType = Literal["functional", "philosophical", "integration_opportunity"]
RunStatus = Literal["RUNNING", "COMPLETED", "FAILED"]
RunMode = Literal["profile", "similarity"]
LogLevel = Literal["debug", "info", "warning", "error"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"COMPLETED", "FAILED"})

RUN_COUNTERS: tuple[str, ...] = (
    "profiles_created",
    "philosophical_profiles_created",
    "repo_pairs_total",
    "repo_pairs_checked",
    "candidates_found",
    "philosophical_matches_found",
    "weaves_saved",
    "weaves_skipped",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_run_id(timestamp: datetime | None = None) -> str:
    """Generate a run id: yyyymmdd_hhmmss_{uuid4_short}."""
    ts = timestamp or _utcnow()
    return f"{ts.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


class Weave(BaseModel):
    """A persisted relationship between two repositories of a plexus."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    plexus_id: str
    source_repo_id: str
    target_repo_id: str
    discovery_run_id: str
    type: WeaveType
    title: str
    description: str
    score: float = Field(ge=0.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict)
    dismissed: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def pair_key(self) -> tuple[str, str]:
        return unordered_pair(self.source_repo_id, self.target_repo_id)


class RunLogEntry(BaseModel):
    """One entry of a run's append-only structured log."""

    timestamp: datetime = Field(default_factory=_utcnow)
    level: LogLevel = "info"
    message: str
    data: dict[str, Any] | None = None


class DiscoveryRun(BaseModel):
    """Bookkeeping record of one discovery pass over a plexus."""

    id: str = Field(default_factory=generate_run_id)
    plexus_id: str
    mode: RunMode = "profile"
    status: RunStatus = "RUNNING"

    profiles_created: int = 0
    philosophical_profiles_created: int = 0
    repo_pairs_total: int = 0
    repo_pairs_checked: int = 0
    candidates_found: int = 0
    philosophical_matches_found: int = 0
    weaves_saved: int = 0
    weaves_skipped: int = 0

    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: datetime | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    logs: list[RunLogEntry] = Field(default_factory=list)
    error: str | None = None
    oracle_stats: OracleStats = Field(default_factory=OracleStats)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def counters(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in RUN_COUNTERS}
