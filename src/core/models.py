# src/core/models.py - v1
"""Shared pydantic domain models used across modules.

Repository inputs, the two profile kinds, transient match results, and the
structured answers the oracle returns. Persisted records (Weave,
DiscoveryRun) live in storage.models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from plexweave.core.ontology import Artifact, Capability, Domain, RelationshipType, Role
from plexweave.core.philosophy import (
    AbstractionLevel,
    Antagonist,
    CognitiveTransform,
    Epistemology,
    PhilosophicalMatchType,
    Temporality,
)


def unordered_pair(a: str, b: str) -> tuple[str, str]:
    """Direction-free key for a pair of repository ids."""
    return (a, b) if a <= b else (b, a)


# === REPOSITORY INPUTS ===


class RepoRecord(BaseModel):
    """A repository member of a plexus."""

    repo_id: str
    name: str
    full_name: str
    plexus_id: str


class RepoManifest(BaseModel):
    """Manifest metadata (package.json, pyproject.toml)."""

    name: str | None = None
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)


class RepoSourceMaterial(BaseModel):
    """Raw material gathered for profiling one repository."""

    description: str | None = None
    manifest: RepoManifest | None = None
    top_level_dirs: list[str] = Field(default_factory=list, max_length=20)

    @property
    def has_description(self) -> bool:
        return bool(self.description) or bool(self.manifest and self.manifest.description)


# === PROFILES ===


class RepoProfile(BaseModel):
    """Functional profile of a repository, normalized onto the ontology."""

    model_config = ConfigDict(frozen=True)

    repo_id: str
    name: str
    full_name: str
    purpose: str
    capabilities: tuple[Capability, ...] = ()
    produces: tuple[Artifact, ...] = ()
    consumes: tuple[Artifact, ...] = ()
    domains: tuple[Domain, ...] = ()
    roles: tuple[Role, ...] = ()
    keywords: tuple[str, ...] = ()
    problems_solved: tuple[str, ...] = ()
    target_users: tuple[str, ...] = ()
    readme_excerpt: str = Field(default="", max_length=500)
    package_description: str = ""
    confidence: float = Field(ge=0.0, le=1.0)


class PhilosophicalProfile(BaseModel):
    """Stance of a repository along the five philosophical dimensions."""

    model_config = ConfigDict(frozen=True)

    repo_id: str
    epistemology: Epistemology
    antagonist: Antagonist
    cognitive_transform: CognitiveTransform
    temporality: Temporality
    abstraction_level: AbstractionLevel
    philosophy_statement: str
    core_virtue: str
    confidence: float = Field(ge=0.0, le=1.0)


# === MATCH RESULTS ===


class RelationshipCandidate(BaseModel):
    """A rule firing on an ordered pair of profiles, before assessment."""

    source: RepoProfile
    target: RepoProfile
    rule_name: str
    relationship_type: RelationshipType
    hypothesis: str
    matched_capabilities: list[str] = Field(default_factory=list)
    matched_artifacts: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=0.95)

    @property
    def pair_key(self) -> tuple[str, str]:
        return unordered_pair(self.source.repo_id, self.target.repo_id)


class PhilosophicalMatch(BaseModel):
    """A schizosophy rule firing on an ordered pair of stance profiles."""

    source: PhilosophicalProfile
    target: PhilosophicalProfile
    match_type: PhilosophicalMatchType
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    integration_hypothesis: str

    @property
    def pair_key(self) -> tuple[str, str]:
        return unordered_pair(self.source.repo_id, self.target.repo_id)


# === ORACLE ANSWERS ===


class RelationshipAssessment(BaseModel):
    """Oracle verdict on a functional candidate."""

    is_valid_opportunity: bool = Field(
        description="Is this a real, actionable integration opportunity?"
    )
    title: str = Field(
        description="Short title for this integration opportunity "
        '(e.g. "Use blocks to analyze tpmjs tools")'
    )
    description: str = Field(description="Detailed explanation of how these repos could integrate")
    specific_integration: str | None = Field(
        default=None,
        description="Concrete, actionable suggestion. Null if not a valid opportunity.",
    )
    value_proposition: str | None = Field(
        default=None,
        description="What benefit would this integration provide? Null if not a valid opportunity.",
    )
    confidence: float = Field(
        ge=0.0, le=1.0, description="Confidence this is a valuable opportunity (0-1)"
    )
    reasoning: str = Field(description="Reasoning for this assessment")


class IntegrationAssessment(BaseModel):
    """Oracle verdict on fragment-level evidence between two repositories."""

    should_weave: bool = Field(
        description="True only for a real, specific integration opportunity"
    )
    score: float = Field(ge=0.0, le=1.0, description="Strength of the opportunity (0-1)")
    title: str | None = Field(default=None, description="Short title, null when not weaving")
    description: str | None = Field(
        default=None, description="What could be integrated and how, null when not weaving"
    )
    reasoning: str = Field(description="Why this is or is not worth weaving")
