# src/core/ontology.py - v1
"""Functional ontology: closed vocabularies and relationship rules.

Profiles are normalized onto these vocabularies before matching; the rule
table is immutable data evaluated by matching.matcher over ordered pairs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Literal, get_args

if TYPE_CHECKING:
    from plexweave.core.models import RepoProfile


# === VOCABULARIES ===

Capability = Literal[
    "analyzes",
    "generates",
    "transforms",
    "validates",
    "orchestrates",
    "visualizes",
    "aggregates",
    "exposes_api",
    "wraps",
    "templates",
    "enforces_schema",
    "detects_drift",
    "builds",
    "deploys",
    "tests",
    "documents",
    "monitors",
    "optimizes",
    "secures",
    "migrates",
]

Artifact = Literal[
    "components",
    "tools",
    "schemas",
    "documents",
    "configurations",
    "embeddings",
    "events",
    "workflows",
    "source_code",
    "packages",
    "apis",
    "reports",
    "templates",
    "types",
    "tests",
    "data",
    "models",
    "prompts",
]

Domain = Literal[
    "llm_tooling",
    "component_systems",
    "drift_analysis",
    "ci_cd",
    "web_apps",
    "cli_tools",
    "data_processing",
    "content_generation",
    "metadata_extraction",
    "testing",
    "documentation",
    "infrastructure",
    "developer_tools",
    "ui_frameworks",
    "api_services",
    "monorepo_tooling",
]

Role = Literal[
    "producer",
    "consumer",
    "analyzer",
    "validator",
    "orchestrator",
    "transformer",
    "renderer",
    "compiler",
    "library",
    "application",
    "framework",
    "plugin",
    "utility",
]

RelationshipType = Literal[
    "can_analyze",
    "can_consume",
    "can_enhance",
    "can_validate",
    "can_orchestrate",
    "complements",
    "shares_patterns",
    "could_depend_on",
    "could_generate_for",
]

CAPABILITIES: tuple[str, ...] = get_args(Capability)
ARTIFACTS: tuple[str, ...] = get_args(Artifact)
DOMAINS: tuple[str, ...] = get_args(Domain)
ROLES: tuple[str, ...] = get_args(Role)
RELATIONSHIP_TYPES: tuple[str, ...] = get_args(RelationshipType)

# Near-miss spellings the oracle tends to emit instead of the canonical term.
ARTIFACT_CORRECTIONS: dict[str, str] = {
    "configs": "configurations",
    "config": "configurations",
    "code": "source_code",
    "docs": "documents",
    "doc": "documents",
    "api": "apis",
    "schema": "schemas",
    "type": "types",
    "test": "tests",
    "template": "templates",
    "model": "models",
    "prompt": "prompts",
    "event": "events",
    "workflow": "workflows",
    "package": "packages",
    "component": "components",
    "tool": "tools",
    "report": "reports",
    "embedding": "embeddings",
}


# === NORMALIZATION ===


def normalize_token(value: str) -> str:
    """Lower-case, trim, and turn spaces and hyphens into underscores."""
    return "_".join(value.strip().lower().replace("-", " ").split())


def normalize_terms(
    values: Iterable[str],
    vocabulary: Iterable[str],
    corrections: dict[str, str] | None = None,
) -> list[str]:
    """Map free-text values onto a closed vocabulary.

    Unknown values are dropped silently. Duplicates are removed, keeping
    the first occurrence.
    """
    allowed = set(vocabulary)
    corrections = corrections or {}
    result: list[str] = []
    for raw in values:
        token = normalize_token(raw)
        token = token if token in allowed else corrections.get(token, "")
        if token in allowed and token not in result:
            result.append(token)
    return result


def normalize_capabilities(values: Iterable[str]) -> list[str]:
    return normalize_terms(values, CAPABILITIES)


def normalize_artifacts(values: Iterable[str]) -> list[str]:
    """Normalize artifact kinds, applying ARTIFACT_CORRECTIONS."""
    return normalize_terms(values, ARTIFACTS, ARTIFACT_CORRECTIONS)


def normalize_domains(values: Iterable[str]) -> list[str]:
    return normalize_terms(values, DOMAINS)


def normalize_roles(values: Iterable[str]) -> list[str]:
    return normalize_terms(values, ROLES)


# === RELATIONSHIP RULES ===


@dataclass(frozen=True)
class RelationshipRule:
    """A directional predicate over (source, target) profiles."""

    name: str
    description: str
    relationship_type: RelationshipType
    predicate: Callable[[RepoProfile, RepoProfile], bool]
    bonus: float = 0.0

    def matches(self, source: RepoProfile, target: RepoProfile) -> bool:
        return self.predicate(source, target)

    @property
    def hypothesis(self) -> str:
        return f"{self.name}: {self.description}"


ANALYZABLE_ARTIFACTS = frozenset({"components", "tools", "schemas", "source_code"})
PATTERN_ARTIFACTS = frozenset({"components", "tools", "templates"})


def _produces_for(source: RepoProfile, target: RepoProfile) -> bool:
    return any(a in target.consumes for a in source.produces)


def _shares_domain(source: RepoProfile, target: RepoProfile) -> bool:
    return any(d in target.domains for d in source.domains)


RELATIONSHIP_RULES: tuple[RelationshipRule, ...] = (
    RelationshipRule(
        name="analyzer_to_analyzable",
        description="Analyzer can analyze artifacts produced by target",
        relationship_type="can_analyze",
        predicate=lambda s, t: (
            "analyzes" in s.capabilities
            and "analyzer" in s.roles
            and any(a in ANALYZABLE_ARTIFACTS for a in t.produces)
        ),
    ),
    RelationshipRule(
        name="drift_detector_to_patterns",
        description="Drift detector can analyze repeated patterns",
        relationship_type="can_analyze",
        predicate=lambda s, t: (
            "detects_drift" in s.capabilities
            and any(a in PATTERN_ARTIFACTS for a in t.produces)
            and "producer" in t.roles
        ),
        bonus=0.1,
    ),
    RelationshipRule(
        name="validator_to_schemas",
        description="Validator can check schema-producing repos",
        relationship_type="can_validate",
        predicate=lambda s, t: "validates" in s.capabilities and "schemas" in t.produces,
    ),
    RelationshipRule(
        name="generator_to_consumer",
        description="Generator can create artifacts for consumer",
        relationship_type="could_generate_for",
        predicate=lambda s, t: "generates" in s.capabilities and _produces_for(s, t),
    ),
    RelationshipRule(
        name="library_to_application",
        description="Library could be used by application",
        relationship_type="could_depend_on",
        predicate=lambda s, t: (
            "library" in s.roles and "application" in t.roles and _shares_domain(s, t)
        ),
    ),
    RelationshipRule(
        name="shared_domain",
        description="Repos in same domain with complementary roles",
        relationship_type="complements",
        predicate=lambda s, t: (
            _shares_domain(s, t) and any(r not in t.roles for r in s.roles)
        ),
    ),
    RelationshipRule(
        name="orchestrator_to_tool",
        description="Orchestrator can coordinate tool producers",
        relationship_type="can_orchestrate",
        predicate=lambda s, t: "orchestrates" in s.capabilities and "tools" in t.produces,
    ),
    RelationshipRule(
        name="transformer_chain",
        description="Transformer output matches another transformer input",
        relationship_type="can_consume",
        predicate=lambda s, t: (
            "transforms" in s.capabilities
            and "transforms" in t.capabilities
            and _produces_for(s, t)
        ),
    ),
)


def get_rule(name: str) -> RelationshipRule:
    """Look up a rule by name. Raises KeyError if unknown."""
    for rule in RELATIONSHIP_RULES:
        if rule.name == name:
            return rule
    raise KeyError(name)
