# src/matching/matcher.py - v1
"""Functional candidate matching over the ontology rules.

Every ordered pair of profiles is evaluated against every rule: "A can
analyze B" and "B can analyze A" are different hypotheses. Candidates are
then reduced to one per unordered pair.
"""

from __future__ import annotations

import logging

from plexweave.core.models import RelationshipCandidate, RepoProfile
from plexweave.core.ontology import RELATIONSHIP_RULES, RelationshipRule

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.5
PROFILE_CONFIDENCE_WEIGHT = 0.1
SHARED_DOMAIN_BONUS = 0.05
ANALYZER_PRODUCER_BONUS = 0.15
MAX_INITIAL_CONFIDENCE = 0.95
DEFAULT_MAX_CANDIDATES = 20

_ANALYZABLE_BY_INSPECTION = ("components", "tools", "schemas", "templates")


def initial_confidence(
    source: RepoProfile, target: RepoProfile, rule: RelationshipRule,
) -> float:
    """Pre-assessment confidence, clamped to [0, 0.95]."""
    confidence = BASE_CONFIDENCE
    confidence += PROFILE_CONFIDENCE_WEIGHT * (source.confidence + target.confidence) / 2
    shared_domains = [d for d in source.domains if d in target.domains]
    confidence += SHARED_DOMAIN_BONUS * len(shared_domains)
    if "analyzer" in source.roles and "producer" in target.roles:
        confidence += ANALYZER_PRODUCER_BONUS
    confidence += rule.bonus
    return max(0.0, min(confidence, MAX_INITIAL_CONFIDENCE))


def matched_capabilities(source: RepoProfile, target: RepoProfile, rule: RelationshipRule) -> list[str]:
    """Human-readable capability evidence for a rule firing."""
    matches: list[str] = []
    if rule.relationship_type == "can_analyze":
        if "analyzes" in source.capabilities:
            matches.append(f"{source.name} can analyze")
        if "detects_drift" in source.capabilities:
            matches.append(f"{source.name} detects drift")
        if "producer" in target.roles:
            matches.append(f"{target.name} produces artifacts")
    elif rule.relationship_type == "can_validate":
        if "validates" in source.capabilities:
            matches.append(f"{source.name} validates")
    elif rule.relationship_type == "can_orchestrate":
        if "orchestrates" in source.capabilities:
            matches.append(f"{source.name} orchestrates")
    return matches


def matched_artifacts(source: RepoProfile, target: RepoProfile) -> list[str]:
    """Artifacts flowing from source to target, or inspectable by source."""
    matches = [
        f"{source.name} produces {a} → {target.name} consumes {a}"
        for a in source.produces
        if a in target.consumes
    ]
    if "analyzes" in source.capabilities or "detects_drift" in source.capabilities:
        matches.extend(
            f"{target.name} produces {a} (analyzable by {source.name})"
            for a in target.produces
            if a in _ANALYZABLE_BY_INSPECTION
        )
    return matches


def evaluate_pair(source: RepoProfile, target: RepoProfile) -> list[RelationshipCandidate]:
    """All rule firings for one ordered pair, in rule order."""
    candidates: list[RelationshipCandidate] = []
    for rule in RELATIONSHIP_RULES:
        if not rule.matches(source, target):
            continue
        candidates.append(
            RelationshipCandidate(
                source=source,
                target=target,
                rule_name=rule.name,
                relationship_type=rule.relationship_type,
                hypothesis=rule.hypothesis,
                matched_capabilities=matched_capabilities(source, target, rule),
                matched_artifacts=matched_artifacts(source, target),
                confidence=initial_confidence(source, target, rule),
            )
        )
        logger.debug(
            "Candidate %s -> %s via %s (%s)",
            source.full_name, target.full_name, rule.name, rule.relationship_type,
        )
    return candidates


def deduplicate_candidates(
    candidates: list[RelationshipCandidate],
) -> list[RelationshipCandidate]:
    """Keep the highest-confidence candidate per unordered pair.

    Ties keep the first evaluated. The result is sorted by confidence
    descending, then by pair key.
    """
    best: dict[tuple[str, str], RelationshipCandidate] = {}
    for candidate in candidates:
        existing = best.get(candidate.pair_key)
        if existing is None or candidate.confidence > existing.confidence:
            best[candidate.pair_key] = candidate
    return sorted(best.values(), key=lambda c: (-c.confidence, c.pair_key))


def find_candidates(profiles: list[RepoProfile]) -> list[RelationshipCandidate]:
    """Evaluate every rule over every ordered pair, then deduplicate."""
    raw: list[RelationshipCandidate] = []
    for i, source in enumerate(profiles):
        for j, target in enumerate(profiles):
            if i == j:
                continue
            raw.extend(evaluate_pair(source, target))

    deduped = deduplicate_candidates(raw)
    logger.info(
        "Candidate matching complete: %d raw, %d after dedup", len(raw), len(deduped),
    )
    return deduped


def top_candidates(
    candidates: list[RelationshipCandidate], n: int = DEFAULT_MAX_CANDIDATES,
) -> list[RelationshipCandidate]:
    """First ``n`` candidates of an already-sorted list."""
    return candidates[:max(n, 0)]
