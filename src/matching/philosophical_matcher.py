# src/matching/philosophical_matcher.py - v1
"""Schizosophy matching: stance-level alignment between repositories.

Philosophical matches skip oracle assessment. They are persisted directly
when above the caller's minimum confidence.
"""

from __future__ import annotations

import logging

from plexweave.core.models import PhilosophicalMatch, PhilosophicalProfile
from plexweave.core.philosophy import SCHIZOSOPHY_RULES

logger = logging.getLogger(__name__)


def evaluate_pair(
    source: PhilosophicalProfile, target: PhilosophicalProfile,
) -> list[PhilosophicalMatch]:
    """All schizosophy rule firings for one ordered pair, in rule order."""
    profile_confidence = (source.confidence + target.confidence) / 2
    matches: list[PhilosophicalMatch] = []
    for rule in SCHIZOSOPHY_RULES:
        if not rule.matches(source, target):
            continue
        confidence = rule.base_confidence * profile_confidence
        matches.append(
            PhilosophicalMatch(
                source=source,
                target=target,
                match_type=rule.name,
                description=rule.description,
                confidence=max(0.0, min(confidence, 1.0)),
                integration_hypothesis=rule.hypothesis(source, target),
            )
        )
        logger.debug(
            "Philosophical match %s -> %s via %s (%.3f)",
            source.repo_id, target.repo_id, rule.name, confidence,
        )
    return matches


def deduplicate_matches(matches: list[PhilosophicalMatch]) -> list[PhilosophicalMatch]:
    """Keep the highest-confidence match per unordered pair (ties keep the first)."""
    best: dict[tuple[str, str], PhilosophicalMatch] = {}
    for match in matches:
        existing = best.get(match.pair_key)
        if existing is None or match.confidence > existing.confidence:
            best[match.pair_key] = match
    return sorted(best.values(), key=lambda m: (-m.confidence, m.pair_key))


def find_philosophical_matches(
    profiles: list[PhilosophicalProfile],
) -> list[PhilosophicalMatch]:
    """Evaluate every schizosophy rule over every ordered pair, then deduplicate."""
    raw: list[PhilosophicalMatch] = []
    for i, source in enumerate(profiles):
        for j, target in enumerate(profiles):
            if i != j:
                raw.extend(evaluate_pair(source, target))

    deduped = deduplicate_matches(raw)
    logger.info(
        "Philosophical matching complete: %d raw, %d after dedup", len(raw), len(deduped),
    )
    return deduped


def render_philosophical_integration(
    match: PhilosophicalMatch, source_name: str, target_name: str,
) -> str:
    """Long-form markdown description of the integration a match suggests."""
    s, t = match.source, match.target

    if match.match_type == "vertical_alignment":
        return (
            "## Vertical Alignment Opportunity\n\n"
            f"**{source_name}** addresses {s.antagonist} at the **{s.abstraction_level}** level.\n"
            f"**{target_name}** addresses {t.antagonist} at the **{t.abstraction_level}** level.\n\n"
            f"Together they can form a multi-scale anti-{s.antagonist} system.\n\n"
            "**Possible Integrations:**\n"
            f"- Feed {target_name}'s {t.abstraction_level}-level insights into "
            f"{source_name}'s {s.abstraction_level}-level checks\n"
            f"- {source_name} defines the philosophy; {target_name} detects deviations from it\n"
            f"- Create a unified dashboard showing {s.antagonist} at all abstraction levels"
        )

    if match.match_type == "anti_entropy_alignment":
        return (
            "## Anti-Entropy Alignment Opportunity\n\n"
            "Both repos fight software entropy:\n"
            f"- **{source_name}**: fights **{s.antagonist}** ({s.philosophy_statement})\n"
            f"- **{target_name}**: fights **{t.antagonist}** ({t.philosophy_statement})\n\n"
            "**Combined Strategy:**\n"
            '- Create a holistic "entropy dashboard" showing:\n'
            f"  - {s.antagonist} indicators from {source_name}\n"
            f"  - {t.antagonist} indicators from {target_name}\n"
            "  - Deviation history over time\n"
            "  - Suggested simplifications\n\n"
            f"**Philosophy:** {s.core_virtue} + {t.core_virtue} = comprehensive anti-entropy"
        )

    if match.match_type == "reveal_enforce_pair":
        revealer = source_name if s.cognitive_transform == "reveals" else target_name
        enforcer = source_name if s.cognitive_transform == "enforces" else target_name
        return (
            "## Reveal-Enforce Pair Opportunity\n\n"
            "Natural workflow pairing:\n"
            f"- **Revealer**: {revealer}\n"
            f"- **Enforcer**: {enforcer}\n\n"
            "**Workflow:**\n"
            "1. Revealer identifies problems (drift, violations, debt)\n"
            "2. Enforcer automatically fixes or prevents recurrence\n"
            "3. Feedback loop improves both systems\n\n"
            "**Integration:** Connect the revealer's output format to the enforcer's input format."
        )

    if match.match_type == "epistemological_kin":
        return (
            "## Epistemological Kinship\n\n"
            f"Both repos embody **{s.epistemology}** epistemology:\n"
            f"- **{source_name}**: {s.philosophy_statement}\n"
            f"- **{target_name}**: {t.philosophy_statement}\n\n"
            "**Value:** Developers who appreciate one will naturally appreciate the other.\n"
            "Cross-pollinate ideas, patterns, and approaches between the two communities."
        )

    return (
        f"## Shared Antagonist: {s.antagonist}\n\n"
        f"Both repos fight **{s.antagonist}**:\n"
        f"- **{source_name}** ({s.cognitive_transform} at {s.abstraction_level} level)\n"
        f"- **{target_name}** ({t.cognitive_transform} at {t.abstraction_level} level)\n\n"
        "**Opportunity:** Share strategies, combine forces, or create a unified "
        f"anti-{s.antagonist} toolkit."
    )
