# src/core/philosophy.py - v1
"""Philosophical ontology and schizosophy rules.

Five closed dimensions describe a repository's stance (how it seeks truth,
what it fights, what it does to understanding, when it acts, at which level).
The rules detect stance-level alignment that is orthogonal to function.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal, get_args

if TYPE_CHECKING:
    from plexweave.core.models import PhilosophicalProfile


Epistemology = Literal["empirical", "formal", "pragmatic", "constructive"]
Antagonist = Literal["complexity", "inconsistency", "ambiguity", "rigidity", "entropy"]
CognitiveTransform = Literal["reveals", "enforces", "generates", "validates", "measures"]
Temporality = Literal["prevents", "detects", "corrects", "documents"]
AbstractionLevel = Literal["data", "pattern", "architecture", "philosophy"]

PhilosophicalMatchType = Literal[
    "shared_antagonist",
    "vertical_alignment",
    "epistemological_kin",
    "reveal_enforce_pair",
    "anti_entropy_alignment",
]

EPISTEMOLOGIES: tuple[str, ...] = get_args(Epistemology)
ANTAGONISTS: tuple[str, ...] = get_args(Antagonist)
COGNITIVE_TRANSFORMS: tuple[str, ...] = get_args(CognitiveTransform)
TEMPORALITIES: tuple[str, ...] = get_args(Temporality)
ABSTRACTION_LEVELS: tuple[str, ...] = get_args(AbstractionLevel)

# Antagonists that are all forms of software decay.
ANTI_ENTROPY_ANTAGONISTS = frozenset({"complexity", "inconsistency", "entropy"})


@dataclass(frozen=True)
class SchizosophyRule:
    """A stance-alignment rule with a fixed base confidence."""

    name: PhilosophicalMatchType
    description: str
    base_confidence: float
    predicate: Callable[[PhilosophicalProfile, PhilosophicalProfile], bool]
    hypothesis: Callable[[PhilosophicalProfile, PhilosophicalProfile], str]

    def matches(self, source: PhilosophicalProfile, target: PhilosophicalProfile) -> bool:
        return self.predicate(source, target)


def _is_reveal_enforce(s: PhilosophicalProfile, t: PhilosophicalProfile) -> bool:
    return {s.cognitive_transform, t.cognitive_transform} == {"reveals", "enforces"}


def _reveal_enforce_hypothesis(s: PhilosophicalProfile, t: PhilosophicalProfile) -> str:
    revealer, enforcer = ("Source", "Target") if s.cognitive_transform == "reveals" else ("Target", "Source")
    return (
        f"{revealer} reveals problems, {enforcer} enforces fixes. "
        'Natural pairing for "detect then fix" workflows.'
    )


SCHIZOSOPHY_RULES: tuple[SchizosophyRule, ...] = (
    SchizosophyRule(
        name="shared_antagonist",
        description="Both repos fight the same conceptual enemy",
        base_confidence=0.7,
        predicate=lambda s, t: s.antagonist == t.antagonist,
        hypothesis=lambda s, t: (
            f"Both fight {s.antagonist}. "
            "They could share strategies or become complementary tools."
        ),
    ),
    SchizosophyRule(
        name="vertical_alignment",
        description="They fight the same enemy but at different abstraction levels",
        base_confidence=0.8,
        predicate=lambda s, t: (
            s.antagonist == t.antagonist and s.abstraction_level != t.abstraction_level
        ),
        hypothesis=lambda s, t: (
            f"Both fight {s.antagonist} but at different scales: "
            f"{s.abstraction_level}-level vs {t.abstraction_level}-level. "
            "Together they form a multi-scale defense."
        ),
    ),
    SchizosophyRule(
        name="epistemological_kin",
        description="Both repos use the same approach to truth-seeking",
        base_confidence=0.6,
        predicate=lambda s, t: s.epistemology == t.epistemology,
        hypothesis=lambda s, t: (
            f"Both embody {s.epistemology} epistemology. "
            "Developers who value one would appreciate the other."
        ),
    ),
    SchizosophyRule(
        name="reveal_enforce_pair",
        description="One reveals drift; the other enforces correction",
        base_confidence=0.75,
        predicate=_is_reveal_enforce,
        hypothesis=_reveal_enforce_hypothesis,
    ),
    SchizosophyRule(
        name="anti_entropy_alignment",
        description="Both repos fight software entropy in different ways",
        base_confidence=0.65,
        predicate=lambda s, t: (
            s.antagonist in ANTI_ENTROPY_ANTAGONISTS
            and t.antagonist in ANTI_ENTROPY_ANTAGONISTS
            and s.antagonist != t.antagonist
        ),
        hypothesis=lambda s, t: (
            f"Both fight software entropy: source targets {s.antagonist}, "
            f"target targets {t.antagonist}. "
            "Together they form a comprehensive anti-entropy strategy."
        ),
    ),
)
