# src/pipeline/agents/relationship_assessor.py - v1
"""Relationship assessor agent.

Skeptical second opinion on a rule-generated candidate. Only candidates
the oracle confirms as real, actionable opportunities with enough
confidence survive.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Sequence

from plexweave.core.models import RelationshipAssessment, RelationshipCandidate, RepoProfile
from plexweave.pipeline.concurrency import bounded_gather
from plexweave.pipeline.plugin_kit.base_agent import BaseAgent

if TYPE_CHECKING:
    from plexweave.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.6
README_EXCERPT_CHARS = 500

SYSTEM_PROMPT = """You are an expert software architect evaluating potential integration opportunities between repositories.

Your job is to determine if a proposed relationship is a REAL, ACTIONABLE opportunity for integration.

A good integration opportunity:
- Has concrete value (saves time, improves quality, enables new features)
- Is specific enough to act on
- Is not obvious or already done
- Makes sense given what both repos actually do

A bad integration opportunity:
- Is too vague ("both use JavaScript")
- Is already implemented
- Has no clear value
- Misunderstands what the repos do

Be critical. Most candidates should NOT pass. Only approve opportunities that would genuinely help a developer."""


def _listed(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "None"


def _repo_fields(prefix: str, profile: RepoProfile) -> dict[str, str]:
    return {
        f"{prefix}_full_name": profile.full_name,
        f"{prefix}_purpose": profile.purpose,
        f"{prefix}_capabilities": _listed(profile.capabilities),
        f"{prefix}_produces": _listed(profile.produces),
        f"{prefix}_consumes": _listed(profile.consumes),
        f"{prefix}_domains": _listed(profile.domains),
        f"{prefix}_roles": _listed(profile.roles),
        f"{prefix}_readme": profile.readme_excerpt[:README_EXCERPT_CHARS] or "None",
    }


class RelationshipAssessorAgent(BaseAgent):
    """Validates functional candidates through the oracle."""

    @property
    def name(self) -> str:
        return "relationship_assessor"

    def build_prompt(self, candidate: RelationshipCandidate) -> str:
        matched_caps = candidate.matched_capabilities
        return self._load_prompt().format(
            **_repo_fields("source", candidate.source),
            **_repo_fields("target", candidate.target),
            relationship_type=candidate.relationship_type,
            hypothesis=candidate.hypothesis,
            matched_capabilities="; ".join(matched_caps) if matched_caps else "None specific",
            matched_artifacts=_listed(candidate.matched_artifacts),
        )

    async def assess(
        self, candidate: RelationshipCandidate, llm: BaseLLMClient,
    ) -> RelationshipAssessment | None:
        assessment = await self.oracle(llm).ask(
            self.build_prompt(candidate), RelationshipAssessment, system=SYSTEM_PROMPT,
        )
        if assessment is None:
            logger.warning(
                "Assessment failed for %s -> %s (%s)",
                candidate.source.full_name, candidate.target.full_name, candidate.rule_name,
            )
        return assessment

    async def assess_all(
        self,
        candidates: Sequence[RelationshipCandidate],
        llm: BaseLLMClient,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        concurrency: int = 1,
        cancel_event: asyncio.Event | None = None,
    ) -> list[tuple[RelationshipCandidate, RelationshipAssessment]]:
        """Assess candidates and keep the confirmed ones, in candidate order."""

        async def run(candidate: RelationshipCandidate) -> RelationshipAssessment | None:
            return await self.assess(candidate, llm)

        assessments = await bounded_gather(candidates, run, concurrency, cancel_event)
        validated: list[tuple[RelationshipCandidate, RelationshipAssessment]] = []
        for candidate, assessment in zip(candidates, assessments):
            if assessment is None:
                continue
            if assessment.is_valid_opportunity and assessment.confidence >= min_confidence:
                validated.append((candidate, assessment))
            else:
                logger.debug(
                    "Rejected %s -> %s: %s",
                    candidate.source.full_name, candidate.target.full_name, assessment.reasoning,
                )
        return validated
