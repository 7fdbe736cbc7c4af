# src/pipeline/agents/philosophical_profiler.py - v1
"""Philosophical profiler agent.

Second pass over an existing RepoProfile: what the repository BELIEVES
rather than what it does. Answers are constrained to the philosophical
enumerations by the output schema itself.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Sequence

from pydantic import BaseModel, Field

from plexweave.core.models import PhilosophicalProfile, RepoProfile
from plexweave.core.philosophy import (
    ABSTRACTION_LEVELS,
    ANTAGONISTS,
    COGNITIVE_TRANSFORMS,
    EPISTEMOLOGIES,
    TEMPORALITIES,
    AbstractionLevel,
    Antagonist,
    CognitiveTransform,
    Epistemology,
    Temporality,
)
from plexweave.pipeline.concurrency import bounded_gather
from plexweave.pipeline.plugin_kit.base_agent import BaseAgent

if TYPE_CHECKING:
    from plexweave.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""You are a philosopher of software analyzing the conceptual stance of repositories.

Beyond what a repository DOES, consider what it BELIEVES:

1. **What does it assume about software?** Is software something to be observed, controlled, discovered, or created?

2. **What does it assume about developers?** Do they need guidance, freedom, constraints, or insight?

3. **What gap does it address?** Is there a gap between intention and reality? Between knowing and doing?

4. **What virtue does it embody?** Clarity? Consistency? Simplicity? Transparency?

5. **What enemy does it fight?** Chaos? Complexity? Hidden knowledge? Inconsistency?

CRITICAL: Use ONLY the provided enum values:
- epistemology: {", ".join(EPISTEMOLOGIES)}
- antagonist: {", ".join(ANTAGONISTS)}
- cognitive_transform: {", ".join(COGNITIVE_TRANSFORMS)}
- temporality: {", ".join(TEMPORALITIES)}
- abstraction_level: {", ".join(ABSTRACTION_LEVELS)}

Be specific. Think deeply about the WORLDVIEW embedded in the repository's design.
If information is limited, make reasonable inferences but lower confidence."""


class PhilosophicalExtraction(BaseModel):
    """Stance as answered by the oracle."""

    epistemology: Epistemology = Field(description="How the repository relates to knowledge")
    antagonist: Antagonist = Field(description="What the repository fights against")
    cognitive_transform: CognitiveTransform = Field(
        description="What mental transformation the repository enables"
    )
    temporality: Temporality = Field(description="When the repository operates")
    abstraction_level: AbstractionLevel = Field(description="At what level the repository operates")
    philosophy_statement: str = Field(
        description="One sentence capturing the repository's philosophical stance"
    )
    core_virtue: str = Field(description="The single virtue this repository embodies")
    confidence: float = Field(ge=0.0, le=1.0)


def _listed(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "None"


class PhilosophicalProfilerAgent(BaseAgent):
    """Derives a PhilosophicalProfile from a RepoProfile."""

    @property
    def name(self) -> str:
        return "philosophical_profiler"

    def build_prompt(self, profile: RepoProfile) -> str:
        return self._load_prompt().format(
            full_name=profile.full_name,
            purpose=profile.purpose,
            capabilities=_listed(profile.capabilities),
            produces=_listed(profile.produces),
            consumes=_listed(profile.consumes),
            domains=_listed(profile.domains),
            roles=_listed(profile.roles),
            problems_solved=_listed(profile.problems_solved),
            target_users=_listed(profile.target_users),
            readme_excerpt=profile.readme_excerpt or "None",
            package_description=profile.package_description or "None",
            epistemologies=" | ".join(EPISTEMOLOGIES),
            antagonists=" | ".join(ANTAGONISTS),
            cognitive_transforms=" | ".join(COGNITIVE_TRANSFORMS),
            temporalities=" | ".join(TEMPORALITIES),
            abstraction_levels=" | ".join(ABSTRACTION_LEVELS),
        )

    async def extract(
        self, profile: RepoProfile, llm: BaseLLMClient,
    ) -> PhilosophicalProfile | None:
        answer = await self.oracle(llm).ask(
            self.build_prompt(profile), PhilosophicalExtraction, system=SYSTEM_PROMPT,
        )
        if answer is None:
            logger.warning("Philosophical profiling failed for %s", profile.full_name)
            return None
        return PhilosophicalProfile(repo_id=profile.repo_id, **answer.model_dump())

    async def extract_all(
        self,
        profiles: Sequence[RepoProfile],
        llm: BaseLLMClient,
        concurrency: int = 1,
        cancel_event: asyncio.Event | None = None,
    ) -> list[PhilosophicalProfile]:
        """Extract stances for every profile, dropping failures, in input order."""

        async def run(profile: RepoProfile) -> PhilosophicalProfile | None:
            return await self.extract(profile, llm)

        results = await bounded_gather(profiles, run, concurrency, cancel_event)
        return [p for p in results if p is not None]
