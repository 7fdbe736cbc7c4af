# src/pipeline/agents/repo_profiler.py - v1
"""Repository profiler agent.

Asks the oracle what a repository DOES (purpose, capabilities, artifacts,
domains, roles) and normalizes the free-form answer onto the closed
ontology. Runs first in the profile-mode discovery pipeline.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Sequence

from pydantic import BaseModel, Field

from plexweave.core.models import RepoProfile, RepoRecord, RepoSourceMaterial
from plexweave.core.ontology import (
    ARTIFACTS,
    CAPABILITIES,
    DOMAINS,
    ROLES,
    normalize_artifacts,
    normalize_capabilities,
    normalize_domains,
    normalize_roles,
)
from plexweave.pipeline.concurrency import bounded_gather
from plexweave.pipeline.plugin_kit.base_agent import BaseAgent

if TYPE_CHECKING:
    from plexweave.llm.base_client import BaseLLMClient
    from plexweave.sources.base_source import BaseRepositorySource

logger = logging.getLogger(__name__)

README_CHARS = 3000
README_EXCERPT_CHARS = 500

SYSTEM_PROMPT = f"""You are an expert software architect analyzing repositories.
Your job is to understand what a repository DOES, not what its code looks like.

Focus on:
1. PURPOSE: What problem does this repository solve? Why does it exist?
2. CAPABILITIES: What can this repository do? What actions does it perform?
3. INPUTS/OUTPUTS: What does it consume? What does it produce?
4. ROLE: Is it a producer (creates things), consumer (uses things), transformer (converts things), analyzer (examines things), or orchestrator (coordinates things)?
5. DOMAIN: What technical domain does it operate in?

IMPORTANT: Use these exact values from our ontology:
- Capabilities: {", ".join(CAPABILITIES)}
- Artifact types: {", ".join(ARTIFACTS)}
- Domains: {", ".join(DOMAINS)}
- Roles: {", ".join(ROLES)}

Be specific and concrete. Avoid vague descriptions.
If the information is limited, make reasonable inferences but lower your confidence score."""


class LenientRepoProfile(BaseModel):
    """Profile as answered by the oracle, before ontology normalization."""

    purpose: str = Field(description="1-2 sentence description of what this repository does and why")
    capabilities: list[str] = Field(default_factory=list)
    produces_artifacts: list[str] = Field(default_factory=list)
    consumes_artifacts: list[str] = Field(default_factory=list)
    domains: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    problems_solved: list[str] = Field(default_factory=list)
    target_users: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence in this analysis (0-1)")


class RepoProfilerAgent(BaseAgent):
    """Derives a RepoProfile per repository."""

    @property
    def name(self) -> str:
        return "repo_profiler"

    def build_prompt(self, repo: RepoRecord, material: RepoSourceMaterial) -> str:
        sections: list[str] = []
        manifest = material.manifest
        if manifest and manifest.description:
            sections.append(f"## Package Description\n{manifest.description}\n")
        if manifest and manifest.keywords:
            sections.append(f"## Package Keywords\n{', '.join(manifest.keywords)}\n")
        if material.description:
            sections.append(f"## README Content\n{material.description[:README_CHARS]}\n")
        if material.top_level_dirs:
            sections.append(
                "## Directory Structure\n"
                f"Top-level directories: {', '.join(material.top_level_dirs)}\n"
            )

        context = "".join(f"{s}\n" for s in sections)
        return self._load_prompt().format(
            full_name=repo.full_name,
            context=context,
            capabilities=", ".join(CAPABILITIES),
            artifacts=", ".join(ARTIFACTS),
            domains=", ".join(DOMAINS),
            roles=", ".join(ROLES),
        )

    async def profile(
        self,
        repo: RepoRecord,
        material: RepoSourceMaterial,
        llm: BaseLLMClient,
    ) -> RepoProfile | None:
        """Profile one repository; ``None`` when the oracle gives no usable answer."""
        if not material.has_description:
            logger.warning(
                "No README or package description for %s, profiling from directory names only",
                repo.full_name,
            )

        prompt = self.build_prompt(repo, material)
        answer = await self.oracle(llm).ask(prompt, LenientRepoProfile, system=SYSTEM_PROMPT)
        if answer is None:
            logger.warning("Profiling failed for %s", repo.full_name)
            return None

        return RepoProfile(
            repo_id=repo.repo_id,
            name=repo.name,
            full_name=repo.full_name,
            purpose=answer.purpose,
            capabilities=normalize_capabilities(answer.capabilities),
            produces=normalize_artifacts(answer.produces_artifacts),
            consumes=normalize_artifacts(answer.consumes_artifacts),
            domains=normalize_domains(answer.domains),
            roles=normalize_roles(answer.roles),
            keywords=answer.keywords,
            problems_solved=answer.problems_solved,
            target_users=answer.target_users,
            readme_excerpt=(material.description or "")[:README_EXCERPT_CHARS],
            package_description=(material.manifest.description or "") if material.manifest else "",
            confidence=answer.confidence,
        )

    async def profile_all(
        self,
        repos: Sequence[RepoRecord],
        source: BaseRepositorySource,
        llm: BaseLLMClient,
        concurrency: int = 1,
        cancel_event: asyncio.Event | None = None,
    ) -> list[RepoProfile]:
        """Profile every repository, dropping failures, in input order.

        A repository whose source material cannot be read is dropped the
        same way as one the oracle fails to profile.
        """

        async def run(repo: RepoRecord) -> RepoProfile | None:
            try:
                material = await source.get_source_material(repo)
            except Exception as exc:
                logger.warning("Could not read %s, dropping it: %s", repo.full_name, exc)
                return None
            return await self.profile(repo, material, llm)

        results = await bounded_gather(repos, run, concurrency, cancel_event)
        return [p for p in results if p is not None]
