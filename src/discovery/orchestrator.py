# src/discovery/orchestrator.py - v1
"""Profile-mode discovery orchestrator.

Drives one discovery run over a plexus:
  1. Profiling: functional profile per repository (oracle)
  2. Matching: ontology rules over every ordered pair, dedup, top N
  3. Assessment: oracle validation of the top candidates
  4. Persistence: functional weaves, skipping live duplicates
  5. Philosophy (optional): stance profiles, schizosophy matches, weaves

The run record moves RUNNING -> COMPLETED | FAILED exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from plexweave.config.settings import Settings
from plexweave.core.models import PhilosophicalMatch, RelationshipAssessment, RelationshipCandidate
from plexweave.discovery.errors import DiscoveryCancelled, RunInitializationError
from plexweave.discovery.models import DiscoveryOptions, DiscoveryResult
from plexweave.llm.oracle import OracleOptions, retry_policy
from plexweave.logging.context import bind_run_id, enter_run, leave_run, set_stage
from plexweave.matching.matcher import find_candidates, top_candidates
from plexweave.matching.philosophical_matcher import (
    find_philosophical_matches,
    render_philosophical_integration,
)
from plexweave.pipeline.agents.philosophical_profiler import PhilosophicalProfilerAgent
from plexweave.pipeline.agents.relationship_assessor import RelationshipAssessorAgent
from plexweave.pipeline.agents.repo_profiler import RepoProfilerAgent
from plexweave.pipeline.llm_factory import LLMFactory
from plexweave.storage.base_weave_store import DuplicateWeaveError
from plexweave.storage.models import Weave
from plexweave.storage.run_manager import RunManager

if TYPE_CHECKING:
    from plexweave.core.models import RepoProfile, RepoRecord
    from plexweave.llm.base_client import BaseLLMClient
    from plexweave.sources.base_source import BaseRepositorySource
    from plexweave.storage.base_weave_store import BaseWeaveStore

logger = logging.getLogger(__name__)


def oracle_options_from(settings: Settings, manager: RunManager) -> OracleOptions:
    """Oracle options for one run; call statistics accumulate on the run record."""
    return OracleOptions(
        timeout_s=settings.oracle_timeout_s,
        retry_configs=retry_policy(settings.oracle_retry_enabled),
        stats=manager.run.oracle_stats,
        max_tokens=settings.llm_max_tokens_per_agent,
        temperature=settings.llm_default_temperature,
    )


async def persist_weave(manager: RunManager, store: BaseWeaveStore, weave: Weave) -> bool:
    """Insert ``weave`` unless a live one exists for its pair, type and plexus.

    Returns True when the weave was written. Duplicates bump
    ``weaves_skipped``; inserts bump ``weaves_saved``.
    """
    existing = await store.find_existing_weave(
        weave.plexus_id, weave.source_repo_id, weave.target_repo_id, weave.type,
    )
    if existing is None:
        try:
            await store.create_weave(weave)
        except DuplicateWeaveError:
            existing = weave
        else:
            await manager.increment("weaves_saved")
            logger.info(
                "Saved %s weave %s <-> %s (%.2f)",
                weave.type, weave.source_repo_id, weave.target_repo_id, weave.score,
            )
            return True

    await manager.increment("weaves_skipped")
    logger.debug(
        "%s weave already exists for %s <-> %s, skipping",
        weave.type, weave.source_repo_id, weave.target_repo_id,
    )
    return False


class DiscoveryOrchestrator:
    """Runs profile-mode discovery over one plexus at a time.

    Args:
        source: Where repositories and their content come from.
        store: Weave and run persistence.
        settings: Application settings (oracle plumbing, defaults).
        llm: Optional client handed to every agent instead of routed clients.
    """

    def __init__(
        self,
        source: BaseRepositorySource,
        store: BaseWeaveStore,
        settings: Settings | None = None,
        llm: BaseLLMClient | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._settings = settings or Settings()
        self._llm_factory = LLMFactory(self._settings, fixed=llm)

    async def run(
        self,
        plexus_id: str,
        options: DiscoveryOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DiscoveryResult:
        """Execute one discovery run.

        Raises:
            RunInitializationError: Repositories could not be listed or the
                run record could not be created. No run record is left behind
                in the first case.
            DiscoveryCancelled: ``cancel_event`` was set between oracle calls.
        """
        options = options or DiscoveryOptions.from_settings(self._settings)
        context_token = enter_run(plexus_id, "profile")
        try:
            try:
                repos = await self._source.list_repos(plexus_id)
            except (LookupError, OSError) as exc:
                raise RunInitializationError(
                    f"Could not list repositories of plexus {plexus_id!r}: {exc}"
                ) from exc

            try:
                manager = await RunManager.start(
                    self._store, plexus_id, "profile", options.model_dump(),
                )
            except Exception as exc:
                raise RunInitializationError(f"Could not create discovery run: {exc}") from exc

            bind_run_id(manager.run_id)
            try:
                return await self._execute(manager, repos, options, cancel_event)
            except DiscoveryCancelled as exc:
                if not manager.run.is_terminal:
                    await manager.log("warning", "Discovery cancelled")
                    await manager.fail(str(exc))
                raise
            except Exception as exc:
                logger.exception("Discovery run %s failed", manager.run_id)
                if not manager.run.is_terminal:
                    await manager.log("error", f"Discovery failed: {exc}")
                    await manager.fail(str(exc))
                raise
        finally:
            leave_run(context_token)

    async def _execute(
        self,
        manager: RunManager,
        repos: list[RepoRecord],
        options: DiscoveryOptions,
        cancel_event: asyncio.Event | None,
    ) -> DiscoveryResult:
        oracle_options = oracle_options_from(self._settings, manager)
        profiler = RepoProfilerAgent(oracle_options)
        assessor = RelationshipAssessorAgent(oracle_options)
        result = DiscoveryResult(run=manager.run, dry_run=options.dry_run)

        await manager.log(
            "info", f"Starting discovery over {len(repos)} repositories",
            {"repos": len(repos), "dry_run": options.dry_run},
        )

        # Stage 1: profiling
        set_stage("profiling")
        profiles = await profiler.profile_all(
            repos, self._source, self._llm_factory(profiler.name),
            options.max_concurrency, cancel_event,
        )
        result.profiles = profiles
        await manager.update(profiles_created=len(profiles))
        profiled = {p.repo_id for p in profiles}
        dropped = [r.repo_id for r in repos if r.repo_id not in profiled]
        if dropped:
            await manager.log(
                "warning", f"{len(dropped)} repositories could not be profiled",
                {"repos": dropped},
            )
        if options.verbose:
            for profile in profiles:
                await manager.log(
                    "debug", f"Profiled {profile.full_name}: {profile.purpose}",
                    {
                        "capabilities": list(profile.capabilities),
                        "roles": list(profile.roles),
                        "confidence": profile.confidence,
                    },
                )

        if len(profiles) < 2:
            await manager.log(
                "info", f"Only {len(profiles)} profile(s), nothing to match",
            )
            result.run = await manager.complete()
            return result

        # Stage 2: matching
        set_stage("matching")
        candidates = find_candidates(profiles)
        pair_count = len(profiles) * (len(profiles) - 1) // 2
        await manager.update(
            repo_pairs_total=pair_count,
            repo_pairs_checked=pair_count,
            candidates_found=len(candidates),
        )
        top = top_candidates(candidates, options.max_candidates)
        await manager.log(
            "info", f"{len(candidates)} candidates, assessing top {len(top)}",
        )

        # Stage 3: assessment
        set_stage("assessment")
        validated = await assessor.assess_all(
            top, self._llm_factory(assessor.name), options.min_confidence,
            options.max_concurrency, cancel_event,
        )
        await manager.log("info", f"{len(validated)} of {len(top)} candidates validated")

        # Stage 4: functional weaves
        set_stage("persistence")
        for candidate, assessment in validated:
            weave = self._functional_weave(manager, candidate, assessment)
            if options.dry_run:
                logger.info("[dry run] Would create weave: %s", weave.title)
                result.weaves.append(weave)
            elif await persist_weave(manager, self._store, weave):
                result.weaves.append(weave)

        # Stage 5: philosophy
        if options.philosophy_enabled:
            await self._run_philosophy(
                manager, profiles, options, oracle_options, result, cancel_event,
            )

        set_stage(None)
        await manager.log(
            "info", "Discovery complete", manager.run.counters(),
        )
        result.run = await manager.complete()
        return result

    async def _run_philosophy(
        self,
        manager: RunManager,
        profiles: list[RepoProfile],
        options: DiscoveryOptions,
        oracle_options: OracleOptions,
        result: DiscoveryResult,
        cancel_event: asyncio.Event | None,
    ) -> None:
        set_stage("philosophy")
        agent = PhilosophicalProfilerAgent(oracle_options)
        stances = await agent.extract_all(
            profiles, self._llm_factory(agent.name), options.max_concurrency, cancel_event,
        )
        result.philosophical_profiles = stances
        await manager.update(philosophical_profiles_created=len(stances))

        matches = find_philosophical_matches(stances)
        await manager.update(philosophical_matches_found=len(matches))
        names = {p.repo_id: p.full_name for p in profiles}

        for match in matches:
            if match.confidence < options.philosophy_min_confidence:
                continue
            weave = self._philosophical_weave(manager, match, names)
            if options.dry_run:
                logger.info("[dry run] Would create weave: %s", weave.title)
                result.weaves.append(weave)
            elif await persist_weave(manager, self._store, weave):
                result.weaves.append(weave)

    @staticmethod
    def _functional_weave(
        manager: RunManager,
        candidate: RelationshipCandidate,
        assessment: RelationshipAssessment,
    ) -> Weave:
        source, target = candidate.source, candidate.target
        return Weave(
            plexus_id=manager.run.plexus_id,
            source_repo_id=source.repo_id,
            target_repo_id=target.repo_id,
            discovery_run_id=manager.run_id,
            type="functional",
            title=assessment.title,
            description=assessment.description,
            score=assessment.confidence,
            metadata={
                "rule_name": candidate.rule_name,
                "relationship_type": candidate.relationship_type,
                "hypothesis": candidate.hypothesis,
                "initial_confidence": candidate.confidence,
                "matched_capabilities": candidate.matched_capabilities,
                "matched_artifacts": candidate.matched_artifacts,
                "specific_integration": assessment.specific_integration,
                "value_proposition": assessment.value_proposition,
                "reasoning": assessment.reasoning,
                "source_profile": {
                    "purpose": source.purpose,
                    "capabilities": list(source.capabilities),
                    "roles": list(source.roles),
                },
                "target_profile": {
                    "purpose": target.purpose,
                    "capabilities": list(target.capabilities),
                    "roles": list(target.roles),
                },
            },
        )

    @staticmethod
    def _philosophical_weave(
        manager: RunManager, match: PhilosophicalMatch, names: dict[str, str],
    ) -> Weave:
        source_name = names.get(match.source.repo_id, match.source.repo_id)
        target_name = names.get(match.target.repo_id, match.target.repo_id)
        label = match.match_type.replace("_", " ").capitalize()
        return Weave(
            plexus_id=manager.run.plexus_id,
            source_repo_id=match.source.repo_id,
            target_repo_id=match.target.repo_id,
            discovery_run_id=manager.run_id,
            type="philosophical",
            title=f"{label}: {source_name} <-> {target_name}",
            description=render_philosophical_integration(match, source_name, target_name),
            score=match.confidence,
            metadata={
                "match_type": match.match_type,
                "match_description": match.description,
                "integration_hypothesis": match.integration_hypothesis,
                "source_stance": {
                    "antagonist": match.source.antagonist,
                    "epistemology": match.source.epistemology,
                    "abstraction_level": match.source.abstraction_level,
                    "core_virtue": match.source.core_virtue,
                },
                "target_stance": {
                    "antagonist": match.target.antagonist,
                    "epistemology": match.target.epistemology,
                    "abstraction_level": match.target.abstraction_level,
                    "core_virtue": match.target.core_virtue,
                },
            },
        )
