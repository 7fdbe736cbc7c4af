# src/discovery/similarity_finder.py - v1
"""Similarity-mode discovery: integration opportunities from similar code.

For every unordered pair of indexed repositories:
  retrieve similar fragments -> group by file pair -> keep strong file
  pairs -> integration assessment (oracle) -> integration_opportunity weave

Pairs that yield nothing contribute near-miss data, the best of which is
logged to the run for threshold tuning. A failing pair is logged and
skipped; it never fails the run.
"""

from __future__ import annotations

import asyncio
import logging
from itertools import combinations
from typing import TYPE_CHECKING

from plexweave.config.settings import Settings
from plexweave.discovery.errors import DiscoveryCancelled, RunInitializationError
from plexweave.discovery.models import DiscoveryOptions, DiscoveryResult
from plexweave.discovery.orchestrator import oracle_options_from, persist_weave
from plexweave.logging.context import bind_run_id, enter_run, leave_run, set_stage
from plexweave.matching.file_pairs import aggregate_by_file_pairs, select_file_pairs
from plexweave.pipeline.agents.integration_assessor import IntegrationAssessorAgent
from plexweave.pipeline.llm_factory import LLMFactory
from plexweave.rag.retriever.similarity_retriever import SimilarityRetriever
from plexweave.storage.models import Weave
from plexweave.storage.run_manager import RunManager

if TYPE_CHECKING:
    from plexweave.core.models import RepoRecord
    from plexweave.llm.base_client import BaseLLMClient
    from plexweave.rag.models import FragmentMatch
    from plexweave.rag.vector_store.base_vector_store import BaseVectorStore
    from plexweave.sources.base_source import BaseRepositorySource
    from plexweave.storage.base_weave_store import BaseWeaveStore

logger = logging.getLogger(__name__)

NEAR_MISS_SAMPLE = 10
NEAR_MISS_REPORT = 10


class SimilarityWeaveFinder:
    """Runs similarity-mode discovery over one plexus at a time."""

    def __init__(
        self,
        source: BaseRepositorySource,
        store: BaseWeaveStore,
        vector_store: BaseVectorStore,
        settings: Settings | None = None,
        llm: BaseLLMClient | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._settings = settings or Settings()
        self._retriever = SimilarityRetriever(vector_store, self._settings.vector_db_collection)
        self._llm_factory = LLMFactory(self._settings, fixed=llm)

    async def run(
        self,
        plexus_id: str,
        options: DiscoveryOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DiscoveryResult:
        options = options or DiscoveryOptions.from_settings(self._settings)
        context_token = enter_run(plexus_id, "similarity")
        try:
            try:
                repos = await self._source.list_repos(plexus_id)
            except (LookupError, OSError) as exc:
                raise RunInitializationError(
                    f"Could not list repositories of plexus {plexus_id!r}: {exc}"
                ) from exc

            try:
                manager = await RunManager.start(
                    self._store, plexus_id, "similarity", options.model_dump(),
                )
            except Exception as exc:
                raise RunInitializationError(f"Could not create discovery run: {exc}") from exc

            bind_run_id(manager.run_id)
            try:
                return await self._execute(manager, repos, options, cancel_event)
            except DiscoveryCancelled as exc:
                if not manager.run.is_terminal:
                    await manager.log("warning", "Similarity discovery cancelled")
                    await manager.fail(str(exc))
                raise
            except Exception as exc:
                logger.exception("Similarity run %s failed", manager.run_id)
                if not manager.run.is_terminal:
                    await manager.log("error", f"Similarity discovery failed: {exc}")
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
        result = DiscoveryResult(run=manager.run, dry_run=options.dry_run)
        assessor = IntegrationAssessorAgent(oracle_options_from(self._settings, manager))
        llm = self._llm_factory(assessor.name)

        counts = await self._retriever.fragment_counts([r.repo_id for r in repos])
        indexed = [r for r in repos if counts.get(r.repo_id, 0) > 0]
        await manager.log(
            "info", f"{len(indexed)} of {len(repos)} repositories have indexed fragments",
            {"fragment_counts": counts},
        )
        if len(indexed) < 2:
            result.run = await manager.complete()
            return result

        pairs = list(combinations(indexed, 2))
        await manager.update(repo_pairs_total=len(pairs))
        near_misses: list[tuple[RepoRecord, RepoRecord, FragmentMatch]] = []

        set_stage("similarity")
        for source, target in pairs:
            if cancel_event is not None and cancel_event.is_set():
                raise DiscoveryCancelled()
            try:
                weave = await self._check_pair(manager, assessor, llm, source, target, options)
                if weave is None:
                    near_misses.extend(await self._near_misses(source, target))
                else:
                    await manager.increment("candidates_found")
                    if options.dry_run:
                        logger.info("[dry run] Would create weave: %s", weave.title)
                        result.weaves.append(weave)
                    elif await persist_weave(manager, self._store, weave):
                        result.weaves.append(weave)
            except DiscoveryCancelled:
                raise
            except Exception as exc:
                await manager.log(
                    "error", f"Failed to check {source.full_name} <-> {target.full_name}: {exc}",
                )
            await manager.increment("repo_pairs_checked")

        await self._report_near_misses(manager, near_misses)
        set_stage(None)
        result.run = await manager.complete()
        return result

    async def _check_pair(
        self,
        manager: RunManager,
        assessor: IntegrationAssessorAgent,
        llm: BaseLLMClient,
        source: RepoRecord,
        target: RepoRecord,
        options: DiscoveryOptions,
    ) -> Weave | None:
        matches = await self._retriever.find_similar_fragments(
            source.repo_id,
            target.repo_id,
            threshold=options.similarity_threshold,
            max_pairs=options.max_chunk_pairs,
            k=options.similarity_top_k,
        )
        if not matches:
            return None

        file_pairs = select_file_pairs(
            aggregate_by_file_pairs(matches),
            min_matching_chunks=options.min_matching_chunks,
            min_avg_similarity=options.min_file_pair_similarity,
            limit=options.max_file_pairs_to_llm,
        )
        if not file_pairs:
            logger.debug(
                "%d similar fragments between %s and %s, no strong file pair",
                len(matches), source.full_name, target.full_name,
            )
            return None

        assessment = await assessor.assess(source, target, file_pairs, llm)
        if assessment is None:
            return None
        if not assessment.should_weave or assessment.score < options.llm_score_threshold:
            logger.debug(
                "Integration rejected for %s <-> %s (%.2f): %s",
                source.full_name, target.full_name, assessment.score, assessment.reasoning,
            )
            return None

        return Weave(
            plexus_id=manager.run.plexus_id,
            source_repo_id=source.repo_id,
            target_repo_id=target.repo_id,
            discovery_run_id=manager.run_id,
            type="integration_opportunity",
            title=assessment.title or "Integration Opportunity",
            description=assessment.description or "",
            score=assessment.score,
            metadata={
                "file_pairs": [p.summary() for p in file_pairs],
                "reasoning": assessment.reasoning,
            },
        )

    async def _near_misses(
        self, source: RepoRecord, target: RepoRecord,
    ) -> list[tuple[RepoRecord, RepoRecord, FragmentMatch]]:
        try:
            top = await self._retriever.find_top_similar_fragments(
                source.repo_id, target.repo_id, NEAR_MISS_SAMPLE,
            )
        except Exception as exc:
            logger.debug("Near-miss lookup failed for %s <-> %s: %s", source.repo_id, target.repo_id, exc)
            return []
        return [(source, target, m) for m in top]

    async def _report_near_misses(
        self,
        manager: RunManager,
        near_misses: list[tuple[RepoRecord, RepoRecord, FragmentMatch]],
    ) -> None:
        if not near_misses:
            return
        near_misses.sort(key=lambda item: item[2].similarity, reverse=True)
        best = [
            {
                "source_repo": s.full_name,
                "target_repo": t.full_name,
                "source_file": m.source_file,
                "target_file": m.target_file,
                "similarity": f"{m.similarity * 100:.1f}%",
            }
            for s, t, m in near_misses[:NEAR_MISS_REPORT]
        ]
        await manager.log("info", f"Top {len(best)} near misses", {"near_misses": best})
