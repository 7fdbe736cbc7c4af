# tests/integration/discovery/test_int_similarity_finder.py - v1
"""Similarity-mode discovery: index a plexus, then weave integration opportunities."""

from __future__ import annotations

import pytest

from plexweave.discovery.errors import RunInitializationError
from plexweave.discovery.models import DiscoveryOptions
from plexweave.discovery.similarity_finder import SimilarityWeaveFinder
from plexweave.rag.indexer import index_repository
from plexweave.rag.vector_store.memory_store import InMemoryVectorStore
from plexweave.sources.local_source import LocalRepositorySource
from plexweave.storage.sqlite_store import SqliteWeaveStore
from tests.conftest import HashEmbedder, ScriptedLLMClient, repo_in_prompt, write_repo

PARSER = "\n".join([
    "def tokenize source text into lexemes with position tracking",
    "def parse expression tree from tokens using precedence climbing",
    "def evaluate constant folding over binary operator nodes",
    "def render diagnostics with caret markers under offending columns",
    "def recover from syntax errors by skipping to statement boundaries",
])

UNRELATED = "\n".join([
    "kitchen recipes garlic onion simmer broth overnight",
    "garden tomatoes basil watering schedule morning sunlight",
    "bicycle chain lubrication gears derailleur adjustment",
    "violin rosin bow horsehair tuning pegs humidity",
    "mountain trail switchbacks summit cairn weather",
])

ACCEPT = {
    "should_weave": True,
    "score": 0.9,
    "title": "Share one expression parser",
    "description": "alpha and beta carry the same parser; extract it",
    "reasoning": "Identical tokenizer and precedence logic",
}


async def _indexed_plexus(repos_root, store):
    write_repo(repos_root, "p", "alpha", files={"src/parser.py": PARSER})
    write_repo(repos_root, "p", "beta", files={"lib/parser.py": PARSER})
    write_repo(repos_root, "p", "gamma", files={"notes.txt": UNRELATED})
    write_repo(repos_root, "p", "empty")
    source = LocalRepositorySource(repos_root)
    embedder = HashEmbedder()
    for repo in await source.list_repos("p"):
        await index_repository(repo, source, embedder, store, chunk_size=64, overlap=0)
    return source


def _options(**overrides):
    values = {
        "similarity_threshold": 0.85,
        "min_matching_chunks": 3,
        "min_file_pair_similarity": 0.83,
        "llm_score_threshold": 0.75,
    }
    values.update(overrides)
    return DiscoveryOptions(**values)


class TestSimilarityDiscovery:
    @pytest.mark.asyncio
    async def test_integration_weave(self, repos_root, settings):
        vectors = InMemoryVectorStore()
        source = await _indexed_plexus(repos_root, vectors)
        store = SqliteWeaveStore(settings.store_path)
        try:
            llm = ScriptedLLMClient({"IntegrationAssessment": ACCEPT})
            finder = SimilarityWeaveFinder(source, store, vectors, settings, llm=llm)
            result = await finder.run("p", _options())

            run = await store.get_run(result.run_id)
            assert run.status == "COMPLETED"
            assert run.mode == "similarity"
            assert run.repo_pairs_total == 3
            assert run.repo_pairs_checked == 3
            assert run.candidates_found == 1
            assert run.weaves_saved == 1

            (call,) = llm.calls_for("IntegrationAssessment")
            assert repo_in_prompt(call["prompt"], "Repository A:") == "p/alpha"

            (weave,) = await store.list_weaves("p", "integration_opportunity")
            assert (weave.source_repo_id, weave.target_repo_id) == ("p/alpha", "p/beta")
            assert weave.title == "Share one expression parser"
            assert weave.score == 0.9
            assert weave.metadata["file_pairs"]
            assert any("near misses" in entry.message for entry in run.logs)
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_rejected_assessment(self, repos_root, settings):
        vectors = InMemoryVectorStore()
        source = await _indexed_plexus(repos_root, vectors)
        store = SqliteWeaveStore(settings.store_path)
        try:
            llm = ScriptedLLMClient({"IntegrationAssessment": {**ACCEPT, "score": 0.5}})
            result = await SimilarityWeaveFinder(source, store, vectors, settings, llm=llm).run(
                "p", _options(),
            )
            assert result.status == "COMPLETED"
            assert result.run.candidates_found == 0
            assert await store.count_weaves("p") == 0
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_pair_errors_do_not_fail_run(self, repos_root, settings):
        vectors = InMemoryVectorStore()
        source = await _indexed_plexus(repos_root, vectors)
        store = SqliteWeaveStore(settings.store_path)
        try:
            finder = SimilarityWeaveFinder(
                source, store, vectors, settings, llm=ScriptedLLMClient({}),
            )

            async def broken(*args, **kwargs):
                raise RuntimeError("index offline")

            finder._retriever.find_similar_fragments = broken
            result = await finder.run("p", _options())
            assert result.status == "COMPLETED"
            assert result.run.repo_pairs_checked == 3
            errors = [e for e in result.run.logs if e.level == "error"]
            assert len(errors) == 3
            assert "index offline" in errors[0].message
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_dry_run(self, repos_root, settings):
        vectors = InMemoryVectorStore()
        source = await _indexed_plexus(repos_root, vectors)
        store = SqliteWeaveStore(settings.store_path)
        try:
            llm = ScriptedLLMClient({"IntegrationAssessment": ACCEPT})
            result = await SimilarityWeaveFinder(source, store, vectors, settings, llm=llm).run(
                "p", _options(dry_run=True),
            )
            assert [w.type for w in result.weaves] == ["integration_opportunity"]
            assert await store.count_weaves("p") == 0
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_unindexed_plexus_completes(self, repos_root, settings):
        write_repo(repos_root, "p", "alpha", readme="hello")
        store = SqliteWeaveStore(settings.store_path)
        try:
            result = await SimilarityWeaveFinder(
                LocalRepositorySource(repos_root), store, InMemoryVectorStore(), settings,
                llm=ScriptedLLMClient({}),
            ).run("p", _options())
            assert result.status == "COMPLETED"
            assert result.run.repo_pairs_total == 0
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_missing_plexus(self, repos_root, settings):
        store = SqliteWeaveStore(settings.store_path)
        try:
            finder = SimilarityWeaveFinder(
                LocalRepositorySource(repos_root), store, InMemoryVectorStore(), settings,
                llm=ScriptedLLMClient({}),
            )
            with pytest.raises(RunInitializationError):
                await finder.run("missing", _options())
            assert await store.list_runs() == []
        finally:
            store.close()
