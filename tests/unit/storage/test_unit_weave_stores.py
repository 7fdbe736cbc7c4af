# tests/unit/storage/test_unit_weave_stores.py - v1
"""Tests for the weave store backends (sqlite and json share one contract)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from plexweave.storage.base_weave_store import DuplicateWeaveError
from plexweave.storage.json_store import JsonWeaveStore
from plexweave.storage.models import DiscoveryRun, Weave
from plexweave.storage.sqlite_store import SqliteWeaveStore


@pytest.fixture(params=["sqlite", "json"])
def store(request, tmp_path):
    if request.param == "sqlite":
        backend = SqliteWeaveStore(tmp_path / "weaves.db")
    else:
        backend = JsonWeaveStore(tmp_path / "weaves")
    yield backend
    backend.close()


def _weave(source="p/a", target="p/b", weave_type="functional", score=0.8, plexus="p", **kw):
    return Weave(
        plexus_id=plexus, source_repo_id=source, target_repo_id=target,
        discovery_run_id="run-1", type=weave_type, title=f"{source} {target}",
        description="d", score=score, **kw,
    )


class TestRuns:
    @pytest.mark.asyncio
    async def test_create_save_get(self, store):
        run = DiscoveryRun(plexus_id="p")
        await store.create_run(run)
        run.weaves_saved = 3
        run.oracle_stats.calls = 7
        await store.save_run(run)
        loaded = await store.get_run(run.id)
        assert loaded.weaves_saved == 3
        assert loaded.oracle_stats.calls == 7
        assert loaded.status == "RUNNING"

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get_run("nope") is None

    @pytest.mark.asyncio
    async def test_list_runs_newest_first(self, store):
        now = datetime.now(timezone.utc)
        old = DiscoveryRun(plexus_id="p", started_at=now - timedelta(hours=1))
        new = DiscoveryRun(plexus_id="p", started_at=now)
        other = DiscoveryRun(plexus_id="q", started_at=now)
        for run in (old, new, other):
            await store.create_run(run)
        assert [r.id for r in await store.list_runs("p")] == [new.id, old.id]
        assert len(await store.list_runs()) == 3
        assert len(await store.list_runs(limit=1)) == 1


class TestWeaves:
    @pytest.mark.asyncio
    async def test_find_existing_either_direction(self, store):
        weave = await store.create_weave(_weave("p/a", "p/b"))
        found = await store.find_existing_weave("p", "p/b", "p/a", "functional")
        assert found is not None
        assert found.id == weave.id

    @pytest.mark.asyncio
    async def test_find_existing_scoped(self, store):
        await store.create_weave(_weave("p/a", "p/b"))
        assert await store.find_existing_weave("p", "p/a", "p/b", "philosophical") is None
        assert await store.find_existing_weave("q", "p/a", "p/b", "functional") is None
        assert await store.find_existing_weave("p", "p/a", "p/c", "functional") is None

    @pytest.mark.asyncio
    async def test_list_sorted_and_filtered(self, store):
        await store.create_weave(_weave("p/a", "p/b", score=0.6))
        await store.create_weave(_weave("p/a", "p/c", score=0.9))
        await store.create_weave(_weave("p/b", "p/c", "philosophical", score=0.7))
        await store.create_weave(_weave("q/a", "q/b", plexus="q"))
        weaves = await store.list_weaves("p")
        assert [w.score for w in weaves] == [0.9, 0.7, 0.6]
        assert len(await store.list_weaves("p", "philosophical")) == 1
        assert await store.count_weaves("p") == 3
        assert await store.count_weaves("p", "functional") == 2

    @pytest.mark.asyncio
    async def test_metadata_round_trip(self, store):
        weave = _weave(metadata={"matched_artifacts": ["x → y"], "nested": {"n": 1}})
        await store.create_weave(weave)
        (loaded,) = await store.list_weaves("p")
        assert loaded.metadata == weave.metadata
        assert loaded.created_at == weave.created_at

    @pytest.mark.asyncio
    async def test_dismiss_frees_the_pair(self, store):
        weave = await store.create_weave(_weave())
        assert await store.dismiss_weave(weave.id) is True
        assert await store.find_existing_weave("p", "p/a", "p/b", "functional") is None
        assert await store.count_weaves("p") == 0
        assert await store.count_weaves("p", include_dismissed=True) == 1
        (dismissed,) = await store.list_weaves("p", include_dismissed=True)
        assert dismissed.dismissed is True

    @pytest.mark.asyncio
    async def test_dismiss_missing(self, store):
        assert await store.dismiss_weave("nope") is False


class TestSqliteUniqueness:
    @pytest.mark.asyncio
    async def test_unique_index_rejects_live_duplicate(self, tmp_path):
        store = SqliteWeaveStore(tmp_path / "u.db", enforce_unique=True)
        try:
            first = await store.create_weave(_weave("p/a", "p/b"))
            with pytest.raises(DuplicateWeaveError):
                await store.create_weave(_weave("p/b", "p/a"))
            await store.create_weave(_weave("p/a", "p/b", "philosophical"))

            await store.dismiss_weave(first.id)
            await store.create_weave(_weave("p/a", "p/b"))
            assert await store.count_weaves("p", include_dismissed=True) == 3
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_without_index_duplicates_allowed(self, tmp_path):
        store = SqliteWeaveStore(tmp_path / "n.db")
        try:
            await store.create_weave(_weave("p/a", "p/b"))
            await store.create_weave(_weave("p/b", "p/a"))
            assert await store.count_weaves("p") == 2
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_in_memory_database(self):
        store = SqliteWeaveStore(":memory:")
        try:
            await store.create_weave(_weave())
            assert await store.count_weaves("p") == 1
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "p.db"
        first = SqliteWeaveStore(path)
        await first.create_weave(_weave())
        first.close()
        second = SqliteWeaveStore(path)
        try:
            assert await second.count_weaves("p") == 1
        finally:
            second.close()


class TestJsonStore:
    @pytest.mark.asyncio
    async def test_skips_corrupt_files(self, tmp_path):
        store = JsonWeaveStore(tmp_path / "j")
        await store.create_weave(_weave())
        (tmp_path / "j" / "weaves" / "broken.json").write_text("{", encoding="utf-8")
        assert await store.count_weaves("p") == 1
