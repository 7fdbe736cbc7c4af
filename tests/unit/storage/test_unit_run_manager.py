# tests/unit/storage/test_unit_run_manager.py - v1
"""Tests for storage/run_manager.py."""

from __future__ import annotations

import pytest

from plexweave.discovery.errors import RunFinalizedError
from plexweave.storage.models import RUN_COUNTERS, generate_run_id
from plexweave.storage.run_manager import RunManager
from plexweave.storage.sqlite_store import SqliteWeaveStore


@pytest.fixture
def store(tmp_path):
    backend = SqliteWeaveStore(tmp_path / "runs.db")
    yield backend
    backend.close()


class TestRunManager:
    @pytest.mark.asyncio
    async def test_start_persists_running(self, store):
        manager = await RunManager.start(store, "p", "similarity", {"dry_run": True})
        stored = await store.get_run(manager.run_id)
        assert stored.status == "RUNNING"
        assert stored.mode == "similarity"
        assert stored.config == {"dry_run": True}
        assert all(v == 0 for v in stored.counters().values())

    @pytest.mark.asyncio
    async def test_counters_written_through(self, store):
        manager = await RunManager.start(store, "p")
        await manager.update(profiles_created=4, repo_pairs_total=6)
        await manager.increment("weaves_saved")
        await manager.increment("weaves_saved", by=2)
        stored = await store.get_run(manager.run_id)
        assert stored.profiles_created == 4
        assert stored.repo_pairs_total == 6
        assert stored.weaves_saved == 3

    @pytest.mark.asyncio
    async def test_unknown_counter(self, store):
        manager = await RunManager.start(store, "p")
        with pytest.raises(ValueError, match="Unknown run counter"):
            await manager.increment("status")
        with pytest.raises(ValueError):
            await manager.update(error=1)

    @pytest.mark.asyncio
    async def test_log_appends(self, store):
        manager = await RunManager.start(store, "p")
        await manager.log("info", "Starting", {"repos": 3})
        await manager.log("warning", "Careful")
        stored = await store.get_run(manager.run_id)
        assert [(e.level, e.message) for e in stored.logs] == [
            ("info", "Starting"), ("warning", "Careful"),
        ]
        assert stored.logs[0].data == {"repos": 3}

    @pytest.mark.asyncio
    async def test_complete_once(self, store):
        manager = await RunManager.start(store, "p")
        run = await manager.complete()
        assert run.status == "COMPLETED"
        assert run.completed_at is not None
        with pytest.raises(RunFinalizedError):
            await manager.fail("late")
        with pytest.raises(RunFinalizedError):
            await manager.complete()
        assert (await store.get_run(manager.run_id)).status == "COMPLETED"

    @pytest.mark.asyncio
    async def test_fail_records_error(self, store):
        manager = await RunManager.start(store, "p")
        await manager.fail("oracle unreachable")
        stored = await store.get_run(manager.run_id)
        assert stored.status == "FAILED"
        assert stored.error == "oracle unreachable"
        assert stored.is_terminal

    @pytest.mark.asyncio
    async def test_finalize_rejects_running(self, store):
        manager = await RunManager.start(store, "p")
        with pytest.raises(ValueError):
            await manager.finalize("RUNNING")


class TestModels:
    def test_run_id_format(self):
        run_id = generate_run_id()
        date, time, suffix = run_id.split("_")
        assert len(date) == 8 and len(time) == 6 and len(suffix) == 6

    def test_counter_names(self):
        assert len(RUN_COUNTERS) == 8
