# tests/unit/test_main.py - v1
"""Tests for the CLI parser and the store-backed commands."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from plexweave import main as cli
from plexweave.storage.models import DiscoveryRun, Weave
from plexweave.storage.sqlite_store import SqliteWeaveStore


class TestBuildParser:
    def test_discover_defaults(self):
        args = cli._build_parser().parse_args(["discover", "acme"])
        assert args.plexus_id == "acme"
        assert args.mode == "profile"
        assert args.min_confidence is None
        assert args.concurrency is None
        assert args.no_philosophy is False
        assert args.dry_run is False
        assert args.func is cli._cmd_discover

    def test_discover_options(self):
        args = cli._build_parser().parse_args([
            "-v", "discover", "acme", "--mode", "similarity", "--root", "/tmp/r",
            "--min-confidence", "0.7", "--max-candidates", "5", "--no-philosophy",
            "--concurrency", "4", "--dry-run", "--reindex",
        ])
        assert args.verbose is True
        assert args.mode == "similarity"
        assert args.root == Path("/tmp/r")
        assert args.min_confidence == 0.7
        assert args.max_candidates == 5
        assert args.no_philosophy is True
        assert args.concurrency == 4
        assert args.reindex is True

    def test_invalid_mode(self):
        with pytest.raises(SystemExit):
            cli._build_parser().parse_args(["discover", "acme", "--mode", "graph"])

    def test_weaves_flags(self):
        args = cli._build_parser().parse_args(["weaves", "acme", "--type", "philosophical", "--all"])
        assert args.weave_type == "philosophical"
        assert args.include_dismissed is True

    def test_runs_defaults(self):
        args = cli._build_parser().parse_args(["runs"])
        assert args.plexus is None
        assert args.limit == 20


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a temporary store and keep global logging untouched."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STORE_PATH", str(tmp_path / "weaves.db"))
    monkeypatch.setenv("REPOS_ROOT", str(tmp_path / "repos"))
    monkeypatch.setattr(cli, "_setup_logging", lambda settings, verbose: None)
    return tmp_path / "weaves.db"


def _seed(db_path: Path) -> Weave:
    async def seed() -> Weave:
        store = SqliteWeaveStore(db_path)
        try:
            await store.create_run(DiscoveryRun(id="run-1", plexus_id="acme", status="COMPLETED"))
            return await store.create_weave(Weave(
                plexus_id="acme", source_repo_id="acme/a", target_repo_id="acme/b",
                discovery_run_id="run-1", type="functional",
                title="a feeds b", description="d", score=0.9,
            ))
        finally:
            store.close()

    return asyncio.run(seed())


class TestCommands:
    def test_no_command(self, cli_env):
        assert cli.main([]) == 1

    def test_runs_and_run(self, cli_env, capsys):
        _seed(cli_env)
        assert cli.main(["runs", "--plexus", "acme"]) == 0
        assert "run-1" in capsys.readouterr().out
        assert cli.main(["run", "run-1"]) == 0
        assert "COMPLETED" in capsys.readouterr().out
        assert cli.main(["run", "missing"]) == 1

    def test_weaves_and_dismiss(self, cli_env, capsys):
        weave = _seed(cli_env)
        assert cli.main(["weaves", "acme"]) == 0
        assert "a feeds b" in capsys.readouterr().out

        assert cli.main(["dismiss", weave.id]) == 0
        assert cli.main(["weaves", "acme"]) == 0
        assert "No weaves found." in capsys.readouterr().out
        assert cli.main(["dismiss", "missing"]) == 1

    def test_invalid_configuration(self, cli_env, monkeypatch):
        monkeypatch.setenv("MIN_CONFIDENCE", "3")
        assert cli.main(["runs"]) == 2

    def test_discover_missing_plexus_fails(self, cli_env):
        assert cli.main(["discover", "nowhere"]) == 1
