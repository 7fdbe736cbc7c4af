# src/main.py - v1
"""CLI entry point: discover, index, runs, run, weaves, dismiss commands.

Usage:
    plexweave discover <plexus_id> [--mode profile|similarity] [options]
    plexweave index <plexus_id>
    plexweave runs [--plexus <plexus_id>]
    plexweave run <run_id>
    plexweave weaves <plexus_id> [--type <type>] [--all]
    plexweave dismiss <weave_id>
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path

from pydantic import ValidationError

from plexweave.config.settings import ConfigurationError, Settings
from plexweave.version import __version__

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 120


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = Settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="plexweave",
        description=f"plexweave v{__version__} - relationship discovery across repositories",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- discover ---
    p_discover = subparsers.add_parser("discover", help="Run a discovery pass over a plexus")
    p_discover.add_argument("plexus_id", help="Plexus (directory name under the repos root)")
    p_discover.add_argument(
        "--root", type=Path, default=None,
        help="Repositories root (default: REPOS_ROOT)",
    )
    p_discover.add_argument(
        "--mode", choices=("profile", "similarity"), default="profile",
        help="Discovery mode (default: profile)",
    )
    p_discover.add_argument("--min-confidence", type=float, default=None)
    p_discover.add_argument("--max-candidates", type=int, default=None)
    p_discover.add_argument(
        "--no-philosophy", action="store_true",
        help="Skip the philosophical stage",
    )
    p_discover.add_argument("--philosophy-min-confidence", type=float, default=None)
    p_discover.add_argument("--concurrency", type=int, default=None, help="Parallel oracle calls")
    p_discover.add_argument("--dry-run", action="store_true", help="Compute but persist no weaves")
    p_discover.add_argument(
        "--reindex", action="store_true",
        help="Index fragments before a similarity pass",
    )
    p_discover.set_defaults(func=_cmd_discover)

    # --- index ---
    p_index = subparsers.add_parser("index", help="Index repository fragments for similarity mode")
    p_index.add_argument("plexus_id")
    p_index.add_argument("--root", type=Path, default=None)
    p_index.set_defaults(func=_cmd_index)

    # --- runs ---
    p_runs = subparsers.add_parser("runs", help="List recent discovery runs")
    p_runs.add_argument("--plexus", default=None)
    p_runs.add_argument("--limit", type=int, default=20)
    p_runs.set_defaults(func=_cmd_runs)

    # --- run ---
    p_run = subparsers.add_parser("run", help="Show one discovery run with its log")
    p_run.add_argument("run_id")
    p_run.set_defaults(func=_cmd_run)

    # --- weaves ---
    p_weaves = subparsers.add_parser("weaves", help="List weaves of a plexus")
    p_weaves.add_argument("plexus_id")
    p_weaves.add_argument(
        "--type", dest="weave_type", default=None,
        choices=("functional", "philosophical", "integration_opportunity"),
    )
    p_weaves.add_argument("--all", dest="include_dismissed", action="store_true",
                          help="Include dismissed weaves")
    p_weaves.set_defaults(func=_cmd_weaves)

    # --- dismiss ---
    p_dismiss = subparsers.add_parser("dismiss", help="Dismiss a weave")
    p_dismiss.add_argument("weave_id")
    p_dismiss.set_defaults(func=_cmd_dismiss)

    return parser


async def _cmd_discover(args: argparse.Namespace, settings: Settings) -> int:
    """Execute one discovery run."""
    from plexweave.discovery.models import DiscoveryOptions
    from plexweave.llm.config import resolve_all
    from plexweave.storage.store_factory import create_weave_store

    for component, assignment in resolve_all(settings).items():
        logger.debug("Oracle routing: %s -> %s (%s)", component, assignment.key, assignment.source)

    source = _create_source(args, settings)
    store = create_weave_store(settings)
    options = DiscoveryOptions.from_settings(
        settings,
        min_confidence=args.min_confidence,
        max_candidates=args.max_candidates,
        philosophy_enabled=False if args.no_philosophy else None,
        philosophy_min_confidence=args.philosophy_min_confidence,
        max_concurrency=args.concurrency,
        dry_run=args.dry_run,
        verbose=args.verbose,
    )

    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)

    try:
        if args.mode == "similarity":
            from plexweave.discovery.similarity_finder import SimilarityWeaveFinder
            from plexweave.rag.vector_store.vector_store_factory import create_vector_store

            vector_store = create_vector_store(settings)
            if args.reindex:
                await _index_plexus(args.plexus_id, source, vector_store, settings)
            finder = SimilarityWeaveFinder(source, store, vector_store, settings)
            result = await finder.run(args.plexus_id, options, cancel_event)
        else:
            from plexweave.discovery.orchestrator import DiscoveryOrchestrator

            orchestrator = DiscoveryOrchestrator(source, store, settings)
            result = await orchestrator.run(args.plexus_id, options, cancel_event)
    finally:
        store.close()

    run = result.run
    print("\nDiscovery results:")
    print(f"  Run ID:              {run.id} ({run.status})")
    print(f"  Profiles created:    {run.profiles_created}")
    print(f"  Phil. profiles:      {run.philosophical_profiles_created}")
    print(f"  Candidates found:    {run.candidates_found}")
    print(f"  Phil. matches:       {run.philosophical_matches_found}")
    print(f"  Weaves saved:        {run.weaves_saved}")
    print(f"  Weaves skipped:      {run.weaves_skipped}")
    print(f"  Oracle calls:        {run.oracle_stats.calls} ({run.oracle_stats.failures} failed)")
    if result.dry_run:
        print("  (dry run: nothing was persisted)")

    for profile in result.profiles:
        print(f"\n  {profile.full_name}")
        print(f"    Purpose: {profile.purpose}")
        print(f"    Capabilities: {', '.join(profile.capabilities) or 'none'}")
        print(f"    Roles: {', '.join(profile.roles) or 'none'}")
        print(f"    Confidence: {profile.confidence * 100:.0f}%")

    for weave in result.weaves:
        _print_weave(weave)
    return 0


async def _cmd_index(args: argparse.Namespace, settings: Settings) -> int:
    """Index every repository of a plexus into the vector store."""
    from plexweave.rag.vector_store.vector_store_factory import create_vector_store

    source = _create_source(args, settings)
    vector_store = create_vector_store(settings)
    reports = await _index_plexus(args.plexus_id, source, vector_store, settings)

    print(f"\nIndexed {len(reports)} repositories:")
    for report in reports:
        print(
            f"  {report.repo_id}: {report.files_indexed} files, "
            f"{report.fragments_indexed} fragments, {len(report.errors)} errors"
        )
    return 0 if all(not r.errors for r in reports) else 1


async def _cmd_runs(args: argparse.Namespace, settings: Settings) -> int:
    """List recent discovery runs."""
    from plexweave.storage.store_factory import create_weave_store

    store = create_weave_store(settings)
    try:
        runs = await store.list_runs(args.plexus, args.limit)
    finally:
        store.close()

    if not runs:
        print("No discovery runs found.")
        return 0
    for run in runs:
        print(
            f"{run.id}  {run.plexus_id:<20} {run.mode:<10} {run.status:<9} "
            f"saved={run.weaves_saved} skipped={run.weaves_skipped} "
            f"started={run.started_at:%Y-%m-%d %H:%M:%S}"
        )
    return 0


async def _cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    """Show one discovery run, its counters and its log."""
    from plexweave.storage.store_factory import create_weave_store

    store = create_weave_store(settings)
    try:
        run = await store.get_run(args.run_id)
    finally:
        store.close()

    if run is None:
        logger.error("Run not found: %s", args.run_id)
        return 1

    print(f"Run {run.id} ({run.mode}) on {run.plexus_id}: {run.status}")
    if run.error:
        print(f"  Error: {run.error}")
    for name, value in run.counters().items():
        print(f"  {name:<30} {value}")
    print("\nLog:")
    for entry in run.logs:
        print(f"  {entry.timestamp:%H:%M:%S} [{entry.level.upper():7s}] {entry.message}")
    return 0


async def _cmd_weaves(args: argparse.Namespace, settings: Settings) -> int:
    """List weaves of a plexus."""
    from plexweave.storage.store_factory import create_weave_store

    store = create_weave_store(settings)
    try:
        weaves = await store.list_weaves(args.plexus_id, args.weave_type, args.include_dismissed)
    finally:
        store.close()

    if not weaves:
        print("No weaves found.")
        return 0
    for weave in weaves:
        _print_weave(weave)
    return 0


async def _cmd_dismiss(args: argparse.Namespace, settings: Settings) -> int:
    """Dismiss a weave so a later run may rediscover the pair."""
    from plexweave.storage.store_factory import create_weave_store

    store = create_weave_store(settings)
    try:
        dismissed = await store.dismiss_weave(args.weave_id)
    finally:
        store.close()

    if not dismissed:
        logger.error("Weave not found: %s", args.weave_id)
        return 1
    print(f"Dismissed {args.weave_id}")
    return 0


def _create_source(args: argparse.Namespace, settings: Settings):
    from plexweave.sources.local_source import LocalRepositorySource

    return LocalRepositorySource(
        args.root or settings.repos_root,
        max_file_size_bytes=settings.max_file_size_bytes,
    )


async def _index_plexus(plexus_id, source, vector_store, settings: Settings) -> list:
    from plexweave.rag.embeddings.embedder_factory import create_embedder
    from plexweave.rag.indexer import index_repository

    embedder = create_embedder(settings)
    reports = []
    for repo in await source.list_repos(plexus_id):
        reports.append(
            await index_repository(
                repo, source, embedder, vector_store,
                collection=settings.vector_db_collection,
                chunk_size=settings.chunk_size,
                overlap=settings.chunk_overlap,
            )
        )
    return reports


def _print_weave(weave: object) -> None:
    """Print a one-weave summary."""
    description = weave.description
    if len(description) > _PREVIEW_CHARS:
        description = description[:_PREVIEW_CHARS] + "..."
    print(f"\n  [{weave.score * 100:.0f}%] [{weave.type}] {weave.title}")
    print(f"    {weave.source_repo_id} <-> {weave.target_repo_id}  ({weave.id})")
    print(f"    {description}")


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from plexweave.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
