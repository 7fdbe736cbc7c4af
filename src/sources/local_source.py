# src/sources/local_source.py - v1
"""Repository source reading plexuses from a directory tree.

Layout: ``<root>/<plexus_id>/<repo_name>/...``. Each immediate subdirectory
of a plexus directory is one repository.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from plexweave.core.models import RepoManifest, RepoRecord, RepoSourceMaterial
from plexweave.sources.base_source import BaseRepositorySource, RepoFile

logger = logging.getLogger(__name__)

README_NAMES = ("README.md", "readme.md", "Readme.md", "README", "readme", "README.rst")
MAX_TOP_LEVEL_DIRS = 20

IGNORED_DIRS = frozenset({
    ".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv",
    "dist", "build", ".next", ".turbo", ".mypy_cache", ".pytest_cache", "coverage",
})

TEXT_EXTENSIONS = frozenset({
    ".py", ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".go", ".rs", ".java",
    ".kt", ".rb", ".php", ".c", ".h", ".cpp", ".hpp", ".cs", ".swift", ".scala",
    ".md", ".rst", ".txt", ".json", ".yaml", ".yml", ".toml", ".sql", ".sh",
    ".css", ".scss", ".html", ".vue", ".svelte",
})


class LocalRepositorySource(BaseRepositorySource):
    """Reads repositories from a local directory tree."""

    def __init__(self, root: str | Path, max_file_size_bytes: int = 50 * 1024) -> None:
        self._root = Path(root).expanduser()
        self._max_file_size_bytes = max_file_size_bytes

    def _plexus_dir(self, plexus_id: str) -> Path:
        return self._root / plexus_id

    def _repo_dir(self, repo: RepoRecord) -> Path:
        return self._plexus_dir(repo.plexus_id) / repo.name

    async def list_repos(self, plexus_id: str) -> list[RepoRecord]:
        plexus_dir = self._plexus_dir(plexus_id)
        if not plexus_dir.is_dir():
            raise LookupError(f"Plexus directory not found: {plexus_dir}")

        repos = [
            RepoRecord(
                repo_id=f"{plexus_id}/{child.name}",
                name=child.name,
                full_name=f"{plexus_id}/{child.name}",
                plexus_id=plexus_id,
            )
            for child in sorted(plexus_dir.iterdir())
            if child.is_dir() and not child.name.startswith(".")
        ]
        logger.debug("Found %d repositories in %s", len(repos), plexus_dir)
        return repos

    async def get_source_material(self, repo: RepoRecord) -> RepoSourceMaterial:
        repo_dir = self._repo_dir(repo)
        return RepoSourceMaterial(
            description=self._read_readme(repo_dir),
            manifest=self._read_manifest(repo_dir),
            top_level_dirs=self._top_level_dirs(repo_dir),
        )

    async def list_files(self, repo: RepoRecord) -> list[RepoFile]:
        repo_dir = self._repo_dir(repo)
        files: list[RepoFile] = []
        for path in sorted(self._walk(repo_dir)):
            if path.suffix.lower() not in TEXT_EXTENSIONS and path.name not in README_NAMES:
                continue
            try:
                if path.stat().st_size > self._max_file_size_bytes:
                    logger.debug("Skipping large file %s", path)
                    continue
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping unreadable file %s: %s", path, exc)
                continue
            if content.strip():
                files.append(RepoFile(path=path.relative_to(repo_dir).as_posix(), content=content))
        return files

    @property
    def provider_name(self) -> str:
        return "local"

    # --- Internal helpers ---

    def _walk(self, directory: Path):
        for child in directory.iterdir():
            if child.is_dir():
                if child.name in IGNORED_DIRS or child.name.startswith("."):
                    continue
                yield from self._walk(child)
            elif child.is_file():
                yield child

    @staticmethod
    def _read_readme(repo_dir: Path) -> str | None:
        for name in README_NAMES:
            path = repo_dir / name
            if path.is_file():
                text = path.read_text(encoding="utf-8", errors="replace")
                return text or None
        return None

    @staticmethod
    def _read_manifest(repo_dir: Path) -> RepoManifest | None:
        package_json = repo_dir / "package.json"
        if package_json.is_file():
            try:
                data: Any = json.loads(package_json.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Unreadable package.json in %s: %s", repo_dir, exc)
            else:
                return _manifest_from(data)

        pyproject = repo_dir / "pyproject.toml"
        if pyproject.is_file():
            try:
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            except (OSError, tomllib.TOMLDecodeError) as exc:
                logger.warning("Unreadable pyproject.toml in %s: %s", repo_dir, exc)
            else:
                return _manifest_from(data.get("project"))
        return None

    @staticmethod
    def _top_level_dirs(repo_dir: Path) -> list[str]:
        dirs = [
            child.name
            for child in sorted(repo_dir.iterdir())
            if child.is_dir()
            and child.name not in IGNORED_DIRS
            and not child.name.startswith(".")
        ]
        return dirs[:MAX_TOP_LEVEL_DIRS]


def _manifest_from(data: Any) -> RepoManifest | None:
    if not isinstance(data, dict):
        return None
    keywords = data.get("keywords") or []
    if isinstance(keywords, str):
        keywords = [keywords]
    elif not isinstance(keywords, list):
        keywords = []
    return RepoManifest(
        name=_text(data.get("name")),
        description=_text(data.get("description")),
        keywords=[k for k in keywords if isinstance(k, str) and k],
    )


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        return value or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None
