# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted LLM client, a deterministic embedder, profile factories
and on-disk plexus layouts. No external services: every oracle call is
answered locally.
"""

from __future__ import annotations

import hashlib
import json
import math
import re
from pathlib import Path
from typing import Any, Callable

import pytest
from pydantic import BaseModel

from plexweave.config.settings import Settings
from plexweave.core.models import PhilosophicalProfile, RepoProfile
from plexweave.llm.base_client import BaseLLMClient
from plexweave.llm.models import Message, ProviderReply
from plexweave.rag.embeddings.base_embedder import BaseEmbedder

Answer = dict[str, Any] | str | Exception
Handler = Answer | Callable[[str], Answer]


# =====================================================================
#  MOCK LLM CLIENT
# =====================================================================


class ScriptedLLMClient(BaseLLMClient):
    """Answers each call according to the requested response schema.

    ``handlers`` maps a schema class name to a fixed answer or to a
    callable receiving the user prompt. Answers may be dicts (sent as
    JSON), raw strings, or exceptions (raised as transport errors).
    """

    def __init__(
        self, handlers: dict[str, Handler] | None = None, model: str = "mock-model",
    ) -> None:
        self._model = model
        self.handlers: dict[str, Handler] = dict(handlers or {})
        self.calls: list[dict[str, Any]] = []

    async def _send(
        self,
        messages: list[Message],
        system: str | None,
        max_tokens: int,
        temperature: float,
        response_format: type[BaseModel] | None,
    ) -> ProviderReply:
        schema = response_format.__name__ if response_format else ""
        prompt = messages[-1].content
        self.calls.append({"schema": schema, "prompt": prompt, "system": system})

        if schema not in self.handlers:
            raise RuntimeError(f"no scripted answer for {schema}")
        handler = self.handlers[schema]
        answer = handler(prompt) if callable(handler) else handler
        if isinstance(answer, Exception):
            raise answer

        content = answer if isinstance(answer, str) else json.dumps(answer)
        return ProviderReply(content=content, input_tokens=50, output_tokens=len(content) // 4)

    def calls_for(self, schema: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["schema"] == schema]

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return self._model


def repo_in_prompt(prompt: str, marker: str) -> str:
    """Extract the repository full name following ``marker`` in a prompt."""
    match = re.search(re.escape(marker) + r"\s*(\S+)", prompt)
    if match is None:
        raise AssertionError(f"{marker!r} not found in prompt")
    return match.group(1)


# =====================================================================
#  MOCK EMBEDDER
# =====================================================================


class HashEmbedder(BaseEmbedder):
    """Deterministic bag-of-words embedder.

    Texts sharing most of their words get close vectors, which is enough
    to exercise similarity thresholds without a model.
    """

    def __init__(self, dimensions: int = 64) -> None:
        self._dims = dimensions
        self.call_count = 0

    def _text_to_vec(self, text: str) -> list[float]:
        vec = [0.0] * self._dims
        for word in re.findall(r"\w+", text.lower()):
            bucket = int(hashlib.sha256(word.encode()).hexdigest()[:8], 16) % self._dims
            vec[bucket] += 1.0
        norm = math.sqrt(sum(x * x for x in vec)) or 1.0
        return [x / norm for x in vec]

    async def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.call_count += len(texts)
        return [self._text_to_vec(t) for t in texts]

    @property
    def dimensions(self) -> int:
        return self._dims

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "hash-embedder"


# =====================================================================
#  FIXTURES: Sample data
# =====================================================================


@pytest.fixture
def make_profile() -> Callable[..., RepoProfile]:
    """Factory for RepoProfile with neutral defaults."""

    def _make(repo_id: str, **overrides: Any) -> RepoProfile:
        data: dict[str, Any] = {
            "repo_id": repo_id,
            "name": repo_id.split("/")[-1],
            "full_name": repo_id,
            "purpose": f"{repo_id} does things",
            "confidence": 0.8,
        }
        data.update(overrides)
        return RepoProfile(**data)

    return _make


@pytest.fixture
def make_stance() -> Callable[..., PhilosophicalProfile]:
    """Factory for PhilosophicalProfile with neutral defaults."""

    def _make(repo_id: str, **overrides: Any) -> PhilosophicalProfile:
        data: dict[str, Any] = {
            "repo_id": repo_id,
            "epistemology": "pragmatic",
            "antagonist": "ambiguity",
            "cognitive_transform": "generates",
            "temporality": "documents",
            "abstraction_level": "data",
            "philosophy_statement": f"{repo_id} believes in things",
            "core_virtue": "clarity",
            "confidence": 0.8,
        }
        data.update(overrides)
        return PhilosophicalProfile(**data)

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from any .env file."""
    return Settings(
        _env_file=None,
        store_path=tmp_path / "weaves.db",
        repos_root=tmp_path / "repos",
        vector_db_type="memory",
    )


def write_repo(
    root: Path,
    plexus_id: str,
    name: str,
    readme: str | None = None,
    description: str | None = None,
    files: dict[str, str] | None = None,
) -> Path:
    """Create ``<root>/<plexus_id>/<name>`` with optional README, manifest and files."""
    repo_dir = root / plexus_id / name
    repo_dir.mkdir(parents=True, exist_ok=True)
    if readme is not None:
        (repo_dir / "README.md").write_text(readme, encoding="utf-8")
    if description is not None:
        manifest = {"name": name, "description": description, "keywords": [name]}
        (repo_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    for rel_path, content in (files or {}).items():
        path = repo_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return repo_dir


@pytest.fixture
def repos_root(tmp_path: Path) -> Path:
    root = tmp_path / "repos"
    root.mkdir()
    return root
