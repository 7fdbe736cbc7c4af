# src/llm/config.py - v1
"""Per-component LLM routing with cascade resolution.

Resolution order:
  1. Per-component env var (LLM_RELATIONSHIP_ASSESSOR=anthropic:claude-sonnet-4-20250514)
  2. Per-phase env var (LLM_PHASE_PROFILING=openai:gpt-4o-mini)
  3. Default provider + model (LLM_DEFAULT_PROVIDER + LLM_DEFAULT_MODEL)
  4. Hardcoded fallback (openai:gpt-4o-mini)

Model names may themselves contain colons (``ollama:qwen2.5:14b``); only
the first colon separates the provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal

from plexweave.config.agents import COMPONENT_PHASES
from plexweave.config.settings import Settings

FALLBACK_PROVIDER = "openai"
FALLBACK_MODEL = "gpt-4o-mini"

AssignmentSource = Literal["component", "phase", "default", "fallback"]


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved provider and model for one component."""

    provider: str
    model: str
    source: AssignmentSource

    @property
    def key(self) -> str:
        return f"{self.provider}:{self.model}"


def parse_assignment(value: str) -> tuple[str, str] | None:
    """Split ``provider:model``; None when empty or without a colon."""
    provider, sep, model = (value or "").partition(":")
    if not sep or not provider.strip() or not model.strip():
        return None
    return provider.strip(), model.strip()


def _overrides(component: str, settings: Settings) -> Iterator[tuple[AssignmentSource, str]]:
    yield "component", getattr(settings, f"llm_{component}", "")
    phase = COMPONENT_PHASES.get(component)
    if phase is not None:
        yield "phase", getattr(settings, f"llm_phase_{phase}", "")


def resolve_llm(component: str, settings: Settings) -> LLMAssignment:
    """Resolve the LLM assignment for ``component`` (e.g. ``repo_profiler``)."""
    for source, value in _overrides(component, settings):
        parsed = parse_assignment(value)
        if parsed is not None:
            return LLMAssignment(provider=parsed[0], model=parsed[1], source=source)

    if settings.llm_default_provider and settings.llm_default_model:
        return LLMAssignment(
            provider=settings.llm_default_provider,
            model=settings.llm_default_model,
            source="default",
        )
    return LLMAssignment(provider=FALLBACK_PROVIDER, model=FALLBACK_MODEL, source="fallback")


def resolve_all(settings: Settings) -> dict[str, LLMAssignment]:
    """Assignments for every oracle-backed component, by component name."""
    return {component: resolve_llm(component, settings) for component in sorted(COMPONENT_PHASES)}
