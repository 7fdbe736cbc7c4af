# src/config/agents.py - v1
"""Oracle-backed components and the routing phase each belongs to.

Phases group components for LLM routing (LLM_PHASE_<PHASE>) in
llm/config.py.
"""

from __future__ import annotations

COMPONENT_PHASES: dict[str, str] = {
    "repo_profiler": "profiling",
    "philosophical_profiler": "profiling",
    "relationship_assessor": "assessment",
    "integration_assessor": "assessment",
}
