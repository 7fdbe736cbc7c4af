# src/pipeline/agents/integration_assessor.py - v1
"""Integration assessor agent (similarity mode).

Shows the oracle the strongest file pairs of similar code between two
repositories and asks whether they point at a real integration
opportunity rather than shared libraries or boilerplate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from plexweave.core.models import IntegrationAssessment, RepoRecord
from plexweave.matching.file_pairs import FilePairMatch
from plexweave.pipeline.plugin_kit.base_agent import BaseAgent

if TYPE_CHECKING:
    from plexweave.llm.base_client import BaseLLMClient

SAMPLE_MATCHES = 3
SNIPPET_CHARS = 300
DEFAULT_TITLE = "Integration Opportunity"

SYSTEM_PROMPT = """You are an expert software architect analyzing code relationships between repositories.
Your task is to determine if similar code sections indicate a meaningful INTEGRATION OPPORTUNITY.

An integration opportunity means:
- One repo has a capability that the other could use
- They solve related problems that could share infrastructure
- There's potential for code reuse or a shared module

NOT an integration opportunity:
- Both just use the same common libraries (React, Express, etc.)
- Similar boilerplate or common patterns
- Similar code that serves completely different domains

Be conservative - only return should_weave: true if there's a REAL, ACTIONABLE integration opportunity."""


def _snippet(text: str) -> str:
    return f"{text[:SNIPPET_CHARS]}..."


def format_file_pairs(file_pairs: list[FilePairMatch]) -> str:
    blocks: list[str] = []
    for i, pair in enumerate(file_pairs, 1):
        lines = [
            f"File Pair {i}:",
            f"  Source: {pair.source_file}",
            f"  Target: {pair.target_file}",
            f"  Average Similarity: {pair.avg_similarity * 100:.1f}%",
        ]
        for j, match in enumerate(pair.matches[:SAMPLE_MATCHES], 1):
            lines.append(f"  Match {j} ({match.similarity * 100:.1f}% similar):")
            lines.append(f"    Source: {_snippet(match.source_content)}")
            lines.append(f"    Target: {_snippet(match.target_content)}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


class IntegrationAssessorAgent(BaseAgent):
    """Judges fragment-level evidence between two repositories."""

    @property
    def name(self) -> str:
        return "integration_assessor"

    def build_prompt(
        self, source: RepoRecord, target: RepoRecord, file_pairs: list[FilePairMatch],
    ) -> str:
        return self._load_prompt().format(
            source_full_name=source.full_name,
            target_full_name=target.full_name,
            file_pairs=format_file_pairs(file_pairs),
        )

    async def assess(
        self,
        source: RepoRecord,
        target: RepoRecord,
        file_pairs: list[FilePairMatch],
        llm: BaseLLMClient,
    ) -> IntegrationAssessment | None:
        assessment = await self.oracle(llm).ask(
            self.build_prompt(source, target, file_pairs),
            IntegrationAssessment,
            system=SYSTEM_PROMPT,
        )
        if assessment is None:
            return None
        return assessment.model_copy(update={
            "title": assessment.title or DEFAULT_TITLE,
            "description": assessment.description
            or f"Potential integration between {source.full_name} and {target.full_name}",
        })
