# tests/unit/pipeline/agents/test_unit_philosophical_profiler.py - v1
"""Tests for pipeline/agents/philosophical_profiler.py."""

from __future__ import annotations

import pytest

from plexweave.llm.oracle import OracleOptions
from plexweave.pipeline.agents.philosophical_profiler import PhilosophicalProfilerAgent
from tests.conftest import ScriptedLLMClient, repo_in_prompt

STANCE = {
    "epistemology": "empirical",
    "antagonist": "inconsistency",
    "cognitive_transform": "reveals",
    "temporality": "detects",
    "abstraction_level": "pattern",
    "philosophy_statement": "Consistency emerges from observation",
    "core_virtue": "consistency",
    "confidence": 0.9,
}


class TestBuildPrompt:
    def test_lists_profile_and_vocabularies(self, make_profile):
        profile = make_profile("p/lens", capabilities=("analyzes",), readme_excerpt="Lens docs")
        prompt = PhilosophicalProfilerAgent().build_prompt(profile)
        assert "## Repository: p/lens" in prompt
        assert "**Capabilities**: analyzes" in prompt
        assert "**Produces**: None" in prompt
        assert "Lens docs" in prompt
        assert "empirical | formal | pragmatic | constructive" in prompt


class TestExtract:
    @pytest.mark.asyncio
    async def test_valid_stance(self, make_profile):
        llm = ScriptedLLMClient({"PhilosophicalExtraction": STANCE})
        stance = await PhilosophicalProfilerAgent().extract(make_profile("p/lens"), llm)
        assert stance is not None
        assert stance.repo_id == "p/lens"
        assert stance.antagonist == "inconsistency"
        assert stance.confidence == 0.9

    @pytest.mark.asyncio
    async def test_out_of_vocabulary_is_failure(self, make_profile):
        options = OracleOptions()
        llm = ScriptedLLMClient({"PhilosophicalExtraction": {**STANCE, "antagonist": "boredom"}})
        stance = await PhilosophicalProfilerAgent(options).extract(make_profile("p/lens"), llm)
        assert stance is None
        assert options.stats.failures == 1

    @pytest.mark.asyncio
    async def test_extract_all_drops_failures(self, make_profile):
        def answer(prompt):
            name = repo_in_prompt(prompt, "## Repository:")
            return RuntimeError("down") if name == "p/b" else STANCE

        llm = ScriptedLLMClient({"PhilosophicalExtraction": answer})
        profiles = [make_profile("p/a"), make_profile("p/b"), make_profile("p/c")]
        stances = await PhilosophicalProfilerAgent().extract_all(profiles, llm, concurrency=3)
        assert [s.repo_id for s in stances] == ["p/a", "p/c"]


class TestPromptTemplate:
    def test_every_agent_ships_a_prompt(self):
        from plexweave.pipeline.agents.integration_assessor import IntegrationAssessorAgent
        from plexweave.pipeline.agents.relationship_assessor import RelationshipAssessorAgent
        from plexweave.pipeline.agents.repo_profiler import RepoProfilerAgent

        for agent in (
            PhilosophicalProfilerAgent(), RepoProfilerAgent(),
            RelationshipAssessorAgent(), IntegrationAssessorAgent(),
        ):
            assert agent.prompt_file.is_file(), agent.name
