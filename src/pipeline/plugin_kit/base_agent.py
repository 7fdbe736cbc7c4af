# src/pipeline/plugin_kit/base_agent.py - v1
"""Common base for oracle-backed agents.

An agent owns one prompt template, loaded from ``prompts/<name>.txt``,
and asks the oracle under its own component name so that routing, retry
statistics and log lines are attributed to it. The oracle options are
fixed per agent instance; the LLM client is passed per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from plexweave.llm.oracle import OracleOptions, StructuredOracle

if TYPE_CHECKING:
    from plexweave.llm.base_client import BaseLLMClient

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class BaseAgent(ABC):
    def __init__(self, oracle_options: OracleOptions | None = None) -> None:
        self.oracle_options = oracle_options or OracleOptions()
        self._prompt_template: str | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Component identifier, e.g. 'repo_profiler'."""

    @property
    def prompt_file(self) -> Path:
        return PROMPTS_DIR / f"{self.name}.txt"

    def oracle(self, llm: BaseLLMClient) -> StructuredOracle:
        return StructuredOracle.from_options(llm, self.name, self.oracle_options)

    def _load_prompt(self) -> str:
        if self._prompt_template is None:
            self._prompt_template = self.prompt_file.read_text(encoding="utf-8")
        return self._prompt_template
