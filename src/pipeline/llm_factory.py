# src/pipeline/llm_factory.py - v1
"""Oracle clients per component.

The routing cascade in llm/config.py picks a provider:model per component;
components that land on the same assignment share one client. A run
started with an explicit client hands that client to every component
instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from plexweave.llm.client_factory import create_llm_client
from plexweave.llm.config import LLMAssignment, resolve_llm

if TYPE_CHECKING:
    from plexweave.config.settings import Settings
    from plexweave.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


class LLMFactory:
    def __init__(self, settings: Settings, fixed: BaseLLMClient | None = None) -> None:
        self._settings = settings
        self._fixed = fixed
        self._clients: dict[str, BaseLLMClient] = {}
        self.assignments: dict[str, LLMAssignment] = {}

    def get_client(self, component: str) -> BaseLLMClient:
        if self._fixed is not None:
            return self._fixed

        assignment = self.assignments.get(component)
        if assignment is None:
            assignment = self.assignments[component] = resolve_llm(component, self._settings)

        client = self._clients.get(assignment.key)
        if client is None:
            client = self._clients[assignment.key] = create_llm_client(
                assignment.provider, assignment.model, self._settings,
            )
            logger.info(
                "Oracle client for %s: %s (%s)", component, assignment.key, assignment.source,
            )
        return client

    __call__ = get_client
