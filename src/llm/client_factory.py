# src/llm/client_factory.py - v1
"""Factory: instantiate an oracle client from a provider name.

Used by pipeline/llm_factory.py once the routing cascade in llm/config.py
has picked a provider and model. Adapters are imported lazily so that only
the SDK of a provider actually routed to needs to be installed.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass

from plexweave.config.settings import Settings
from plexweave.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    """Where an adapter lives and which setting feeds its credential."""

    class_path: str
    setting: str | None = None
    kwarg: str = "api_key"


_PROVIDER_REGISTRY: dict[str, ProviderSpec] = {
    "anthropic": ProviderSpec(
        "plexweave.llm.adapters.anthropic_adapter.AnthropicAdapter", "anthropic_api_key",
    ),
    "openai": ProviderSpec(
        "plexweave.llm.adapters.openai_adapter.OpenAIAdapter", "openai_api_key",
    ),
    "google": ProviderSpec(
        "plexweave.llm.adapters.google_adapter.GoogleAdapter", "google_api_key",
    ),
    "ollama": ProviderSpec(
        "plexweave.llm.adapters.ollama_adapter.OllamaAdapter", "ollama_base_url", "base_url",
    ),
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the adapter for ``provider``.

    Args:
        provider: Provider identifier (anthropic, openai, google, ollama).
        model: Model name (e.g. gpt-4o-mini).
        settings: Application settings, source of the provider credential.
        **kwargs: Extra adapter arguments; they win over settings.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    spec = _PROVIDER_REGISTRY.get(provider)
    if spec is None:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    init_kwargs: dict[str, object] = {"model": model, **kwargs}
    if settings is not None and spec.setting is not None:
        value = getattr(settings, spec.setting, "")
        if not value:
            logger.warning("%s is empty; %s calls will fail", spec.setting.upper(), provider)
        init_kwargs.setdefault(spec.kwarg, value)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return _import_class(spec.class_path)(**init_kwargs)


def register_provider(
    name: str, class_path: str, setting: str | None = None, kwarg: str = "api_key",
) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
        setting: Optional Settings field passed to the adapter as ``kwarg``.
    """
    _PROVIDER_REGISTRY[name] = ProviderSpec(class_path, setting, kwarg)
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    return getattr(importlib.import_module(module_path), class_name)
