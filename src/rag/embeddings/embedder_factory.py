# src/rag/embeddings/embedder_factory.py - v1
"""Factory: build the configured embedder from Settings.

Each provider names the Settings fields that feed its constructor; the
adapter module is imported only when that provider is selected.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field

from plexweave.config.settings import Settings
from plexweave.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbedderSpec:
    """Adapter class path plus a constructor-kwarg -> Settings-field map."""

    class_path: str
    settings_map: dict[str, str] = field(default_factory=dict)


_PROVIDER_REGISTRY: dict[str, EmbedderSpec] = {
    "openai": EmbedderSpec(
        "plexweave.rag.embeddings.openai_embedder.OpenAIEmbedder",
        {
            "model": "embedding_model",
            "api_key": "openai_api_key",
            "dimensions": "embedding_dimensions",
        },
    ),
    "ollama": EmbedderSpec(
        "plexweave.rag.embeddings.ollama_embedder.OllamaEmbedder",
        {
            "model": "embedding_ollama_model",
            "base_url": "ollama_base_url",
            "dimensions": "embedding_ollama_dimensions",
        },
    ),
    "sentence_transformers": EmbedderSpec(
        "plexweave.rag.embeddings.sentence_tf_embedder.SentenceTransformerEmbedder",
        {"model": "embedding_st_model"},
    ),
}


class UnsupportedEmbeddingProviderError(ValueError):
    """Raised when an embedding provider is not registered."""


def create_embedder(settings: Settings) -> BaseEmbedder:
    """Instantiate the embedder selected by EMBEDDING_PROVIDER.

    Raises:
        UnsupportedEmbeddingProviderError: If the provider is not registered.
    """
    provider = settings.embedding_provider
    spec = _PROVIDER_REGISTRY.get(provider)
    if spec is None:
        raise UnsupportedEmbeddingProviderError(
            f"Unsupported embedding provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    kwargs = {kwarg: getattr(settings, name) for kwarg, name in spec.settings_map.items()}
    logger.debug("Creating embedder: provider=%s, model=%s", provider, kwargs.get("model"))
    module_path, class_name = spec.class_path.rsplit(".", 1)
    cls = getattr(importlib.import_module(module_path), class_name)
    return cls(**kwargs)


def register_embedding_provider(
    name: str, class_path: str, settings_map: dict[str, str] | None = None,
) -> None:
    """Register a custom embedder, optionally fed from Settings fields."""
    _PROVIDER_REGISTRY[name] = EmbedderSpec(class_path, dict(settings_map or {}))
    logger.info("Registered embedding provider: %s -> %s", name, class_path)
