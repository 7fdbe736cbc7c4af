# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: oracle
providers, discovery thresholds, similarity-mode limits, embeddings,
vector index, weave storage and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


_ASSIGNMENT_FIELDS = (
    "llm_phase_profiling",
    "llm_phase_assessment",
    "llm_repo_profiler",
    "llm_philosophical_profiler",
    "llm_relationship_assessor",
    "llm_integration_assessor",
)


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_default_provider: str = "openai"
    llm_default_model: str = "gpt-4o-mini"
    llm_default_temperature: float = 0.2
    llm_max_tokens_per_agent: int = 4096

    # Provider API keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    google_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # Per-phase LLM assignment
    llm_phase_profiling: str = ""
    llm_phase_assessment: str = ""

    # Per-component LLM assignment (highest priority)
    llm_repo_profiler: str = ""
    llm_philosophical_profiler: str = ""
    llm_relationship_assessor: str = ""
    llm_integration_assessor: str = ""

    # === Oracle calls ===
    oracle_timeout_s: float = 60.0
    oracle_retry_enabled: bool = False
    max_concurrency: int = 1

    # === Profile discovery ===
    min_confidence: float = 0.6
    max_candidates: int = 20
    philosophy_enabled: bool = True
    philosophy_min_confidence: float = 0.5

    # === Similarity discovery ===
    similarity_threshold: float = 0.85
    similarity_top_k: int = 5
    max_chunk_pairs: int = 200
    min_matching_chunks: int = 3
    min_file_pair_similarity: float = 0.83
    max_file_pairs_to_llm: int = 7
    llm_score_threshold: float = 0.75

    # === EMBEDDINGS ===
    embedding_provider: Literal["openai", "ollama", "sentence_transformers"] = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_ollama_model: str = "nomic-embed-text"
    embedding_ollama_dimensions: int = 768
    embedding_st_model: str = "all-MiniLM-L6-v2"

    # === Fragment indexing ===
    chunk_size: int = 1500
    chunk_overlap: int = 200
    max_file_size_bytes: int = 50 * 1024

    # === Vector database ===
    vector_db_type: Literal["memory", "chromadb"] = "memory"
    vector_db_path: Path = Path("~/.plexweave/vectordb")
    vector_db_url: str = ""
    vector_db_collection: str = "fragments"

    # === Repository source ===
    repos_root: Path = Path("./repos")

    # === Weave storage ===
    store_backend: Literal["sqlite", "json"] = "sqlite"
    store_path: Path = Path("~/.plexweave/weaves.db")
    store_enforce_unique: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        for name in (
            "min_confidence",
            "philosophy_min_confidence",
            "similarity_threshold",
            "min_file_pair_similarity",
            "llm_score_threshold",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name.upper()} must be within [0, 1], got {value}")

        if self.max_concurrency < 1:
            errors.append("MAX_CONCURRENCY must be >= 1")

        if self.max_candidates < 1:
            errors.append("MAX_CANDIDATES must be >= 1")

        if self.oracle_timeout_s <= 0:
            errors.append("ORACLE_TIMEOUT_S must be > 0")

        if self.chunk_overlap < 0:
            errors.append("CHUNK_OVERLAP must be >= 0")
        elif self.chunk_overlap >= self.chunk_size:
            errors.append("CHUNK_OVERLAP must be < CHUNK_SIZE")

        if (
            self.vector_db_type == "chromadb"
            and not self.vector_db_url
            and not str(self.vector_db_path).strip()
        ):
            errors.append("VECTOR_DB_TYPE=chromadb requires VECTOR_DB_PATH or VECTOR_DB_URL")

        for name in _ASSIGNMENT_FIELDS:
            value = getattr(self, name).strip()
            provider, _, model = value.partition(":")
            if value and not (provider and model):
                errors.append(f"{name.upper()} must look like provider:model, got {value!r}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
