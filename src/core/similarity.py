# src/core/similarity.py - v1
"""Cosine scoring for the fragment index (numpy)."""

from __future__ import annotations

import numpy as np

_EPS = 1e-10


def normalize_rows(embeddings: np.ndarray) -> np.ndarray:
    """L2-normalize each row; zero rows stay zero."""
    norms = np.linalg.norm(embeddings, axis=1, keepdims=True)
    return embeddings / np.maximum(norms, _EPS)


def cosine_similarity_to_many(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``."""
    if matrix.ndim != 2:
        raise ValueError(f"Expected 2D matrix, got {matrix.ndim}D")
    if matrix.shape[0] == 0:
        return np.empty((0,), dtype=np.float64)
    if query.shape[-1] != matrix.shape[1]:
        raise ValueError(
            f"Dimension mismatch: query has {query.shape[-1]}, matrix has {matrix.shape[1]}"
        )
    q = query / max(float(np.linalg.norm(query)), _EPS)
    return normalize_rows(matrix) @ q


def rank_by_similarity(
    query: np.ndarray,
    matrix: np.ndarray,
    top_k: int,
    min_score: float | None = None,
) -> list[tuple[int, float]]:
    """``(row, score)`` of the ``top_k`` rows closest to ``query``, best first.

    Ties keep row order. Rows scoring under ``min_score`` are dropped.
    """
    if top_k <= 0:
        return []
    scores = cosine_similarity_to_many(query, matrix)
    ranked: list[tuple[int, float]] = []
    for row in np.argsort(-scores, kind="stable")[:top_k]:
        score = float(scores[row])
        if min_score is not None and score < min_score:
            break
        ranked.append((int(row), score))
    return ranked


def cosine_distance_to_score(distance: float) -> float:
    return 1.0 - float(distance)
