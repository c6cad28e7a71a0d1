from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np

from .store import RatingStore


DEFAULT_MIN_COMMON_RATED = 3

SimilarityFn = Callable[..., Optional[float]]


def pearson_similarity(
    store: RatingStore,
    u: int,
    v: int,
    *,
    min_common_rated: int = DEFAULT_MIN_COMMON_RATED,
) -> float | None:
    """Pearson correlation over commonly-rated movies.

    Each user's ratings are centered by the mean of that user's whole history,
    not just the shared movies. Returns None with fewer than
    `min_common_rated` shared movies, or when the denominator is zero (one of
    the users rated every shared movie exactly at their own mean).
    """
    x, y = store.shared_ratings(u, v)
    if len(x) < int(min_common_rated):
        return None

    dx = x - store.user_mean(u)
    dy = y - store.user_mean(v)
    denom = float(np.sqrt(np.sum(dx * dx) * np.sum(dy * dy)))
    if denom == 0.0:
        return None
    return float(np.sum(dx * dy)) / denom


def cosine_similarity(
    store: RatingStore,
    u: int,
    v: int,
    *,
    min_common_rated: int = DEFAULT_MIN_COMMON_RATED,
) -> float | None:
    """Cosine similarity of the raw (uncentered) ratings on commonly-rated movies."""
    x, y = store.shared_ratings(u, v)
    if len(x) < int(min_common_rated):
        return None

    denom = float(np.sqrt(np.sum(x * x) * np.sum(y * y)))
    if denom == 0.0:
        return None
    return float(np.sum(x * y)) / denom


SIMILARITY_MEASURES: Dict[str, SimilarityFn] = {
    "pearson": pearson_similarity,
    "cosine": cosine_similarity,
}


def get_similarity(name: str) -> SimilarityFn:
    key = str(name).strip().lower()
    if key not in SIMILARITY_MEASURES:
        raise ValueError(f"Unknown similarity measure {name!r}; expected one of {sorted(SIMILARITY_MEASURES)}")
    return SIMILARITY_MEASURES[key]
