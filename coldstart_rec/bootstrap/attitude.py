from __future__ import annotations

from enum import Enum
from typing import Iterable

import numpy as np
import pandas as pd


DEFAULT_LOVER_THRESHOLD = 3.5


class Attitude(str, Enum):
    LOVER = "lover"
    UNKNOWN = "unknown"
    HATER = "hater"


# Child order of a split node, left to right.
BRANCH_ORDER: tuple[Attitude, ...] = (Attitude.LOVER, Attitude.UNKNOWN, Attitude.HATER)


def classify_rating(rating: float | None, *, threshold: float = DEFAULT_LOVER_THRESHOLD) -> Attitude:
    """Map a rating (or its absence) to an attitude."""
    if rating is None or pd.isna(rating):
        return Attitude.UNKNOWN
    return Attitude.LOVER if float(rating) >= float(threshold) else Attitude.HATER


def classify_series(ratings: pd.Series, *, threshold: float = DEFAULT_LOVER_THRESHOLD) -> pd.Series:
    """Vectorized `classify_rating`; returns attitude values as plain strings."""
    values = np.where(
        ratings.isna(),
        Attitude.UNKNOWN.value,
        np.where(ratings >= float(threshold), Attitude.LOVER.value, Attitude.HATER.value),
    )
    return pd.Series(values, index=ratings.index, dtype=object)


def classify_attitudes(
    ratings: pd.DataFrame,
    candidate_ids: Iterable[int],
    *,
    threshold: float = DEFAULT_LOVER_THRESHOLD,
) -> pd.DataFrame:
    """Build the dense attitude table for a fixed candidate set.

    Every user who rated at least one candidate gets one row per candidate;
    pairs without a rating are kept with `rating` NaN and attitude "unknown".
    Columns: userId, movieId, rating, attitude.
    """
    candidates = list(dict.fromkeys(int(m) for m in candidate_ids))

    rated = ratings.loc[ratings["movieId"].isin(candidates), ["userId", "movieId", "rating"]]
    users = sorted(int(u) for u in rated["userId"].unique())
    if not users:
        return pd.DataFrame(
            {
                "userId": pd.Series([], dtype="int64"),
                "movieId": pd.Series([], dtype="int64"),
                "rating": pd.Series([], dtype="float64"),
                "attitude": pd.Series([], dtype=object),
            }
        )

    index = pd.MultiIndex.from_product([users, candidates], names=["userId", "movieId"])
    dense = (
        rated.astype({"userId": "int64", "movieId": "int64", "rating": "float64"})
        .set_index(["userId", "movieId"])["rating"]
        .reindex(index)
        .reset_index()
    )
    dense["attitude"] = classify_series(dense["rating"], threshold=threshold)
    return dense[["userId", "movieId", "rating", "attitude"]]
