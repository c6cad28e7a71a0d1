from __future__ import annotations

from typing import Iterable, Sequence

from .neighbors import Neighbor
from .store import RatingStore


def predict_rating(
    store: RatingStore,
    userId: int,
    movieId: int,
    neighbors: Sequence[Neighbor],
) -> float | None:
    """Mean-centered weighted-deviation prediction.

    predicted = mean(user) + sum(w * (r_v - mean(v))) / sum(|w|)

    taken over the neighbors who rated `movieId`. Returns None when that
    denominator is zero (nobody rated it, or all their weights are zero).
    """
    num = 0.0
    den = 0.0
    for nb in neighbors:
        r = store.rating(nb.userId, movieId)
        if r is None:
            continue
        num += float(nb.similarity) * (r - store.user_mean(nb.userId))
        den += abs(float(nb.similarity))

    if den == 0.0:
        return None
    return store.user_mean(userId) + num / den


def predict_many(
    store: RatingStore,
    userId: int,
    movieIds: Iterable[int],
    neighbors: Sequence[Neighbor],
) -> dict[int, float]:
    """Predict several movies at once; undefined predictions are omitted."""
    out: dict[int, float] = {}
    for movieId in movieIds:
        pred = predict_rating(store, userId, int(movieId), neighbors)
        if pred is not None:
            out[int(movieId)] = float(pred)
    return out
