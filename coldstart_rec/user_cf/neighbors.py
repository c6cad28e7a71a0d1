from __future__ import annotations

from dataclasses import dataclass

from .similarity import DEFAULT_MIN_COMMON_RATED, SimilarityFn, pearson_similarity
from .store import RatingStore


@dataclass(frozen=True)
class Neighbor:
    userId: int
    similarity: float
    common_rated: int


def top_k_neighbors(
    store: RatingStore,
    userId: int,
    *,
    k: int = 10,
    similarity: SimilarityFn = pearson_similarity,
    min_common_rated: int = DEFAULT_MIN_COMMON_RATED,
) -> list[Neighbor]:
    """The `k` users most similar to `userId`, best first.

    Users whose similarity is undefined are left out. Equal similarities keep
    ascending userId order.
    """
    uid = int(userId)
    target_movies = store.rated_movies(uid)

    scored: list[Neighbor] = []
    for other in store.user_ids:
        if other == uid:
            continue
        sim = similarity(store, uid, other, min_common_rated=int(min_common_rated))
        if sim is None:
            continue
        common = len(target_movies & store.rated_movies(other))
        scored.append(Neighbor(userId=int(other), similarity=float(sim), common_rated=int(common)))

    scored = sorted(scored, key=lambda n: -n.similarity)
    return scored[: int(k)]
