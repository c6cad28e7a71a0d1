from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

from ..data import load_raw_data
from .neighbors import Neighbor, top_k_neighbors
from .predict import predict_many, predict_rating
from .similarity import DEFAULT_MIN_COMMON_RATED, get_similarity
from .store import RatingStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommenderConfig:
    similarity: str = "pearson"
    k_neighbors: int = 10
    n_recommendations: int = 10
    min_common_rated: int = DEFAULT_MIN_COMMON_RATED

    @classmethod
    def from_mapping(cls, raw: dict[str, Any], **overrides: Any) -> "RecommenderConfig":
        """Build from a `user_cf:` YAML section; non-None overrides win."""
        defaults = cls()
        values = {
            "similarity": str(raw.get("similarity", defaults.similarity)),
            "k_neighbors": int(raw.get("k_neighbors", defaults.k_neighbors)),
            "n_recommendations": int(raw.get("n_recommendations", defaults.n_recommendations)),
            "min_common_rated": int(raw.get("min_common_rated", defaults.min_common_rated)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class RecommendedMovie:
    movieId: int
    predicted_rating: float
    title: str | None = None
    genres: str | None = None


class UserUserCFRecommender:
    """User-user CF recommender over an in-memory ratings snapshot.

    `k` is the neighborhood size and `n` the length of the returned list; both
    default to the values in `config`.
    """

    def __init__(
        self,
        ratings: pd.DataFrame,
        movies: pd.DataFrame | None = None,
        *,
        config: RecommenderConfig | None = None,
    ) -> None:
        self.config = config or RecommenderConfig()
        self.similarity_fn = get_similarity(self.config.similarity)
        self.store = RatingStore(ratings)

        self._movie_info: dict[int, tuple[str | None, str | None]] = {}
        if movies is not None:
            for row in movies[["movieId", "title", "genres"]].itertuples(index=False):
                self._movie_info[int(row.movieId)] = (
                    None if pd.isna(row.title) else str(row.title),
                    None if pd.isna(row.genres) else str(row.genres),
                )

        logger.info(
            "UserCF loaded: users=%d ratings=%d similarity=%s k=%d",
            len(self.store.user_ids),
            len(self.store),
            self.config.similarity,
            self.config.k_neighbors,
        )

    @classmethod
    def from_raw_dir(cls, raw_dir: Path, *, config: RecommenderConfig | None = None) -> "UserUserCFRecommender":
        data = load_raw_data(raw_dir)
        return cls(data.ratings, data.movies, config=config)

    def has_user(self, userId: int) -> bool:
        return self.store.has_user(userId)

    def movie_info(self, movieId: int) -> dict[str, Any]:
        title, genres = self._movie_info.get(int(movieId), (None, None))
        return {"movieId": int(movieId), "title": title, "genres": genres}

    def _neighbors(self, store: RatingStore, userId: int, k: int) -> list[Neighbor]:
        return top_k_neighbors(
            store,
            userId,
            k=int(k),
            similarity=self.similarity_fn,
            min_common_rated=self.config.min_common_rated,
        )

    def _require_user(self, store: RatingStore, userId: int) -> int:
        uid = int(userId)
        if not store.has_user(uid):
            raise KeyError(f"Unknown userId: {uid}")
        return uid

    def similar_users(self, userId: int, *, top_n: int | None = None) -> list[Neighbor]:
        uid = self._require_user(self.store, userId)
        return self._neighbors(self.store, uid, top_n or self.config.k_neighbors)

    def predict(self, userId: int, movieId: int, *, k: int | None = None) -> float | None:
        uid = self._require_user(self.store, userId)
        neighbors = self._neighbors(self.store, uid, k or self.config.k_neighbors)
        return predict_rating(self.store, uid, int(movieId), neighbors)

    def _recommend(self, store: RatingStore, userId: int, k: int, n: int) -> list[RecommendedMovie]:
        neighbors = self._neighbors(store, userId, k)
        if not neighbors:
            return []

        seen = store.rated_movies(userId)
        candidates: set[int] = set()
        for nb in neighbors:
            candidates |= store.rated_movies(nb.userId)
        candidates -= seen

        preds = predict_many(store, userId, sorted(candidates), neighbors)
        # Stable sort over ascending movieId: equal predictions keep the smaller id first.
        ranked = sorted(preds.items(), key=lambda kv: -kv[1])[: int(n)]

        out: list[RecommendedMovie] = []
        for movieId, score in ranked:
            info = self.movie_info(movieId)
            out.append(
                RecommendedMovie(
                    movieId=int(movieId),
                    predicted_rating=float(score),
                    title=info["title"],
                    genres=info["genres"],
                )
            )
        return out

    def recommend_movies(
        self,
        userId: int,
        *,
        k: int | None = None,
        n: int | None = None,
    ) -> list[RecommendedMovie]:
        """Recommend unseen movies ranked by predicted rating.

        Candidates are the movies rated by any of the top-k neighbors that the
        user has not rated. Movies with an undefined prediction are dropped.
        """
        uid = self._require_user(self.store, userId)
        return self._recommend(self.store, uid, k or self.config.k_neighbors, n or self.config.n_recommendations)

    def recommend_for_ratings(
        self,
        ratings: Mapping[int, float],
        *,
        k: int | None = None,
        n: int | None = None,
    ) -> list[RecommendedMovie]:
        """Recommend for a new user known only by the ratings given during elicitation."""
        if not ratings:
            return []
        new_user = (max(self.store.user_ids) + 1) if self.store.user_ids else 1
        store = self.store.with_user_ratings(new_user, ratings)
        return self._recommend(store, new_user, k or self.config.k_neighbors, n or self.config.n_recommendations)
