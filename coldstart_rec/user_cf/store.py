from __future__ import annotations

from typing import Mapping

import numpy as np
import pandas as pd


class RatingStore:
    """Read-only per-user view of a ratings table.

    Each user's ratings are kept as a Series indexed by movieId (sorted), with
    the user's mean over their whole history precomputed.
    """

    def __init__(self, ratings: pd.DataFrame) -> None:
        required = {"userId", "movieId", "rating"}
        missing = required - set(ratings.columns)
        if missing:
            raise ValueError(f"ratings missing required columns: {sorted(missing)}")

        df = ratings[["userId", "movieId", "rating"]].dropna().astype(
            {"userId": "int64", "movieId": "int64", "rating": "float64"}
        )
        self.ratings = df.reset_index(drop=True)

        self._by_user: dict[int, pd.Series] = {}
        self._means: dict[int, float] = {}
        self._movie_sets: dict[int, frozenset[int]] = {}
        for uid, grp in self.ratings.groupby("userId", sort=True):
            series = grp.set_index("movieId")["rating"].sort_index()
            self._by_user[int(uid)] = series
            self._means[int(uid)] = float(series.mean())
            self._movie_sets[int(uid)] = frozenset(int(m) for m in series.index.tolist())

    def __len__(self) -> int:
        return int(len(self.ratings))

    @property
    def user_ids(self) -> list[int]:
        """All users in ascending userId order."""
        return list(self._by_user.keys())

    def has_user(self, userId: int) -> bool:
        return int(userId) in self._by_user

    def user_ratings(self, userId: int) -> pd.Series:
        uid = int(userId)
        if uid not in self._by_user:
            raise KeyError(f"Unknown userId: {uid}")
        return self._by_user[uid]

    def user_mean(self, userId: int) -> float:
        uid = int(userId)
        if uid not in self._means:
            raise KeyError(f"Unknown userId: {uid}")
        return self._means[uid]

    def rated_movies(self, userId: int) -> frozenset[int]:
        uid = int(userId)
        if uid not in self._movie_sets:
            raise KeyError(f"Unknown userId: {uid}")
        return self._movie_sets[uid]

    def rating(self, userId: int, movieId: int) -> float | None:
        series = self._by_user.get(int(userId))
        if series is None:
            return None
        value = series.get(int(movieId))
        return None if value is None else float(value)

    def shared_ratings(self, u: int, v: int) -> tuple[np.ndarray, np.ndarray]:
        """Ratings of u and v on their commonly-rated movies, aligned by ascending movieId."""
        a = self.user_ratings(u)
        b = self.user_ratings(v)
        common = np.intersect1d(a.index.to_numpy(), b.index.to_numpy())
        return a.loc[common].to_numpy(dtype=np.float64), b.loc[common].to_numpy(dtype=np.float64)

    def with_user_ratings(self, userId: int, ratings: Mapping[int, float]) -> "RatingStore":
        """Return a new store with `ratings` added (or replaced) for `userId`."""
        uid = int(userId)
        new_rows = pd.DataFrame(
            {
                "userId": [uid] * len(ratings),
                "movieId": [int(m) for m in ratings.keys()],
                "rating": [float(r) for r in ratings.values()],
            }
        )
        keep = ~(
            (self.ratings["userId"] == uid) & self.ratings["movieId"].isin(new_rows["movieId"].tolist())
        )
        return RatingStore(pd.concat([self.ratings.loc[keep], new_rows], ignore_index=True))
