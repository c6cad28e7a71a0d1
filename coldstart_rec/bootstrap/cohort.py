from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from .attitude import BRANCH_ORDER, Attitude


@dataclass(frozen=True)
class Cohort:
    """Users routed to one tree node and the candidate movies still in scope.

    `ratings` and `attitudes` are aligned users x movies frames (index userId,
    columns movieId). `ratings` holds NaN where the user has no rating.
    """

    ratings: pd.DataFrame
    attitudes: pd.DataFrame

    @classmethod
    def from_records(cls, records: pd.DataFrame) -> "Cohort":
        """Pivot long attitude records (userId, movieId, rating, attitude) into a cohort."""
        if records.empty:
            empty = pd.DataFrame(index=pd.Index([], name="userId", dtype="int64"))
            return cls(ratings=empty, attitudes=empty.copy())

        ratings = records.pivot(index="userId", columns="movieId", values="rating").astype("float64")
        attitudes = records.pivot(index="userId", columns="movieId", values="attitude")
        # A pair missing from the records is the same as an unrated pair.
        attitudes = attitudes.where(attitudes.notna(), Attitude.UNKNOWN.value)
        return cls(ratings=ratings, attitudes=attitudes.loc[ratings.index, ratings.columns])

    @property
    def users(self) -> list[int]:
        return [int(u) for u in self.ratings.index.tolist()]

    @property
    def movie_ids(self) -> list[int]:
        """In-scope movies, deduplicated, in ascending order."""
        return sorted({int(m) for m in self.ratings.columns.tolist()})

    @property
    def is_empty(self) -> bool:
        return self.ratings.shape[0] == 0 or self.ratings.shape[1] == 0

    def labels(self, movie_id: int) -> pd.Series:
        """Attitude of every cohort user toward `movie_id`."""
        return self.attitudes[movie_id]

    def without_movie(self, movie_id: int) -> "Cohort":
        return Cohort(
            ratings=self.ratings.drop(columns=[movie_id]),
            attitudes=self.attitudes.drop(columns=[movie_id]),
        )

    def partition(self, movie_id: int) -> dict[Attitude, "Cohort"]:
        """Split users by their attitude toward `movie_id`; the movie leaves scope in every part."""
        rest = self.without_movie(movie_id)
        labels = self.labels(movie_id)
        parts: dict[Attitude, Cohort] = {}
        for attitude in BRANCH_ORDER:
            mask = (labels == attitude.value).to_numpy()
            parts[attitude] = Cohort(ratings=rest.ratings.loc[mask], attitudes=rest.attitudes.loc[mask])
        return parts
