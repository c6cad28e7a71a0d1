from __future__ import annotations

from typing import Callable

from .cohort import Cohort


Scorer = Callable[[Cohort, int], float]


def distinguishing_score(cohort: Cohort, movie_id: int) -> float:
    """Sum of within-group rating variances after splitting the cohort on `movie_id`.

    Users are grouped by their attitude toward `movie_id`. For each group and
    each other in-scope movie, the sample variance (ddof=1) of the ratings
    given by group members who rated that movie is taken; groups with fewer
    than two such ratings contribute 0. Lower scores mean the movie separates
    the cohort into more homogeneous groups.
    """
    others = cohort.ratings.drop(columns=[movie_id])
    if others.shape[1] == 0:
        return 0.0

    variances = others.groupby(cohort.labels(movie_id), sort=True).var(ddof=1)
    return float(variances.fillna(0.0).to_numpy().sum())


def score_items(cohort: Cohort, *, scorer: Scorer = distinguishing_score) -> dict[int, float]:
    """Score every in-scope movie of the cohort."""
    return {movie_id: float(scorer(cohort, movie_id)) for movie_id in cohort.movie_ids}


def best_splitter(scores: dict[int, float]) -> tuple[int, float]:
    """Lowest score wins; ties go to the smaller movieId."""
    if not scores:
        raise ValueError("cannot pick a splitter from an empty score table")
    movie_id, score = min(scores.items(), key=lambda kv: (kv[1], kv[0]))
    return int(movie_id), float(score)
