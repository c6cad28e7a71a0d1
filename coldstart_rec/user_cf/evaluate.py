from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn import model_selection

from .neighbors import Neighbor, top_k_neighbors
from .predict import predict_rating
from .similarity import DEFAULT_MIN_COMMON_RATED, get_similarity
from .store import RatingStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarityEvaluation:
    measure: str
    rmse: float | None
    coverage: float
    n_test: int
    n_predicted: int


def evaluate_similarity_measures(
    ratings: pd.DataFrame,
    *,
    measures: Sequence[str] = ("pearson", "cosine"),
    k: int = 10,
    min_common_rated: int = DEFAULT_MIN_COMMON_RATED,
    test_size: float = 0.1,
    random_state: int = 42,
    max_test_rows: int | None = None,
) -> list[SimilarityEvaluation]:
    """Hold-out RMSE of the neighborhood predictor under each similarity measure.

    Ratings are split once; every measure sees the same train/test rows.
    RMSE is taken over the test rows that received a defined prediction, and
    `coverage` is the share of test rows that did.
    """
    df = ratings[["userId", "movieId", "rating"]].dropna().reset_index(drop=True)
    df_train, df_test = model_selection.train_test_split(
        df,
        test_size=float(test_size),
        random_state=int(random_state),
    )
    if max_test_rows is not None:
        df_test = df_test.head(int(max_test_rows))

    store = RatingStore(df_train)
    logger.info("Similarity evaluation: train=%d test=%d k=%d", len(df_train), len(df_test), int(k))

    results: list[SimilarityEvaluation] = []
    for name in measures:
        sim_fn = get_similarity(name)
        neighborhoods: dict[int, list[Neighbor]] = {}
        errors: list[float] = []

        for row in df_test.itertuples(index=False):
            uid = int(row.userId)
            if not store.has_user(uid):
                continue
            if uid not in neighborhoods:
                neighborhoods[uid] = top_k_neighbors(
                    store,
                    uid,
                    k=int(k),
                    similarity=sim_fn,
                    min_common_rated=int(min_common_rated),
                )
            pred = predict_rating(store, uid, int(row.movieId), neighborhoods[uid])
            if pred is None:
                continue
            errors.append(float(pred) - float(row.rating))

        n_test = int(len(df_test))
        rmse = float(np.sqrt(np.mean(np.square(errors)))) if errors else None
        coverage = (len(errors) / n_test) if n_test else 0.0
        results.append(
            SimilarityEvaluation(
                measure=str(name),
                rmse=rmse,
                coverage=float(coverage),
                n_test=n_test,
                n_predicted=len(errors),
            )
        )
        logger.info(
            "measure=%s rmse=%s coverage=%.3f predicted=%d/%d",
            name,
            "n/a" if rmse is None else f"{rmse:.4f}",
            coverage,
            len(errors),
            n_test,
        )
    return results
