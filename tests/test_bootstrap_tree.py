from __future__ import annotations

import pandas as pd
import pytest

from coldstart_rec.bootstrap.attitude import Attitude, classify_attitudes
from coldstart_rec.bootstrap.cohort import Cohort
from coldstart_rec.bootstrap.scoring import best_splitter, distinguishing_score, score_items
from coldstart_rec.bootstrap.tree import (
    LEAF,
    Leaf,
    Split,
    build_tree,
    build_tree_from_ratings,
    descend,
    tree_depth,
    tree_from_dict,
    tree_to_dict,
)


def _ratings(rows: list[tuple[int, int, float]]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=["userId", "movieId", "rating"])


def _cohort(rows: list[tuple[int, int, float]], candidates: list[int]) -> Cohort:
    return Cohort.from_records(classify_attitudes(_ratings(rows), candidates))


# Two taste groups: users 1-2 love movies 1 and 2 and hate 3; users 3-4 the opposite.
TASTE_ROWS = [
    (1, 1, 5.0), (1, 2, 5.0), (1, 3, 1.0),
    (2, 1, 5.0), (2, 2, 4.0), (2, 3, 1.0),
    (3, 1, 1.0), (3, 2, 1.0), (3, 3, 5.0),
    (4, 1, 1.0), (4, 2, 2.0), (4, 3, 5.0),
]


def test_scenario_a_scores_by_hand() -> None:
    # u1: A=5, B=5; u2: A=1, B=1; u3: A=5 only. A=1, B=2.
    cohort = _cohort([(1, 1, 5.0), (1, 2, 5.0), (2, 1, 1.0), (2, 2, 1.0), (3, 1, 5.0)], [1, 2])

    # Split on A: lovers {u1, u3} rated B as [5]; haters {u2} as [1]. One point each -> 0.
    assert distinguishing_score(cohort, 1) == 0.0
    # Split on B: lovers {u1}, haters {u2}, unknown {u3} each hold one rating of A -> 0.
    assert distinguishing_score(cohort, 2) == 0.0

    # Equal scores: the smaller movieId wins.
    root = build_tree(cohort, 1)
    assert isinstance(root, Split)
    assert root.movieId == 1


def test_scores_sum_within_group_variances() -> None:
    cohort = _cohort(TASTE_ROWS, [1, 2, 3])

    scores = score_items(cohort)

    # Splitting on 1 or 3 leaves movie 2 with [5, 4] and [1, 2] -> 0.5 + 0.5.
    assert scores[1] == pytest.approx(1.0)
    assert scores[3] == pytest.approx(1.0)
    # Splitting on 2 leaves [5, 5], [1, 1] on movie 1 and [1, 1], [5, 5] on movie 3.
    assert scores[2] == pytest.approx(0.0)
    assert best_splitter(scores) == (2, pytest.approx(0.0))


def test_non_raters_are_excluded_not_zero() -> None:
    # User 3 never rated movie 2; counting them as 0 would inflate the variance.
    cohort = _cohort([(1, 1, 5.0), (1, 2, 4.0), (2, 1, 4.0), (2, 2, 4.0), (3, 1, 4.5)], [1, 2])
    assert distinguishing_score(cohort, 1) == pytest.approx(0.0)


def test_build_tree_reuses_splitter_in_sibling_branches() -> None:
    cohort = _cohort(TASTE_ROWS, [1, 2, 3])

    root = build_tree(cohort, 2)

    assert isinstance(root, Split)
    assert root.movieId == 2
    assert root.n_users == 4
    assert root.unknown == LEAF
    assert isinstance(root.lover, Split) and root.lover.movieId == 1
    assert isinstance(root.hater, Split) and root.hater.movieId == 1
    assert root.lover.n_users == 2
    # Depth is exhausted below the second level.
    assert all(isinstance(root.lover.child(a), Leaf) for a in Attitude)


def test_build_tree_is_deterministic() -> None:
    ratings = _ratings(TASTE_ROWS + [(5, 1, 3.0), (5, 3, 4.0), (6, 2, 2.5)])

    first = build_tree_from_ratings(ratings, [1, 2, 3], levels=3)
    second = build_tree_from_ratings(ratings, [3, 2, 1], levels=3)

    assert first == second


def test_build_tree_terminates_on_empty_cohort_and_zero_depth() -> None:
    assert build_tree(Cohort.from_records(classify_attitudes(_ratings([]), [1, 2])), 3) == LEAF
    assert build_tree(_cohort(TASTE_ROWS, [1, 2, 3]), 0) == LEAF


def test_build_tree_stops_when_candidates_run_out() -> None:
    root = build_tree(_cohort(TASTE_ROWS, [1, 2]), 5)
    assert tree_depth(root) == 2


def test_descend_follows_answers() -> None:
    root = build_tree(_cohort(TASTE_ROWS, [1, 2, 3]), 2)

    assert descend(root, []) is root
    assert descend(root, ["lover"]).movieId == 1
    assert descend(root, [Attitude.UNKNOWN]) == LEAF
    # Answers past a leaf are ignored.
    assert descend(root, ["unknown", "lover", "hater"]) == LEAF
    with pytest.raises(ValueError):
        descend(root, ["maybe"])


def test_tree_dict_round_trip() -> None:
    root = build_tree(_cohort(TASTE_ROWS, [1, 2, 3]), 2)

    data = tree_to_dict(root)

    assert data["movieId"] == 2
    assert data["unknown"] is None
    assert tree_from_dict(data) == root
    assert tree_to_dict(LEAF) is None
