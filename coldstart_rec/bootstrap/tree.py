from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Union

import pandas as pd

from .attitude import BRANCH_ORDER, DEFAULT_LOVER_THRESHOLD, Attitude, classify_attitudes
from .cohort import Cohort
from .scoring import Scorer, best_splitter, distinguishing_score, score_items


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Leaf:
    """No question is asked at this node."""


@dataclass(frozen=True)
class Split:
    movieId: int
    lover: "TreeNode"
    unknown: "TreeNode"
    hater: "TreeNode"
    score: float = 0.0
    n_users: int = 0

    def child(self, attitude: Attitude | str) -> "TreeNode":
        return getattr(self, Attitude(attitude).value)


TreeNode = Union[Leaf, Split]

LEAF = Leaf()


def build_tree(cohort: Cohort, levels: int, *, scorer: Scorer = distinguishing_score) -> TreeNode:
    """Recursively pick the most distinguishing movie and split the cohort three ways.

    A splitter is removed from scope only inside its own branch, so the same
    movie can be chosen again in a sibling branch.
    """
    if int(levels) <= 0 or cohort.is_empty:
        return LEAF

    scores = score_items(cohort, scorer=scorer)
    movie_id, score = best_splitter(scores)
    parts = cohort.partition(movie_id)

    logger.debug(
        "split levels_left=%d users=%d candidates=%d movieId=%d score=%.6f",
        int(levels),
        len(cohort.users),
        len(scores),
        movie_id,
        score,
    )

    children = {a: build_tree(parts[a], int(levels) - 1, scorer=scorer) for a in BRANCH_ORDER}
    return Split(
        movieId=movie_id,
        lover=children[Attitude.LOVER],
        unknown=children[Attitude.UNKNOWN],
        hater=children[Attitude.HATER],
        score=score,
        n_users=len(cohort.users),
    )


def build_tree_from_ratings(
    ratings: pd.DataFrame,
    candidate_ids: Iterable[int],
    *,
    levels: int,
    threshold: float = DEFAULT_LOVER_THRESHOLD,
    scorer: Scorer = distinguishing_score,
) -> TreeNode:
    """Classify raw ratings against the candidate set and build the question tree."""
    records = classify_attitudes(ratings, candidate_ids, threshold=threshold)
    cohort = Cohort.from_records(records)
    logger.info(
        "Building bootstrap tree: users=%d candidates=%d levels=%d threshold=%.2f",
        len(cohort.users),
        len(cohort.movie_ids),
        int(levels),
        float(threshold),
    )
    return build_tree(cohort, levels, scorer=scorer)


def descend(root: TreeNode, answers: Sequence[Attitude | str]) -> TreeNode:
    """Follow a user's answers from the root; stops early at a Leaf."""
    node = root
    for answer in answers:
        if not isinstance(node, Split):
            break
        node = node.child(answer)
    return node


def tree_depth(root: TreeNode) -> int:
    """Number of Split levels on the longest root-to-leaf path."""
    if not isinstance(root, Split):
        return 0
    return 1 + max(tree_depth(root.child(a)) for a in BRANCH_ORDER)


def tree_to_dict(root: TreeNode) -> dict[str, Any] | None:
    """Nested JSON-safe form; a Leaf becomes None."""
    if not isinstance(root, Split):
        return None
    out: dict[str, Any] = {
        "movieId": int(root.movieId),
        "score": float(root.score),
        "n_users": int(root.n_users),
    }
    for a in BRANCH_ORDER:
        out[a.value] = tree_to_dict(root.child(a))
    return out


def tree_from_dict(data: dict[str, Any] | None) -> TreeNode:
    if data is None:
        return LEAF
    return Split(
        movieId=int(data["movieId"]),
        lover=tree_from_dict(data.get(Attitude.LOVER.value)),
        unknown=tree_from_dict(data.get(Attitude.UNKNOWN.value)),
        hater=tree_from_dict(data.get(Attitude.HATER.value)),
        score=float(data.get("score", 0.0)),
        n_users=int(data.get("n_users", 0)),
    )
