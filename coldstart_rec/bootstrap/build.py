from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from ..features import select_candidate_movies
from .attitude import DEFAULT_LOVER_THRESHOLD
from .serialize import level_order
from .tree import TreeNode, build_tree_from_ratings, tree_depth, tree_from_dict, tree_to_dict


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BootstrapConfig:
    n_candidates: int = 50
    min_ratings: int = 1
    min_year: int | None = None
    levels: int = 3
    lover_threshold: float = DEFAULT_LOVER_THRESHOLD

    @classmethod
    def from_mapping(cls, raw: dict[str, Any], **overrides: Any) -> "BootstrapConfig":
        """Build from a `bootstrap:` YAML section; non-None overrides win."""
        defaults = cls()
        values = {
            "n_candidates": int(raw.get("n_candidates", defaults.n_candidates)),
            "min_ratings": int(raw.get("min_ratings", defaults.min_ratings)),
            "min_year": (None if raw.get("min_year") is None else int(raw["min_year"])),
            "levels": int(raw.get("levels", defaults.levels)),
            "lover_threshold": float(raw.get("lover_threshold", defaults.lover_threshold)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class BootstrapArtifacts:
    tree_path: Path
    levels_path: Path
    meta_path: Path


def build_and_save_bootstrap_tree(
    ratings: pd.DataFrame,
    *,
    out_dir: Path,
    cfg: BootstrapConfig,
    movies: pd.DataFrame | None = None,
    candidate_ids: list[int] | None = None,
) -> BootstrapArtifacts:
    """Select candidates (unless given), build the question tree and persist it.

    Expected ratings columns: userId, movieId, rating
    """
    required = {"userId", "movieId", "rating"}
    missing = required - set(ratings.columns)
    if missing:
        raise ValueError(f"ratings missing required columns: {sorted(missing)}")

    out_dir = Path(out_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    if candidate_ids is None:
        candidate_ids = select_candidate_movies(
            ratings,
            movies,
            n_candidates=cfg.n_candidates,
            min_ratings=cfg.min_ratings,
            min_year=cfg.min_year,
        )
    logger.info("Bootstrap candidates: %d movies", len(candidate_ids))

    root = build_tree_from_ratings(
        ratings,
        candidate_ids,
        levels=cfg.levels,
        threshold=cfg.lover_threshold,
    )
    levels = level_order(root)

    tree_path = out_dir / "tree.json"
    levels_path = out_dir / "levels.json"
    meta_path = out_dir / "bootstrap_meta.json"

    tree_path.write_text(json.dumps(tree_to_dict(root), indent=2) + "\n")
    levels_path.write_text(json.dumps(levels) + "\n")

    meta = {
        "built_at_utc": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "config": asdict(cfg),
        "candidate_ids": [int(m) for m in candidate_ids],
        "n_ratings": int(len(ratings)),
        "depth": tree_depth(root),
        "level_sizes": [len(lv) for lv in levels],
    }
    meta_path.write_text(json.dumps(meta, indent=2, sort_keys=True) + "\n")
    logger.info("Bootstrap tree saved to %s depth=%d level_sizes=%s", out_dir, meta["depth"], meta["level_sizes"])

    return BootstrapArtifacts(tree_path=tree_path, levels_path=levels_path, meta_path=meta_path)


def load_bootstrap_tree(artifacts_dir: Path) -> TreeNode:
    tree_path = Path(artifacts_dir) / "tree.json"
    if not tree_path.exists():
        raise FileNotFoundError(f"Bootstrap tree not found under {artifacts_dir}. Run the build pipeline first.")
    return tree_from_dict(json.loads(tree_path.read_text()))
