from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from ..paths import ProjectPaths, get_repo_root, resolve_under_root
from ..utils import config_section, load_config, setup_logging
from .recommender import RecommenderConfig, UserUserCFRecommender


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="User-user collaborative filtering (similar rating patterns)")
    p.add_argument("--user-id", type=int, required=True, help="MovieLens userId (raw id from ratings.csv)")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--similarity", choices=["pearson", "cosine"], default=None, help="Similarity measure")
    p.add_argument("--k", type=int, default=None, help="Neighborhood size")
    p.add_argument("--n", type=int, default=None, help="How many movie recommendations to return")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)
    repo_root = get_repo_root()
    config = load_config(resolve_under_root(repo_root, args.config))

    dataset_cfg = config_section(config, "dataset")
    paths = ProjectPaths.from_repo_root(repo_root, raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")))
    cfg = RecommenderConfig.from_mapping(
        config_section(config, "user_cf"),
        similarity=args.similarity,
        k_neighbors=args.k,
        n_recommendations=args.n,
    )
    rec = UserUserCFRecommender.from_raw_dir(paths.raw_dir, config=cfg)

    sims = rec.similar_users(int(args.user_id))
    recs = rec.recommend_movies(int(args.user_id))

    print("\n=== Similar Users ===")
    if sims:
        df_s = pd.DataFrame([s.__dict__ for s in sims])
        print(df_s.to_string(index=False))
    else:
        print(f"No similar users found (need at least {cfg.min_common_rated} commonly-rated movies).")

    print("\n=== Recommended Movies ===")
    if recs:
        df_r = pd.DataFrame([r.__dict__ for r in recs])
        print(df_r.to_string(index=False))
    else:
        print("Not enough data to recommend.")


if __name__ == "__main__":
    main()
