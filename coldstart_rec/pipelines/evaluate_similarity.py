from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from ..data import load_raw_data
from ..paths import ProjectPaths, get_repo_root, resolve_under_root
from ..user_cf.evaluate import evaluate_similarity_measures
from ..utils import config_section, load_config, setup_logging


logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compare Pearson vs cosine neighborhoods by hold-out RMSE.")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--k", type=int, default=None, help="Neighborhood size")
    p.add_argument("--max-test-rows", type=int, default=None, help="Cap the number of test ratings")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)
    repo_root = get_repo_root()
    config = load_config(resolve_under_root(repo_root, args.config))

    dataset_cfg = config_section(config, "dataset")
    user_cf_cfg = config_section(config, "user_cf")
    eval_cfg = config_section(config, "evaluation")
    paths = ProjectPaths.from_repo_root(repo_root, raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")))

    data = load_raw_data(paths.raw_dir)
    max_rows = args.max_test_rows if args.max_test_rows is not None else eval_cfg.get("max_test_rows")
    results = evaluate_similarity_measures(
        data.ratings,
        k=int(args.k or user_cf_cfg.get("k_neighbors", 10)),
        min_common_rated=int(user_cf_cfg.get("min_common_rated", 3)),
        test_size=float(eval_cfg.get("test_size", 0.1)),
        random_state=int(eval_cfg.get("random_state", 42)),
        max_test_rows=(None if max_rows is None else int(max_rows)),
    )

    print("\n=== Similarity RMSE ===")
    print(pd.DataFrame([r.__dict__ for r in results]).to_string(index=False))


if __name__ == "__main__":
    main()
