from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from ..bootstrap.build import BootstrapConfig, build_and_save_bootstrap_tree
from ..data import load_raw_data
from ..paths import ProjectPaths, get_repo_root, resolve_under_root
from ..utils import config_section, load_config, setup_logging


logger = logging.getLogger(__name__)


def run_bootstrap_build(
    *,
    config_path: Path,
    out_dir: Path | None = None,
    levels: int | None = None,
    n_candidates: int | None = None,
    repo_root: Path | None = None,
) -> dict[str, Any]:
    """Load MovieLens data per config, build the bootstrap tree and write its artifacts."""
    repo_root = repo_root or get_repo_root()
    config = load_config(resolve_under_root(repo_root, config_path))

    dataset_cfg = config_section(config, "dataset")
    paths = ProjectPaths.from_repo_root(
        repo_root,
        raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
        processed_dir=str(dataset_cfg.get("processed_dir", "data/processed")),
    )

    cfg = BootstrapConfig.from_mapping(
        config_section(config, "bootstrap"),
        levels=levels,
        n_candidates=n_candidates,
    )

    logger.info("Loading raw data from %s", paths.raw_dir)
    data = load_raw_data(paths.raw_dir)

    target = resolve_under_root(repo_root, out_dir) if out_dir is not None else paths.bootstrap_dir
    logger.info("Building bootstrap artifacts to %s", target)
    artifacts = build_and_save_bootstrap_tree(data.ratings, out_dir=target, cfg=cfg, movies=data.movies)

    return {
        "tree": str(artifacts.tree_path),
        "levels": str(artifacts.levels_path),
        "meta": str(artifacts.meta_path),
    }


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Build the cold-start bootstrap question tree.")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--out-dir", type=Path, default=None, help="Output directory for artifacts")
    p.add_argument("--levels", type=int, default=None, help="Override tree depth")
    p.add_argument("--n-candidates", type=int, default=None, help="Override candidate set size")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)
    run_bootstrap_build(
        config_path=args.config,
        out_dir=args.out_dir,
        levels=args.levels,
        n_candidates=args.n_candidates,
    )


if __name__ == "__main__":
    main()
