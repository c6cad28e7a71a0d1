from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from coldstart_rec.bootstrap.build import BootstrapConfig, build_and_save_bootstrap_tree, load_bootstrap_tree
from coldstart_rec.bootstrap.serialize import level_order
from coldstart_rec.bootstrap.tree import Split
from coldstart_rec.pipelines.bootstrap_build import run_bootstrap_build


def _write_movielens(raw_dir: Path) -> None:
    raw_dir.mkdir(parents=True, exist_ok=True)
    movies = pd.DataFrame(
        {
            "movieId": [1, 2, 3, 4],
            "title": ["Toy Story (1995)", "Heat (1995)", "Casino (1995)", "Old Film (1950)"],
            "genres": ["Animation|Comedy", "Action|Crime", "Crime|Drama", "Drama"],
        }
    )
    rows = [
        (1, 1, 5.0), (1, 2, 5.0), (1, 3, 1.0),
        (2, 1, 5.0), (2, 2, 4.0), (2, 3, 1.0), (2, 4, 3.0),
        (3, 1, 1.0), (3, 2, 1.0), (3, 3, 5.0),
        (4, 1, 1.0), (4, 2, 2.0), (4, 3, 5.0),
    ]
    ratings = pd.DataFrame(rows, columns=["userId", "movieId", "rating"])
    ratings["timestamp"] = range(len(ratings))
    movies.to_csv(raw_dir / "movies.csv", index=False)
    ratings.to_csv(raw_dir / "ratings.csv", index=False)


def test_bootstrap_config_from_mapping_overrides() -> None:
    cfg = BootstrapConfig.from_mapping({"levels": 4, "min_year": 1990, "lover_threshold": 4}, levels=2)
    assert cfg == BootstrapConfig(n_candidates=50, min_ratings=1, min_year=1990, levels=2, lover_threshold=4.0)


def test_build_and_save_writes_tree_levels_and_meta(tmp_path) -> None:
    raw_dir = tmp_path / "raw"
    _write_movielens(raw_dir)
    ratings = pd.read_csv(raw_dir / "ratings.csv")

    cfg = BootstrapConfig(n_candidates=3, levels=2)
    artifacts = build_and_save_bootstrap_tree(ratings, out_dir=tmp_path / "bootstrap", cfg=cfg)

    root = load_bootstrap_tree(tmp_path / "bootstrap")
    assert isinstance(root, Split)
    assert root.movieId == 2

    levels = json.loads(artifacts.levels_path.read_text())
    assert levels == [[2], [1, None, 1]]
    assert levels == level_order(root)

    meta = json.loads(artifacts.meta_path.read_text())
    assert meta["candidate_ids"] == [1, 2, 3]
    assert meta["depth"] == 2
    assert meta["level_sizes"] == [1, 3]


def test_build_rejects_missing_columns(tmp_path) -> None:
    with pytest.raises(ValueError):
        build_and_save_bootstrap_tree(
            pd.DataFrame({"userId": [1], "movieId": [1]}),
            out_dir=tmp_path,
            cfg=BootstrapConfig(),
        )


def test_load_bootstrap_tree_missing(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_bootstrap_tree(tmp_path)


def test_run_bootstrap_build_from_config(tmp_path) -> None:
    _write_movielens(tmp_path / "data" / "raw")
    (tmp_path / "config.yaml").write_text(
        "dataset:\n"
        "  raw_dir: data/raw\n"
        "bootstrap:\n"
        "  n_candidates: 3\n"
        "  min_year: 1990\n"
        "  levels: 3\n"
    )

    out = run_bootstrap_build(config_path=Path("config.yaml"), levels=1, repo_root=tmp_path)

    assert Path(out["tree"]).parent == (tmp_path / "artifacts" / "bootstrap").resolve()
    assert json.loads(Path(out["levels"]).read_text()) == [[2]]
    meta = json.loads(Path(out["meta"]).read_text())
    assert meta["config"]["levels"] == 1
    assert 4 not in meta["candidate_ids"]
