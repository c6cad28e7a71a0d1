from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

import pandas as pd


@dataclass(frozen=True)
class RawMovieLensData:
    movies: pd.DataFrame
    ratings: pd.DataFrame


REQUIRED_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "movies": ("movieId", "title", "genres"),
    "ratings": ("userId", "movieId", "rating", "timestamp"),
}


def load_raw_data(raw_dir: Path) -> RawMovieLensData:
    """Load `movies.csv` and `ratings.csv` from a MovieLens directory.

    Dtypes are set explicitly so downstream code sees int64 ids and float64
    ratings regardless of what the CSV happens to contain.
    """
    raw_dir = Path(raw_dir)
    missing = [name for name in ("movies.csv", "ratings.csv") if not (raw_dir / name).exists()]
    if missing:
        raise FileNotFoundError(f"Missing raw dataset files in {raw_dir}: {missing}")

    movies = pd.read_csv(
        raw_dir / "movies.csv",
        dtype={"movieId": "int64", "title": "string", "genres": "string"},
    )
    ratings = pd.read_csv(
        raw_dir / "ratings.csv",
        dtype={"userId": "int64", "movieId": "int64", "rating": "float64", "timestamp": "int64"},
    )

    data = RawMovieLensData(movies=movies, ratings=ratings)
    validate_schema(data)
    return data


def validate_schema(data: RawMovieLensData) -> None:
    """Validate that all required columns exist and basic constraints hold."""
    for name, cols in REQUIRED_COLUMNS.items():
        df = getattr(data, name)
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise ValueError(f"{name}.csv missing columns: {missing}")

    if data.movies["movieId"].duplicated().any():
        raise ValueError("movies.csv has duplicate movieId values")

    # Ratings must reference known movies.
    movie_ids = set(data.movies["movieId"].astype("int64").tolist())
    bad_ratings = set(data.ratings["movieId"].astype("int64").tolist()) - movie_ids
    if bad_ratings:
        raise ValueError(f"ratings.csv has {len(bad_ratings)} movieIds not in movies.csv")

    ratings = data.ratings
    if (ratings["timestamp"] < 0).any():
        raise ValueError("ratings.csv contains negative timestamps")

    # Allowed values: 0.5, 1.0, ..., 5.0 (half-star increments)
    # Use integer arithmetic to avoid float representation edge cases.
    scaled = (ratings["rating"] * 2).round().astype("int64")
    valid_scaled = set(range(1, 11))  # 0.5..5.0 => 1..10 after *2
    off_grid = (ratings["rating"] * 2 - scaled).abs() > 1e-9
    bad_mask = ~scaled.isin(valid_scaled) | ~ratings["rating"].between(0.5, 5.0) | off_grid
    if bad_mask.any():
        bad_values = sorted(set(ratings.loc[bad_mask, "rating"].tolist()))
        raise ValueError(f"ratings.csv has invalid rating values (expected half-stars 0.5..5.0): {bad_values}")

    if ratings.duplicated(subset=["userId", "movieId"]).any():
        raise ValueError("ratings.csv contains duplicate (userId, movieId) rows")
