from __future__ import annotations

import re
from typing import Optional

import pandas as pd


_TITLE_YEAR_RE = re.compile(r"\((\d{4})\)\s*$")


def split_title_and_year(title: str) -> tuple[str, Optional[int]]:
    """Split a MovieLens `title` into (title_clean, year) when it ends with '(YYYY)'."""
    title = "" if title is None else str(title)
    title = title.strip()

    match = _TITLE_YEAR_RE.search(title)
    if not match:
        return title, None

    year = int(match.group(1))
    title_clean = title[: match.start()].rstrip()
    return title_clean, year


def parse_genres(genres: str) -> list[str]:
    """Parse pipe-separated genre tokens into a list."""
    if genres is None or (not isinstance(genres, str) and pd.isna(genres)):
        return []
    tokens = [g.strip() for g in str(genres).split("|")]
    return [t for t in tokens if t and t != "(no genres listed)"]


def build_movie_table(movies: pd.DataFrame) -> pd.DataFrame:
    """Add `title_clean`, `year` and `genres_text` display columns to movies.csv rows."""
    out = movies[["movieId", "title", "genres"]].copy()
    title_year = out["title"].astype(str).apply(split_title_and_year)
    out["title_clean"] = title_year.apply(lambda x: x[0])
    out["year"] = pd.array(title_year.apply(lambda x: x[1]).tolist(), dtype="Int64")
    out["genres_text"] = out["genres"].apply(lambda g: ", ".join(parse_genres(g)))
    return out


def aggregate_ratings(ratings_df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate ratings per movie: count, mean and sample std."""
    if ratings_df.empty:
        return pd.DataFrame(columns=["movieId", "rating_count", "rating_mean", "rating_std"])

    grouped = ratings_df.groupby("movieId")["rating"]
    agg = grouped.agg(["count", "mean", "std"]).reset_index()
    return agg.rename(columns={"count": "rating_count", "mean": "rating_mean", "std": "rating_std"})


def select_candidate_movies(
    ratings_df: pd.DataFrame,
    movies_df: pd.DataFrame | None = None,
    *,
    n_candidates: int,
    min_ratings: int = 1,
    min_year: int | None = None,
) -> list[int]:
    """Pick the most-rated movies as the fixed candidate set for bootstrapping.

    Ordering is by rating count (desc) then movieId (asc), so the result is
    deterministic. `min_year` needs `movies_df` to read release years from titles.
    """
    agg = aggregate_ratings(ratings_df)
    agg = agg[agg["rating_count"] >= int(min_ratings)]

    if min_year is not None:
        if movies_df is None:
            raise ValueError("min_year filtering requires movies_df")
        table = build_movie_table(movies_df)[["movieId", "year"]]
        agg = agg.merge(table, on="movieId", how="left")
        agg = agg[agg["year"].notna() & (agg["year"].fillna(0) >= int(min_year))]

    agg = agg.sort_values(["rating_count", "movieId"], ascending=[False, True], kind="mergesort")
    return [int(m) for m in agg["movieId"].head(int(n_candidates)).tolist()]
