from __future__ import annotations

import pandas as pd
import pytest

from coldstart_rec.features import build_movie_table, parse_genres, select_candidate_movies, split_title_and_year


def test_split_title_and_year_strips_trailing_year() -> None:
    assert split_title_and_year("Grumpier Old Men (1995)") == ("Grumpier Old Men", 1995)
    assert split_title_and_year("Babylon 5") == ("Babylon 5", None)
    assert split_title_and_year("  Heat (1995)  ") == ("Heat", 1995)


def test_parse_genres_drops_placeholder() -> None:
    assert parse_genres("Comedy|Romance") == ["Comedy", "Romance"]
    assert parse_genres("(no genres listed)") == []
    assert parse_genres(None) == []


def test_build_movie_table_adds_display_columns() -> None:
    movies = pd.DataFrame(
        {"movieId": [1, 2], "title": ["Toy Story (1995)", "Untitled"], "genres": ["Animation|Comedy", "Drama"]}
    )
    table = build_movie_table(movies)

    assert table["title_clean"].tolist() == ["Toy Story", "Untitled"]
    assert int(table.loc[0, "year"]) == 1995
    assert pd.isna(table.loc[1, "year"])
    assert table["genres_text"].tolist() == ["Animation, Comedy", "Drama"]


def test_select_candidate_movies_orders_by_count_then_id() -> None:
    ratings = pd.DataFrame(
        {
            "userId": [1, 2, 3, 1, 2, 1, 2, 3, 1],
            "movieId": [10, 10, 10, 20, 20, 30, 30, 30, 40],
            "rating": [4.0, 3.0, 5.0, 2.0, 1.0, 4.0, 4.5, 2.5, 3.0],
        }
    )

    assert select_candidate_movies(ratings, n_candidates=3) == [10, 30, 20]
    assert select_candidate_movies(ratings, n_candidates=10, min_ratings=2) == [10, 30, 20]


def test_select_candidate_movies_year_filter() -> None:
    ratings = pd.DataFrame({"userId": [1, 2, 1], "movieId": [10, 10, 20], "rating": [4.0, 3.0, 2.0]})
    movies = pd.DataFrame(
        {"movieId": [10, 20], "title": ["Old (1950)", "New (2001)"], "genres": ["Drama", "Drama"]}
    )

    assert select_candidate_movies(ratings, movies, n_candidates=5, min_year=2000) == [20]
    with pytest.raises(ValueError):
        select_candidate_movies(ratings, n_candidates=5, min_year=2000)
