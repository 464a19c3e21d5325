"""Tests for weighted-rating scoring and ranking."""

import pytest

from igdb.scoring import (
    ScoringConfig,
    build_top_rated_query,
    describe,
    pick_rating_basis,
    score_and_rank,
    weighted_rating,
)


def _wr(rating, votes):
    return weighted_rating(rating, votes, prior_votes=500, prior_mean=82)


def test_weighted_rating_matches_worked_example():
    assert _wr(90, 1000) == pytest.approx(87.3333, abs=1e-4)


def test_weighted_rating_increases_with_rating():
    scores = [_wr(rating, 250) for rating in (60, 70, 80, 90, 100)]
    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)


def test_weighted_rating_increases_with_votes_above_prior_mean():
    scores = [_wr(95, votes) for votes in (1, 10, 100, 1_000, 10_000)]
    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)
    assert _wr(95, 10**9) == pytest.approx(95, abs=1e-3)


def test_weighted_rating_rejects_zero_weights():
    with pytest.raises(ValueError):
        weighted_rating(90, 0, prior_votes=0, prior_mean=82)


def test_score_and_rank_scores_total_basis():
    games = [{"id": 1, "name": "Example", "total_rating": 90, "total_rating_count": 1000}]

    ranked = score_and_rank(games, ScoringConfig())

    assert ranked == [
        {
            "id": 1,
            "name": "Example",
            "total_rating": 90,
            "total_rating_count": 1000,
            "basis": "total",
            "weightedRating": 87.33,
        }
    ]
    assert "weightedRating" not in games[0]


def test_pick_rating_basis_falls_back_by_priority():
    config = ScoringConfig()
    agg_game = {
        "total_rating": 99,
        "total_rating_count": 50,
        "aggregated_rating": 95,
        "aggregated_rating_count": 10,
    }
    user_game = {
        "aggregated_rating": 95,
        "aggregated_rating_count": 3,
        "rating": 88,
        "rating_count": 2000,
    }

    assert pick_rating_basis(agg_game, config).basis == "agg"
    assert pick_rating_basis(user_game, config).basis == "user"


def test_score_and_rank_excludes_unrated_games():
    games = [
        {"id": 1, "name": "No ratings"},
        {"id": 2, "rating": 95},
        {"id": 3, "total_rating": 90, "total_rating_count": 10},
        {"id": 4, "total_rating": True, "total_rating_count": 1000},
        {"id": 5, "rating": 88, "rating_count": 2000},
    ]

    ranked = score_and_rank(games, ScoringConfig())

    assert [game["id"] for game in ranked] == [5]
    assert ranked[0]["weightedRating"] == 86.8


def test_score_and_rank_sorts_descending_and_truncates():
    games = [
        {"id": 1, "aggregated_rating": 95, "aggregated_rating_count": 10},
        {"id": 2, "total_rating": 90, "total_rating_count": 1000},
        {"id": 3, "rating": 88, "rating_count": 2000},
    ]

    ranked = score_and_rank(games, ScoringConfig(top_n=2))

    assert [game["id"] for game in ranked] == [2, 3]
    assert [game["weightedRating"] for game in ranked] == [87.33, 86.8]


def test_score_and_rank_keeps_upstream_order_for_ties():
    games = [
        {"id": 7, "total_rating": 90, "total_rating_count": 1000},
        {"id": 3, "total_rating": 90, "total_rating_count": 1000},
    ]

    ranked = score_and_rank(games, ScoringConfig())

    assert [game["id"] for game in ranked] == [7, 3]


def test_score_and_rank_uses_configured_constants():
    games = [{"id": 1, "rating": 90, "rating_count": 10}]
    config = ScoringConfig(prior_votes=10, prior_mean=70, min_user_votes=10)

    ranked = score_and_rank(games, config)

    assert ranked[0]["weightedRating"] == 80.0
    assert ranked[0]["basis"] == "user"


def test_build_top_rated_query():
    body = build_top_rated_query(1_700_000_000)
    lines = body.split("\n")

    assert lines[0].startswith("fields id,name,slug,first_release_date")
    assert lines[1].startswith("where category = (0,4,8,9) & version_parent = null")
    assert "first_release_date < 1700000000" in lines[1]
    assert "(follows >= 100 | hypes >= 50);" in lines[1]
    assert lines[2:] == ["sort total_rating desc;", "limit 500;"]


def test_describe_reports_formula_and_constants():
    meta = describe(ScoringConfig(), now=1_700_000_000, total=3)

    assert meta["formula"] == "WR = (v/(v+m))*R + (m/(v+m))*C"
    assert meta["m"] == 500
    assert meta["C"] == 82
    assert meta["total"] == 3
    assert meta["thresholds"]["rating_count"] == 1500
