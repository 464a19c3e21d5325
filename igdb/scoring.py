"""Weighted-rating scoring for the top rated games listing.

Each game is scored with the IMDB-style weighted rating::

    WR = (v / (v + m)) * R + (m / (v + m)) * C

where ``R`` is the game's rating, ``v`` the number of votes behind it, ``m``
the number of prior votes and ``C`` the prior mean rating. The rating source
(the *basis*) is picked per game: total rating first, then the critic
aggregate, then the user rating, each only when its vote count reaches the
configured minimum.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, NamedTuple

from igdb.query import QueryParams, build_query

logger = logging.getLogger(__name__)


__all__ = [
    "FORMULA",
    "RatingBasis",
    "ScoringConfig",
    "build_top_rated_query",
    "describe",
    "pick_rating_basis",
    "score_and_rank",
    "weighted_rating",
]

Basis = Literal["total", "agg", "user"]

FORMULA = "WR = (v/(v+m))*R + (m/(v+m))*C"

TOP_RATED_FIELDS = ",".join(
    (
        "id",
        "name",
        "slug",
        "first_release_date",
        "category",
        "version_parent",
        "status",
        "total_rating",
        "total_rating_count",
        "aggregated_rating",
        "aggregated_rating_count",
        "rating",
        "rating_count",
        "follows",
        "hypes",
        "cover.url",
        "platforms.name",
    )
)
TOP_RATED_SORT = "total_rating desc"
TOP_RATED_FETCH_LIMIT = 500

# Main game, standalone expansion, remake, remaster.
TOP_RATED_CATEGORIES = (0, 4, 8, 9)


@dataclass(frozen=True)
class ScoringConfig:
    prior_votes: float = 500
    prior_mean: float = 82
    min_total_votes: float = 100
    min_aggregated_votes: float = 5
    min_user_votes: float = 1500
    top_n: int = 100


class RatingBasis(NamedTuple):
    rating: float
    votes: float
    basis: Basis


def _real(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def weighted_rating(
    rating: float,
    votes: float,
    *,
    prior_votes: float,
    prior_mean: float,
) -> float:
    total = votes + prior_votes
    if total <= 0:
        raise ValueError("votes and prior_votes must not both be zero")
    return (votes / total) * rating + (prior_votes / total) * prior_mean


def pick_rating_basis(
    game: Mapping[str, Any], config: ScoringConfig
) -> RatingBasis | None:
    """Return the rating source used for ``game`` or ``None`` when none qualifies."""

    candidates: tuple[tuple[str, str, float, Basis], ...] = (
        ("total_rating", "total_rating_count", config.min_total_votes, "total"),
        ("aggregated_rating", "aggregated_rating_count", config.min_aggregated_votes, "agg"),
        ("rating", "rating_count", config.min_user_votes, "user"),
    )
    for rating_key, count_key, minimum, basis in candidates:
        rating = _real(game.get(rating_key))
        votes = _real(game.get(count_key))
        if rating is None or votes is None:
            continue
        if votes >= minimum and votes + config.prior_votes > 0:
            return RatingBasis(rating, votes, basis)
    return None


def score_and_rank(
    games: Iterable[Mapping[str, Any]],
    config: ScoringConfig | None = None,
) -> list[dict[str, Any]]:
    """Return the top ``config.top_n`` games ordered by weighted rating.

    Games without a qualifying rating basis are dropped rather than scored as
    zero. Ties keep their upstream order.
    """

    config = config or ScoringConfig()
    scored: list[dict[str, Any]] = []
    skipped = 0
    for game in games:
        if not isinstance(game, Mapping):
            skipped += 1
            continue
        picked = pick_rating_basis(game, config)
        if picked is None:
            skipped += 1
            continue
        wr = weighted_rating(
            picked.rating,
            picked.votes,
            prior_votes=config.prior_votes,
            prior_mean=config.prior_mean,
        )
        entry = dict(game)
        entry["basis"] = picked.basis
        entry["weightedRating"] = round(wr, 2)
        scored.append(entry)

    if skipped:
        logger.debug("Skipped %s games without a qualifying rating basis", skipped)

    scored.sort(key=lambda entry: entry["weightedRating"], reverse=True)
    return scored[: max(0, config.top_n)]


def _top_rated_where(now: int) -> str:
    categories = ",".join(str(value) for value in TOP_RATED_CATEGORIES)
    return " & ".join(
        (
            f"category = ({categories})",
            "version_parent = null",
            "(status = 0 | status = null)",
            f"first_release_date < {int(now)}",
            "(total_rating != null | aggregated_rating != null | rating != null)",
            "(total_rating_count >= 20 | aggregated_rating_count >= 5 | rating_count >= 500)",
            "(follows >= 100 | hypes >= 50)",
        )
    )


def build_top_rated_query(now: int) -> str:
    """Return the candidate query for games released before ``now`` (epoch seconds)."""

    return build_query(
        QueryParams(
            select=TOP_RATED_FIELDS,
            filter=_top_rated_where(now),
            sort=TOP_RATED_SORT,
            limit=TOP_RATED_FETCH_LIMIT,
        ),
        normalize_logic=False,
    )


def describe(config: ScoringConfig, *, now: int, total: int) -> dict[str, Any]:
    return {
        "formula": FORMULA,
        "C": config.prior_mean,
        "m": config.prior_votes,
        "thresholds": {
            "total_rating_count": config.min_total_votes,
            "aggregated_rating_count": config.min_aggregated_votes,
            "rating_count": config.min_user_votes,
        },
        "filter": _top_rated_where(now),
        "selection": TOP_RATED_FIELDS,
        "sort": "weightedRating desc (computed)",
        "limit": config.top_n,
        "total": total,
    }
