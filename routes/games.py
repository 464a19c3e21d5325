"""Game catalogue API routes proxied to IGDB."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from flask import Blueprint, Response, jsonify, request
from werkzeug.exceptions import MethodNotAllowed

from igdb.query import QueryParams, build_query
from igdb.scoring import ScoringConfig, build_top_rated_query, describe, score_and_rank
from routes.api_utils import MethodNotAllowedError, ValidationError, handle_api_errors

logger = logging.getLogger(__name__)

games_blueprint = Blueprint("games", __name__)

_context: dict[str, Any] = {}

# Common verbs are routed here; anything else reaches method_not_allowed.
_ROUTED_METHODS = ["GET", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]


def configure(context: Mapping[str, Any]) -> None:
    """Provide the IGDB client and settings used by the game endpoints."""
    _context.update(context)


def _ctx(key: str) -> Any:
    if key not in _context:
        raise RuntimeError(f"games routes missing context value: {key}")
    return _context[key]


def _igdb_client():
    return _ctx("igdb_client")


def _now() -> int:
    clock: Callable[[], float] = _ctx("clock")
    return int(clock())


def _cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": _ctx("cors_allow_origin"),
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


@games_blueprint.after_request
def apply_cors_headers(response: Response) -> Response:
    for key, value in _cors_headers().items():
        response.headers[key] = value
    return response


@games_blueprint.app_errorhandler(MethodNotAllowed)
def method_not_allowed(exc: MethodNotAllowed):
    logger.warning("Rejected %s %s: method not allowed", request.method, request.path)
    response = jsonify(MethodNotAllowedError().to_dict())
    response.status_code = 405
    if exc.valid_methods:
        response.headers["Allow"] = ", ".join(exc.valid_methods)
    return response


def _preflight_or_require_get() -> Response | None:
    if request.method == "OPTIONS":
        return Response(status=200)
    if request.method not in ("GET", "HEAD"):
        raise MethodNotAllowedError()
    return None


@games_blueprint.route("/games", methods=_ROUTED_METHODS)
@handle_api_errors
def list_games():
    preflight = _preflight_or_require_get()
    if preflight is not None:
        return preflight

    params = QueryParams.from_args(request.args)
    body = build_query(params, default_limit=_ctx("default_query_limit"))
    return jsonify(_igdb_client().query_games(body))


@games_blueprint.route("/games/search", methods=_ROUTED_METHODS)
@handle_api_errors
def search_games():
    preflight = _preflight_or_require_get()
    if preflight is not None:
        return preflight

    text = (request.args.get("q") or "").strip()
    if not text:
        raise ValidationError("Missing search query")
    return jsonify(_igdb_client().search_games(text))


@games_blueprint.route("/games/top-rated", methods=_ROUTED_METHODS)
@handle_api_errors
def top_rated_games():
    preflight = _preflight_or_require_get()
    if preflight is not None:
        return preflight

    config: ScoringConfig = _ctx("scoring_config")
    now = _now()
    candidates = _igdb_client().query_games(build_top_rated_query(now))
    if not isinstance(candidates, list):
        logger.warning(
            "IGDB top rated query returned %s instead of a list; ranking nothing",
            type(candidates).__name__,
        )
        candidates = []
    ranked = score_and_rank(candidates, config)
    return jsonify(
        {
            "meta": describe(config, now=now, total=len(ranked)),
            "games": ranked,
        }
    )


@games_blueprint.route("/games/<game_id>", methods=_ROUTED_METHODS)
@handle_api_errors
def game_detail(game_id: str):
    preflight = _preflight_or_require_get()
    if preflight is not None:
        return preflight

    text = (game_id or "").strip()
    if not text:
        raise ValidationError("Missing game ID")
    if not (text.isascii() and text.isdecimal()) or int(text) <= 0:
        raise ValidationError("Invalid game ID")
    return jsonify(_igdb_client().get_game(int(text)))
