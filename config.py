"""Application-wide configuration helpers and constants."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

BASE_DIR: Final[Path] = Path(__file__).resolve().parent

load_dotenv(BASE_DIR / ".env")


logger = logging.getLogger(__name__)


def _clean_text(value: str | None) -> str:
    """Return ``value`` stripped of surrounding whitespace."""

    if value is None:
        return ""
    return value.strip()


def _path_from(env_value: str | None, default: str | Path) -> Path:
    """Resolve a filesystem path using an environment override when provided."""

    text = _clean_text(env_value)
    candidate = Path(text) if text else Path(default)
    candidate = candidate.expanduser()
    if candidate.is_absolute():
        try:
            return candidate.resolve()
        except (OSError, RuntimeError):  # pragma: no cover - fallback for exotic paths
            return candidate
    return candidate


def _coerce_positive_float(value: str | None, default: float) -> float:
    """Return ``value`` coerced to a positive float or ``default`` when invalid."""

    text = _clean_text(value)
    if not text:
        return default
    try:
        numeric = float(text)
    except (TypeError, ValueError):
        return default
    return numeric if numeric > 0 else default


def _coerce_positive_int(value: str | None, default: int) -> int:
    """Return ``value`` coerced to a positive integer or ``default`` when invalid."""

    text = _clean_text(value)
    if not text:
        return default
    try:
        numeric = int(float(text))
    except (TypeError, ValueError):
        return default
    return numeric if numeric > 0 else default


LOG_DIR_PATH: Final[Path] = _path_from(os.environ.get("LOG_DIR"), BASE_DIR / "logs")
LOG_DIR: Final[str] = os.fspath(LOG_DIR_PATH)
LOG_FILE_PATH: Final[Path] = _path_from(
    os.environ.get("LOG_FILE"), LOG_DIR_PATH / "app.log"
)
LOG_FILE: Final[str] = os.fspath(LOG_FILE_PATH)

TWITCH_CLIENT_ID: Final[str] = _clean_text(os.environ.get("TWITCH_CLIENT_ID"))
TWITCH_CLIENT_SECRET: Final[str] = _clean_text(os.environ.get("TWITCH_CLIENT_SECRET"))

DEFAULT_IGDB_USER_AGENT: Final[str] = "igdb-query-proxy/1.0"
IGDB_USER_AGENT: Final[str] = (
    _clean_text(os.environ.get("IGDB_USER_AGENT")) or DEFAULT_IGDB_USER_AGENT
)
IGDB_TIMEOUT_SECONDS: Final[float] = _coerce_positive_float(
    os.environ.get("IGDB_TIMEOUT_SECONDS"), 10.0
)

CORS_ALLOW_ORIGIN: Final[str] = _clean_text(os.environ.get("CORS_ALLOW_ORIGIN")) or "*"

DEFAULT_QUERY_LIMIT: Final[int] = min(
    _coerce_positive_int(os.environ.get("DEFAULT_QUERY_LIMIT"), 500), 500
)

TOP_RATED_PRIOR_VOTES: Final[float] = _coerce_positive_float(
    os.environ.get("TOP_RATED_PRIOR_VOTES"), 500.0
)
TOP_RATED_PRIOR_MEAN: Final[float] = _coerce_positive_float(
    os.environ.get("TOP_RATED_PRIOR_MEAN"), 82.0
)
TOP_RATED_MIN_TOTAL_VOTES: Final[float] = _coerce_positive_float(
    os.environ.get("TOP_RATED_MIN_TOTAL_VOTES"), 100.0
)
TOP_RATED_MIN_AGG_VOTES: Final[float] = _coerce_positive_float(
    os.environ.get("TOP_RATED_MIN_AGG_VOTES"), 5.0
)
TOP_RATED_MIN_USER_VOTES: Final[float] = _coerce_positive_float(
    os.environ.get("TOP_RATED_MIN_USER_VOTES"), 1500.0
)
TOP_RATED_LIMIT: Final[int] = _coerce_positive_int(
    os.environ.get("TOP_RATED_LIMIT"), 100
)


def validate_twitch_credentials() -> bool:
    """Log missing Twitch credentials and return whether both are configured."""

    missing = [
        name
        for name, value in (
            ("TWITCH_CLIENT_ID", TWITCH_CLIENT_ID),
            ("TWITCH_CLIENT_SECRET", TWITCH_CLIENT_SECRET),
        )
        if not value
    ]
    if missing:
        logger.error(
            "Missing required Twitch credentials; set %s.", " and ".join(missing)
        )
    return not missing


__all__ = [
    "BASE_DIR",
    "CORS_ALLOW_ORIGIN",
    "DEFAULT_IGDB_USER_AGENT",
    "DEFAULT_QUERY_LIMIT",
    "IGDB_TIMEOUT_SECONDS",
    "IGDB_USER_AGENT",
    "LOG_DIR",
    "LOG_DIR_PATH",
    "LOG_FILE",
    "LOG_FILE_PATH",
    "TOP_RATED_LIMIT",
    "TOP_RATED_MIN_AGG_VOTES",
    "TOP_RATED_MIN_TOTAL_VOTES",
    "TOP_RATED_MIN_USER_VOTES",
    "TOP_RATED_PRIOR_MEAN",
    "TOP_RATED_PRIOR_VOTES",
    "TWITCH_CLIENT_ID",
    "TWITCH_CLIENT_SECRET",
    "validate_twitch_credentials",
]
