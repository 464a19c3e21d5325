"""Exceptions raised while talking to Twitch and IGDB."""

from __future__ import annotations

__all__ = [
    "AuthError",
    "ConfigError",
    "IGDBError",
    "UpstreamError",
]


class IGDBError(RuntimeError):
    """Base class for failures surfaced by the IGDB integration."""


class ConfigError(IGDBError):
    """Raised when required Twitch credentials are not configured."""


class _HTTPFailure(IGDBError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthError(_HTTPFailure):
    """Raised when the Twitch client-credentials exchange fails."""


class UpstreamError(_HTTPFailure):
    """Raised when the IGDB API answers with a non-success status."""
