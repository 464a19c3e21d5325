"""Twitch app-access token exchange and in-memory caching."""

from __future__ import annotations

import json
import logging
import numbers
import os
import time
from threading import Lock
from typing import Any, Callable, Mapping

from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from igdb.errors import AuthError, ConfigError

logger = logging.getLogger(__name__)


__all__ = [
    "TOKEN_REFRESH_MARGIN_SECONDS",
    "TokenManager",
    "read_http_error",
]

TOKEN_REFRESH_MARGIN_SECONDS = 60.0


class TokenManager:
    """Obtain a Twitch bearer token and reuse it until it is close to expiry.

    One instance is built per process and handed to whatever needs a token.
    The cached token is treated as expired once ``now`` is within
    :data:`TOKEN_REFRESH_MARGIN_SECONDS` of its expiry instant.
    """

    TOKEN_URL = "https://id.twitch.tv/oauth2/token"

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float = 10.0,
        refresh_margin: float = TOKEN_REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] | None = None,
        request_factory: Callable[..., Any] | None = None,
        opener: Callable[..., Any] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._client_id = (client_id or "").strip()
        self._client_secret = (client_secret or "").strip()
        self._timeout = timeout if timeout and timeout > 0 else 10.0
        self._refresh_margin = max(0.0, float(refresh_margin))
        self._clock = clock or time.time
        self._request_factory = request_factory or Request
        self._opener = opener or urlopen
        self._env = env if env is not None else os.environ
        self._lock = Lock()
        self._token: str | None = None
        self._expires_at: float = 0.0

    @property
    def client_id(self) -> str:
        resolved = (self._client_id or self._env.get("TWITCH_CLIENT_ID") or "").strip()
        if not resolved:
            raise ConfigError("TWITCH_CLIENT_ID is not set")
        return resolved

    @property
    def client_secret(self) -> str:
        resolved = (
            self._client_secret or self._env.get("TWITCH_CLIENT_SECRET") or ""
        ).strip()
        if not resolved:
            raise ConfigError("TWITCH_CLIENT_SECRET is not set")
        return resolved

    @property
    def expires_at(self) -> float:
        return self._expires_at

    def get_token(self) -> str:
        """Return a valid bearer token, exchanging credentials when needed."""

        with self._lock:
            now = self._clock()
            if self._token and now < self._expires_at - self._refresh_margin:
                return self._token

            token, expires_in = self._exchange_credentials()
            self._token = token
            self._expires_at = self._clock() + expires_in
            logger.info("Obtained Twitch access token valid for %ss", int(expires_in))
            return token

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs a fresh exchange."""

        with self._lock:
            self._token = None
            self._expires_at = 0.0

    def _exchange_credentials(self) -> tuple[str, float]:
        payload = urlencode(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials",
            }
        ).encode("utf-8")

        request = self._request_factory(self.TOKEN_URL, data=payload, method="POST")
        request.add_header("Content-Type", "application/x-www-form-urlencoded")

        try:
            with self._opener(request, timeout=self._timeout) as response:
                body = response.read()
        except HTTPError as exc:
            status, text = read_http_error(exc)
            raise AuthError(
                f"Failed to get Twitch token: {status} {text}".strip(),
                status_code=status,
                body=text,
            ) from exc
        except OSError as exc:
            raise AuthError(f"Failed to get Twitch token: {exc}") from exc

        text = body.decode("utf-8", errors="replace") if body else ""
        try:
            data = json.loads(text) if text else {}
        except ValueError as exc:
            raise AuthError("invalid JSON response from Twitch", body=text) from exc

        token = data.get("access_token") if isinstance(data, Mapping) else None
        if not token:
            raise AuthError("missing access token in Twitch response", body=text)

        expires_in = data.get("expires_in")
        if isinstance(expires_in, bool) or not isinstance(expires_in, numbers.Real):
            logger.warning("Twitch token response has no usable expires_in: %r", expires_in)
            expires_in = 0
        return str(token), float(expires_in)


def read_http_error(error: HTTPError) -> tuple[int, str]:
    """Return the status code and decoded body text of ``error``."""

    try:
        raw = error.read()
    except OSError:  # pragma: no cover - body already consumed or closed
        raw = b""
    text = raw.decode("utf-8", errors="replace").strip() if raw else ""
    if not text and error.reason:
        text = str(error.reason)
    return error.code, text
