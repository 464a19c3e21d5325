"""IGDB v4 API client."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from urllib.error import HTTPError
from urllib.request import Request, urlopen

from igdb.auth import TokenManager, read_http_error
from igdb.errors import UpstreamError
from igdb.query import QueryParams, build_query

logger = logging.getLogger(__name__)


__all__ = [
    "DETAIL_FIELDS",
    "IGDBClient",
]

DETAIL_FIELDS = "name,summary,rating,cover.url"
SEARCH_LIMIT = 500


class IGDBClient:
    """Send Apicalypse queries to IGDB using a shared :class:`TokenManager`."""

    BASE_URL = "https://api.igdb.com/v4"

    def __init__(
        self,
        token_manager: TokenManager,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float = 10.0,
        request_factory: Callable[..., Any] | None = None,
        opener: Callable[..., Any] | None = None,
    ) -> None:
        self._tokens = token_manager
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._user_agent = (user_agent or "").strip()
        self._timeout = timeout if timeout and timeout > 0 else 10.0
        self._request_factory = request_factory or Request
        self._opener = opener or urlopen

    def request(self, path: str, body: str) -> Any:
        """POST ``body`` to ``/v4/<path>`` and return the decoded JSON payload."""

        token = self._tokens.get_token()
        client_id = self._tokens.client_id
        endpoint = path.strip("/")

        request = self._request_factory(
            f"{self._base_url}/{endpoint}",
            data=body.encode("utf-8"),
            method="POST",
        )
        self._apply_headers(request, client_id, token)
        logger.debug("IGDB %s query:\n%s", endpoint, body)

        try:
            with self._opener(request, timeout=self._timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            status, text = read_http_error(exc)
            logger.warning("IGDB %s returned %s: %s", endpoint, status, text)
            raise UpstreamError(
                f"IGDB {endpoint} error: {status} {text}".strip(),
                status_code=status,
                body=text,
            ) from exc
        except OSError as exc:
            logger.warning("IGDB %s request failed: %s", endpoint, exc)
            raise UpstreamError(f"IGDB {endpoint} request failed: {exc}") from exc

        text = raw.decode("utf-8", errors="replace") if raw else ""
        try:
            return json.loads(text) if text else []
        except ValueError as exc:
            raise UpstreamError(
                f"invalid JSON response from IGDB {endpoint}", body=text
            ) from exc

    def query_games(self, body: str) -> Any:
        return self.request("games", body)

    def search_games(self, text: str) -> Any:
        query = build_query(
            QueryParams(search=text),
            default_fields=DETAIL_FIELDS,
            default_limit=SEARCH_LIMIT,
        )
        return self.query_games(query)

    def get_game(self, game_id: int) -> dict[str, Any] | None:
        """Return the game with ``game_id`` or ``None`` when IGDB has no match."""

        payload = self.query_games(
            f"where id = {int(game_id)}; fields {DETAIL_FIELDS}; limit 1;"
        )
        if isinstance(payload, list) and payload:
            return payload[0]
        return None

    def _apply_headers(self, request: Any, client_id: str, access_token: str) -> None:
        request.add_header("Client-ID", client_id)
        request.add_header("Authorization", f"Bearer {access_token}")
        request.add_header("Accept", "application/json")
        request.add_header("Content-Type", "text/plain")
        if self._user_agent:
            request.add_header("User-Agent", self._user_agent)
