"""Tests for the IGDB request helper."""

import json
from unittest.mock import MagicMock
from urllib.error import URLError

import pytest

from igdb.auth import TokenManager
from igdb.client import IGDBClient
from igdb.errors import ConfigError, UpstreamError
from tests.app_helpers import FakeOpener, http_error


def _token_manager(token="token-123", client_id="client-1"):
    manager = MagicMock(spec=TokenManager)
    manager.get_token.return_value = token
    manager.client_id = client_id
    return manager


def _client(*outcomes, **kwargs):
    opener = FakeOpener(*outcomes)
    return IGDBClient(_token_manager(), opener=opener, **kwargs), opener


def test_request_posts_body_with_auth_headers():
    client, opener = _client(b'[{"id": 1, "name": "Example"}]', user_agent="proxy/1.0", timeout=3)

    result = client.request("games", "fields name;\nlimit 1;")

    assert result == [{"id": 1, "name": "Example"}]
    request = opener.requests[0]
    assert request.full_url == "https://api.igdb.com/v4/games"
    assert request.get_method() == "POST"
    assert request.data == b"fields name;\nlimit 1;"
    assert request.get_header("Client-id") == "client-1"
    assert request.get_header("Authorization") == "Bearer token-123"
    assert request.get_header("Accept") == "application/json"
    assert request.get_header("Content-type") == "text/plain"
    assert request.get_header("User-agent") == "proxy/1.0"
    assert opener.timeouts == [3]


def test_request_uses_custom_base_url():
    client, opener = _client(b"[]", base_url="http://localhost:9000/v4/")

    client.request("/platforms", "fields name;")

    assert opener.requests[0].full_url == "http://localhost:9000/v4/platforms"


def test_request_raises_upstream_error_with_status_and_body():
    client, _ = _client(http_error("https://api.igdb.com/v4/games", 400, "Syntax error"))

    with pytest.raises(UpstreamError) as excinfo:
        client.request("games", "fields;")

    assert excinfo.value.status_code == 400
    assert excinfo.value.body == "Syntax error"
    assert str(excinfo.value) == "IGDB games error: 400 Syntax error"


def test_request_wraps_network_failures():
    client, _ = _client(URLError("timed out"))

    with pytest.raises(UpstreamError) as excinfo:
        client.request("games", "fields name;")
    assert excinfo.value.status_code is None


def test_request_rejects_invalid_json():
    client, _ = _client(b"<html>")

    with pytest.raises(UpstreamError, match="invalid JSON"):
        client.request("games", "fields name;")


def test_request_propagates_config_errors_without_network_call():
    manager = _token_manager()
    manager.get_token.side_effect = ConfigError("TWITCH_CLIENT_ID is not set")
    opener = FakeOpener()
    client = IGDBClient(manager, opener=opener)

    with pytest.raises(ConfigError):
        client.request("games", "fields name;")
    assert opener.requests == []


def test_search_games_escapes_text():
    client, opener = _client(b"[]")

    client.search_games('zelda "links"')

    assert opener.requests[0].data.decode() == (
        "fields name,summary,rating,cover.url;\n"
        'search "zelda \\"links\\"";\n'
        "limit 500;"
    )


def test_get_game_returns_first_match_or_none():
    client, opener = _client(json.dumps([{"id": 42, "name": "Found"}]).encode(), b"[]")

    assert client.get_game(42) == {"id": 42, "name": "Found"}
    assert client.get_game(43) is None
    assert opener.requests[0].data.decode() == (
        "where id = 42; fields name,summary,rating,cover.url; limit 1;"
    )
