from igdb.client import IGDBClient
from tests.app_helpers import load_app


def test_app_registers_game_routes():
    app_module = load_app()

    rules = {rule.rule for rule in app_module.app.url_map.iter_rules()}

    assert 'games' in app_module.app.blueprints
    assert {'/games', '/games/search', '/games/top-rated', '/games/<game_id>'} <= rules


def test_app_builds_single_token_manager_for_client():
    app_module = load_app()

    assert isinstance(app_module.igdb_api_client, IGDBClient)
    assert app_module.igdb_api_client._tokens is app_module.token_manager


def test_scoring_config_uses_configured_constants():
    app_module = load_app()
    config = app_module.scoring_config

    assert config.prior_votes == app_module.TOP_RATED_PRIOR_VOTES
    assert config.prior_mean == app_module.TOP_RATED_PRIOR_MEAN
    assert config.top_n == app_module.TOP_RATED_LIMIT


def test_unknown_routes_are_not_proxied(client, igdb_client):
    response = client.get('/platforms')

    assert response.status_code == 404
    assert igdb_client.calls == []
