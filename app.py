import os
import time
import logging
import logging.config
from pathlib import Path

from flask import Flask

from config import (
    CORS_ALLOW_ORIGIN,
    DEFAULT_QUERY_LIMIT,
    IGDB_TIMEOUT_SECONDS,
    IGDB_USER_AGENT,
    LOG_FILE,
    TOP_RATED_LIMIT,
    TOP_RATED_MIN_AGG_VOTES,
    TOP_RATED_MIN_TOTAL_VOTES,
    TOP_RATED_MIN_USER_VOTES,
    TOP_RATED_PRIOR_MEAN,
    TOP_RATED_PRIOR_VOTES,
    TWITCH_CLIENT_ID,
    TWITCH_CLIENT_SECRET,
    validate_twitch_credentials,
)
from igdb.auth import TokenManager
from igdb.client import IGDBClient
from igdb.scoring import ScoringConfig
from routes import games as routes_games
from web.app_factory import create_app

logger = logging.getLogger(__name__)


def _determine_log_level(flask_app: Flask) -> int:
    if flask_app.debug:
        return logging.DEBUG
    if os.environ.get('FLASK_DEBUG', '').lower() in {'1', 'true', 'yes', 'on'}:
        return logging.DEBUG
    return logging.INFO


def _configure_logging(flask_app: Flask) -> None:
    log_level = _determine_log_level(flask_app)
    log_path = Path(LOG_FILE)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass

    for handler in list(flask_app.logger.handlers):
        flask_app.logger.removeHandler(handler)

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'standard': {
                    'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
                    'datefmt': '%Y-%m-%d %H:%M:%S',
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'standard',
                    'level': log_level,
                    'stream': 'ext://sys.stdout',
                },
                'file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'formatter': 'standard',
                    'level': logging.DEBUG,
                    'filename': os.fspath(log_path),
                    'maxBytes': 5 * 1024 * 1024,
                    'backupCount': 5,
                    'encoding': 'utf-8',
                },
            },
            'root': {
                'level': log_level,
                'handlers': ['console', 'file'],
            },
        }
    )

    flask_app.logger = logging.getLogger(flask_app.import_name)
    flask_app.logger.setLevel(log_level)
    logger.setLevel(log_level)


app = Flask(__name__)

_configure_logging(app)
validate_twitch_credentials()

token_manager = TokenManager(
    client_id=TWITCH_CLIENT_ID,
    client_secret=TWITCH_CLIENT_SECRET,
    timeout=IGDB_TIMEOUT_SECONDS,
)
igdb_api_client = IGDBClient(
    token_manager,
    user_agent=IGDB_USER_AGENT,
    timeout=IGDB_TIMEOUT_SECONDS,
)
scoring_config = ScoringConfig(
    prior_votes=TOP_RATED_PRIOR_VOTES,
    prior_mean=TOP_RATED_PRIOR_MEAN,
    min_total_votes=TOP_RATED_MIN_TOTAL_VOTES,
    min_aggregated_votes=TOP_RATED_MIN_AGG_VOTES,
    min_user_votes=TOP_RATED_MIN_USER_VOTES,
    top_n=TOP_RATED_LIMIT,
)

_blueprints_configured = False


def configure_blueprints(flask_app: Flask) -> None:
    global _blueprints_configured
    if _blueprints_configured:
        return

    routes_games.configure({
        'igdb_client': igdb_api_client,
        'scoring_config': scoring_config,
        'cors_allow_origin': CORS_ALLOW_ORIGIN,
        'default_query_limit': DEFAULT_QUERY_LIMIT,
        'clock': time.time,
    })

    if 'games' not in flask_app.blueprints:
        flask_app.register_blueprint(routes_games.games_blueprint)

    _blueprints_configured = True


app = create_app(app, configure_blueprints=configure_blueprints)


if __name__ == '__main__':
    app.run(debug=True)
