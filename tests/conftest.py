"""Pytest fixtures shared across the test suite."""

import os
import tempfile

os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'igdb-query-proxy-logs'))

import pytest

from tests.app_helpers import FIXED_NOW, RecordingIGDBClient, load_app


@pytest.fixture
def igdb_client():
    return RecordingIGDBClient()


@pytest.fixture
def app_module(igdb_client):
    return load_app(igdb_client=igdb_client, clock=lambda: float(FIXED_NOW))


@pytest.fixture
def client(app_module):
    return app_module.app.test_client()
