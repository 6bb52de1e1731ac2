"""
Shared fixtures for the admin gateway tests.

Upstream traffic is mocked with respx; the upstream base URL used
everywhere is ``http://upstream.test`` which the adapter normalizes to
``http://upstream.test/api``.
"""

import pytest
from fastapi.testclient import TestClient

from admin_gateway.app.config import Settings
from admin_gateway.app.main import create_app

UPSTREAM = "http://upstream.test/api"
TOKEN = "test-session-token"


def make_settings(**overrides) -> Settings:
    values = {
        "RINSR_API_BASE": "http://upstream.test",
        "LOCATIONIQ_KEY": "test-locationiq-key",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    """Settings pointing at the mocked upstream"""
    return make_settings()


@pytest.fixture
def app(settings):
    """Gateway application built with test settings"""
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan running (shared upstream client created)"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def authed_client(client):
    """Test client carrying the session cookie set by the dashboard login"""
    client.cookies.set("rinsr_token", TOKEN)
    return client
