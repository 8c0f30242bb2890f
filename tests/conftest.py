"""
Pytest configuration and shared fixtures.
"""
import json

import httpx
import pytest

from app.core.config import Settings, reset_settings


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """
    Clean environment for testing.

    Removes all app-related env vars to ensure clean state.
    """
    env_vars = [
        "WALKSCORE_API_KEY",
        "YELP_API_KEY",
        "GOOGLE_MAPS_API_KEY",
        "REQUEST_TIMEOUT_SECONDS",
        "CONNECT_TIMEOUT_SECONDS",
        "ADAPTER_TIMEOUT_SECONDS",
        "USER_AGENT",
        "LOG_LEVEL",
        "RUN_INTEGRATION_TESTS",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)

    # Reset settings singleton
    reset_settings()

    yield

    # Reset again after test
    reset_settings()


@pytest.fixture(scope="function")
def settings(clean_env):
    """Settings with no provider keys and no .env file."""
    return Settings(_env_file=None)


@pytest.fixture(scope="function")
def keyed_settings(clean_env):
    """Settings with every provider key configured."""
    return Settings(
        _env_file=None,
        walkscore_api_key="ws-test-key",
        yelp_api_key="yelp-test-key",
        google_maps_api_key="gmaps-test-key",
    )


def json_transport(handler):
    """
    httpx.MockTransport whose handler returns (status, body) or a Response.

    Every request is appended to ``transport.requests``.
    """
    requests = []

    def _handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        result = handler(request)
        if isinstance(result, httpx.Response):
            return result
        status, body = result
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body).encode(),
                                  headers={"Content-Type": "application/json"})
        return httpx.Response(status, text=body)

    transport = httpx.MockTransport(_handle)
    transport.requests = requests
    return transport


@pytest.fixture
def make_transport():
    return json_transport
