"""Pytest fixtures for the schedule assistant tests.

This module provides test fixtures that ensure:
1. No external API calls are made (Google, OpenWeather)
2. Token storage lives in a per-test temporary directory
3. Isolated test environment with controlled configuration
"""

import os
from typing import Any, Callable

import httpx
import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("GOOGLE_REDIRECT_URI", "http://localhost:3000/oauth/callback")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("ENVIRONMENT", "development")

from fastapi.testclient import TestClient

from schedule_assistant.api.app import create_app
from schedule_assistant.auth.token_store import FileTokenBackend, TokenStore
from schedule_assistant.config import Settings
from schedule_assistant.models.credentials import CredentialSet


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from schedule_assistant.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Fully configured settings with storage under tmp_path."""
    return Settings(
        _env_file=None,
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        google_redirect_uri="http://localhost:3000/oauth/callback",
        openweather_api_key="test-weather-key",
        token_file=tmp_path / "tokens.json",
    )


@pytest.fixture
def token_store(settings: Settings) -> TokenStore:
    return TokenStore(FileTokenBackend(settings.token_file))


class StubCalendarClient:
    """Stand-in for GoogleCalendarClient that records calls."""

    def __init__(self, items: list[dict[str, Any]] | None = None, error: Exception | None = None):
        self.items = items or []
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.credentials = None

    def factory(self, credentials):
        self.credentials = credentials
        return self

    async def list_events(self, time_min, time_max, max_results=50):
        self.calls.append(
            {"time_min": time_min, "time_max": time_max, "max_results": max_results}
        )
        if self.error is not None:
            raise self.error
        return self.items


@pytest.fixture
def calendar_stub() -> StubCalendarClient:
    return StubCalendarClient()


class MockUpstream:
    """httpx transport answering Google token and OpenWeather requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_handler: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(
                200,
                json={
                    "access_token": "test-access-token",
                    "refresh_token": "test-refresh-token",
                    "expires_in": 3600,
                    "scope": "https://www.googleapis.com/auth/calendar.readonly",
                    "token_type": "Bearer",
                },
            )
        )
        self.weather_handler: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(200, json=sample_weather_payload())
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return self.token_handler(request)
        if request.url.host == "api.openweathermap.org":
            return self.weather_handler(request)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def upstream() -> MockUpstream:
    return MockUpstream()


@pytest.fixture
def client(settings, token_store, calendar_stub, upstream):
    """Test client wired to the stubs above."""
    app = create_app(
        settings=settings,
        token_store=token_store,
        calendar_client_factory=calendar_stub.factory,
        transport=upstream.transport,
    )
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Sample Data
# =============================================================================


def sample_weather_payload(hours: int = 30) -> dict[str, Any]:
    return {
        "lat": 40.7128,
        "lon": -74.006,
        "timezone": "America/New_York",
        "current": {
            "dt": 1718452800,
            "temp": 22.4,
            "humidity": 60,
            "wind_speed": 3.5,
            "weather": [{"main": "Clouds", "description": "scattered clouds"}],
        },
        "hourly": [
            {
                "dt": 1718452800 + i * 3600,
                "temp": 20.0 + i * 0.1,
                "pop": 0.2,
                "weather": [{"main": "Rain", "description": "light rain"}],
            }
            for i in range(hours)
        ],
    }


@pytest.fixture
def timed_event() -> dict[str, Any]:
    return {
        "id": "evt-1",
        "summary": "Team standup",
        "location": "Room 4",
        "description": "Daily sync",
        "start": {"dateTime": "2024-06-15T09:00:00-04:00", "timeZone": "America/New_York"},
        "end": {"dateTime": "2024-06-15T09:15:00-04:00", "timeZone": "America/New_York"},
    }


@pytest.fixture
def all_day_event() -> dict[str, Any]:
    return {
        "id": "evt-2",
        "start": {"date": "2024-06-16"},
        "end": {"date": "2024-06-17"},
    }


@pytest.fixture
def valid_tokens() -> CredentialSet:
    """Tokens without expiry tracking, always valid."""
    return CredentialSet(
        access_token="stored-access-token",
        refresh_token="stored-refresh-token",
        scope="https://www.googleapis.com/auth/calendar.readonly",
        token_type="Bearer",
    )


@pytest.fixture
def weather_payload() -> dict[str, Any]:
    return sample_weather_payload()
