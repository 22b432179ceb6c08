"""End-to-end tests for the HTTP API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from schedule_assistant.api.app import AVAILABLE_ENDPOINTS, create_app
from schedule_assistant.calendar.google_calendar import CalendarAPIError


@pytest.fixture
def authenticated(client, token_store, valid_tokens):
    """Client whose token store already holds valid tokens."""
    client.portal.call(token_store.save, valid_tokens)
    return client


def client_for(settings, token_store, **overrides):
    app = create_app(settings=settings.model_copy(update=overrides), token_store=token_store)
    return TestClient(app)


class TestHealth:
    """Tests for liveness endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["timestamp"].endswith("Z")
        assert body["uptime"] >= 0

    def test_root_banner(self, client):
        body = client.get("/").json()

        assert body["status"] == "running"
        assert body["endpoints"]["events"] == "/events"

    def test_unknown_route(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == "Route /nope not found"
        assert body["availableEndpoints"] == AVAILABLE_ENDPOINTS


class TestAuthRoutes:
    """Tests for the OAuth flow endpoints."""

    def test_begin_auth_redirects(self, client):
        response = client.get("/auth/google", follow_redirects=False)

        assert response.status_code == 302
        location = httpx.URL(response.headers["location"])
        assert location.host == "accounts.google.com"
        assert location.params["access_type"] == "offline"
        assert location.params["prompt"] == "consent"

    def test_begin_auth_unconfigured(self, settings, token_store):
        with client_for(settings, token_store, google_client_secret=None) as client:
            response = client.get("/auth/google", follow_redirects=False)

        assert response.status_code == 500
        assert response.json()["error"] == "auth_configuration_error"

    def test_callback_error_param(self, client, upstream):
        response = client.get("/oauth/callback", params={"error": "access_denied"})

        assert response.status_code == 400
        assert response.json()["error"] == "oauth_error"
        assert upstream.requests == []

    def test_callback_missing_code(self, client):
        response = client.get("/oauth/callback")

        assert response.status_code == 400
        assert response.json() == {
            "error": "missing_code",
            "message": "Authorization code is required",
        }

    @pytest.mark.parametrize(
        "path", ["/oauth/callback", "/auth/google/callback", "/oauth/google/callback"]
    )
    def test_callback_success(self, client, settings, path):
        response = client.get(path, params={"code": "auth-code"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Successfully authenticated with Google Calendar",
            "authenticated": True,
        }
        assert settings.token_file.exists()
        assert client.get("/session").json()["authenticated"] is True

    def test_callback_exchange_failure(self, client, upstream):
        upstream.token_handler = lambda request: httpx.Response(
            400, json={"error": "invalid_grant"}
        )

        response = client.get("/oauth/callback", params={"code": "used-code"})

        assert response.status_code == 500
        assert response.json()["error"] == "token_exchange_failed"
        assert client.get("/session").json()["authenticated"] is False

    def test_session_unauthenticated(self, client):
        body = client.get("/session").json()

        assert body["authenticated"] is False
        assert "timestamp" in body

    def test_session_with_unreadable_token_file(self, client, settings):
        settings.token_file.write_text('["not", "a", "record"]')

        response = client.get("/session")

        assert response.status_code == 500
        assert response.json()["error"] == "session_check_failed"

    def test_logout_is_idempotent(self, authenticated):
        for _ in range(2):
            response = authenticated.post("/logout")
            assert response.status_code == 200
            assert response.json()["authenticated"] is False

        assert authenticated.get("/session").json()["authenticated"] is False


class TestEventsRoutes:
    """Tests for calendar event endpoints."""

    @pytest.mark.parametrize("path", ["/events", "/events/today", "/events/upcoming"])
    def test_requires_authentication(self, client, calendar_stub, path):
        response = client.get(path)

        assert response.status_code == 401
        assert response.json()["error"] == "not_authenticated"
        assert calendar_stub.calls == []

    def test_list_events(self, authenticated, calendar_stub, timed_event, all_day_event):
        calendar_stub.items = [timed_event, all_day_event]

        response = authenticated.get(
            "/events", params={"from": "2024-06-15T00:00:00Z", "to": "2024-06-22T00:00:00Z"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["count"] == 2
        assert body["meta"]["from"] == "2024-06-15T00:00:00.000Z"
        first = body["events"][0]
        assert first["title"] == "Team standup"
        assert first["isAllDay"] is False
        assert first["source"] == "google-calendar"
        assert "raw" not in first
        assert body["events"][1]["isAllDay"] is True

    def test_authentication_checked_before_range(self, client, calendar_stub):
        response = client.get("/events", params={"from": "garbage"})

        assert response.status_code == 401
        assert response.json()["error"] == "not_authenticated"
        assert calendar_stub.calls == []

    def test_malformed_upstream_item(self, authenticated, calendar_stub):
        calendar_stub.items = [{"id": "x", "start": "2024-06-15", "end": "2024-06-16"}]

        response = authenticated.get("/events")

        assert response.status_code == 503
        body = response.json()
        assert body["error"] is True
        assert body["context"] == "calendar_fetch_failed"

    def test_invalid_date_range(self, authenticated):
        response = authenticated.get("/events", params={"from": "soon"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_date_range"

    def test_upstream_401_logs_out(self, authenticated, calendar_stub):
        calendar_stub.error = CalendarAPIError("Invalid Credentials", status_code=401)

        response = authenticated.get("/events/upcoming")

        assert response.status_code == 401
        assert response.json()["error"] == "token_expired"
        assert authenticated.get("/session").json()["authenticated"] is False

    def test_upstream_403(self, authenticated, calendar_stub):
        calendar_stub.error = CalendarAPIError("Forbidden", status_code=403)

        response = authenticated.get("/events/today")

        assert response.status_code == 403
        assert response.json()["error"] == "calendar_access_denied"
        assert authenticated.get("/session").json()["authenticated"] is True

    def test_upstream_failure(self, authenticated, calendar_stub):
        calendar_stub.error = CalendarAPIError("Backend Error", status_code=500)

        response = authenticated.get("/events")

        assert response.status_code == 503
        body = response.json()
        assert body["error"] is True
        assert body["context"] == "calendar_fetch_failed"


class TestWeatherRoutes:
    """Tests for weather endpoints."""

    @pytest.mark.parametrize("path", ["/weather", "/weather/location"])
    def test_forecast(self, client, path):
        response = client.get(path, params={"lat": "40.7128", "lon": "-74.0060"})

        assert response.status_code == 200
        body = response.json()
        assert body["current"]["tempC"] == 22
        assert body["current"]["tempF"] == 72
        assert len(body["hourly"]) == 24
        assert body["hourly"][0]["time"] == "2024-06-15T12:00:00.000Z"
        assert body["hourly"][0]["precipProb"] == 0.2
        assert body["location"] == {
            "lat": 40.7128,
            "lon": -74.006,
            "name": "America/New_York",
        }

    def test_current(self, client):
        response = client.get("/weather/current", params={"lat": "0", "lon": "0"})

        assert response.status_code == 200
        assert set(response.json()) == {"current", "location", "fetchedAt"}

    @pytest.mark.parametrize(
        "params,error",
        [
            ({}, "missing_coordinates"),
            ({"lat": "10"}, "missing_coordinates"),
            ({"lat": "abc", "lon": "0"}, "invalid_coordinates"),
            ({"lat": "1000", "lon": "0"}, "coordinates_out_of_range"),
        ],
    )
    def test_bad_coordinates(self, client, upstream, params, error):
        response = client.get("/weather", params=params)

        assert response.status_code == 400
        assert response.json()["error"] == error
        assert upstream.requests == []

    def test_not_configured(self, settings, token_store):
        with client_for(settings, token_store, openweather_api_key=None) as client:
            response = client.get("/weather", params={"lat": "0", "lon": "0"})

        assert response.status_code == 500
        assert response.json()["error"] == "weather_api_not_configured"

    def test_rate_limited(self, client, upstream):
        upstream.weather_handler = lambda request: httpx.Response(429)

        response = client.get("/weather", params={"lat": "0", "lon": "0"})

        assert response.status_code == 503
        assert response.json()["error"] == "weather_api_rate_limited"
