"""Tests for the Google OAuth client factory."""

import time
from datetime import datetime, timedelta

import httpx
import pytest
from google.oauth2.credentials import Credentials

from schedule_assistant.auth.google import (
    CALENDAR_READONLY_SCOPE,
    GOOGLE_TOKEN_URL,
    create_oauth_client,
    refreshed_credentials,
)
from schedule_assistant.config import Settings
from schedule_assistant.errors import ConfigurationError, TokenExchangeError
from schedule_assistant.models.credentials import CredentialSet


class TestCreateOAuthClient:
    """Tests for create_oauth_client."""

    def test_creates_client(self, settings):
        client = create_oauth_client(settings)
        assert client.client_id == "test-client-id"
        assert client.redirect_uri == "http://localhost:3000/oauth/callback"

    @pytest.mark.parametrize(
        "missing", ["google_client_id", "google_client_secret", "google_redirect_uri"]
    )
    def test_missing_value(self, settings, missing):
        incomplete = settings.model_copy(update={missing: None})

        with pytest.raises(ConfigurationError) as exc_info:
            create_oauth_client(incomplete)

        assert exc_info.value.error_code == "auth_configuration_error"
        assert exc_info.value.status_code == 500


class TestGenerateAuthUrl:
    """Tests for the consent URL."""

    def test_parameters(self, settings):
        url = httpx.URL(create_oauth_client(settings).generate_auth_url())

        assert url.host == "accounts.google.com"
        assert url.params["access_type"] == "offline"
        assert url.params["prompt"] == "consent"
        assert url.params["scope"] == CALENDAR_READONLY_SCOPE
        assert url.params["response_type"] == "code"
        assert url.params["client_id"] == "test-client-id"
        assert url.params["redirect_uri"] == "http://localhost:3000/oauth/callback"

    def test_deterministic(self, settings):
        assert (
            create_oauth_client(settings).generate_auth_url()
            == create_oauth_client(settings).generate_auth_url()
        )


class TestExchangeCode:
    """Tests for code exchange."""

    @pytest.mark.asyncio
    async def test_success(self, settings, upstream):
        client = create_oauth_client(settings, transport=upstream.transport)
        before = int(time.time() * 1000)

        tokens = await client.exchange_code("auth-code")

        assert tokens.access_token == "test-access-token"
        assert tokens.refresh_token == "test-refresh-token"
        assert tokens.token_type == "Bearer"
        assert before + 3600 * 1000 <= tokens.expiry_date <= before + 3700 * 1000
        assert "expires_in" not in tokens.to_record()

        request = upstream.requests[0]
        assert str(request.url) == GOOGLE_TOKEN_URL
        body = dict(httpx.QueryParams(request.content.decode()))
        assert body["code"] == "auth-code"
        assert body["grant_type"] == "authorization_code"
        assert body["redirect_uri"] == "http://localhost:3000/oauth/callback"

    @pytest.mark.asyncio
    async def test_rejected_code(self, settings, upstream):
        upstream.token_handler = lambda request: httpx.Response(
            400, json={"error": "invalid_grant"}
        )
        client = create_oauth_client(settings, transport=upstream.transport)

        with pytest.raises(TokenExchangeError) as exc_info:
            await client.exchange_code("bad-code")

        assert exc_info.value.error_code == "token_exchange_failed"

    @pytest.mark.asyncio
    async def test_network_failure(self, settings, upstream):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream.token_handler = fail
        client = create_oauth_client(settings, transport=upstream.transport)

        with pytest.raises(TokenExchangeError):
            await client.exchange_code("auth-code")

    @pytest.mark.asyncio
    async def test_missing_access_token(self, settings, upstream):
        upstream.token_handler = lambda request: httpx.Response(200, json={})
        client = create_oauth_client(settings, transport=upstream.transport)

        with pytest.raises(TokenExchangeError):
            await client.exchange_code("auth-code")


class TestCredentials:
    """Tests for attaching credentials and refresh write-back."""

    def test_google_credentials(self, settings):
        client = create_oauth_client(settings)
        client.attach_credentials(
            CredentialSet(
                access_token="abc",
                refresh_token="def",
                expiry_date=1_718_452_800_000,
                scope=CALENDAR_READONLY_SCOPE,
            )
        )

        credentials = client.google_credentials()

        assert credentials.token == "abc"
        assert credentials.refresh_token == "def"
        assert credentials.client_id == "test-client-id"
        assert credentials.token_uri == GOOGLE_TOKEN_URL
        assert credentials.expiry == datetime(2024, 6, 15, 12, 0)
        assert credentials.scopes == [CALENDAR_READONLY_SCOPE]

    def test_google_credentials_requires_attach(self, settings):
        with pytest.raises(RuntimeError):
            create_oauth_client(settings).google_credentials()

    def test_unchanged_token(self):
        previous = CredentialSet(access_token="abc", refresh_token="def")
        assert refreshed_credentials(previous, Credentials(token="abc")) is None

    def test_refreshed_token(self):
        previous = CredentialSet(access_token="old", refresh_token="def", scope="s")
        expiry = datetime(2024, 6, 15, 12, 0)
        refreshed = Credentials(token="new", refresh_token="def", expiry=expiry)

        updated = refreshed_credentials(previous, refreshed)

        assert updated.access_token == "new"
        assert updated.refresh_token == "def"
        assert updated.scope == "s"
        assert updated.expiry_date == 1_718_452_800_000
        assert updated.expires_at.replace(tzinfo=None) - expiry == timedelta(0)


def test_settings_report_oauth_configuration():
    assert Settings(_env_file=None, google_client_id=None).google_oauth_configured is False
