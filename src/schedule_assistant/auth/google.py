"""Google OAuth client factory.

Implements the OAuth 2.0 authorization code flow against Google for the
calendar read-only scope.

## Required Setup

1. Create a project in Google Cloud Console
2. Enable Google Calendar API
3. Create OAuth 2.0 credentials (Web application)
4. Add the callback URL as an authorized redirect URI
5. Set GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REDIRECT_URI

## OAuth Endpoints

- Authorization: https://accounts.google.com/o/oauth2/v2/auth
- Token: https://oauth2.googleapis.com/token

## Authorization Parameters

- access_type=offline: Google issues a refresh token
- prompt=consent: the consent screen is always shown, so a refresh token is
  re-issued even when the user already granted access
"""

from __future__ import annotations

import logging
import time
from datetime import timezone
from typing import Any

import httpx
from google.oauth2.credentials import Credentials

from schedule_assistant.config import Settings
from schedule_assistant.errors import ConfigurationError, TokenExchangeError
from schedule_assistant.models.credentials import CredentialSet

logger = logging.getLogger(__name__)

# Google OAuth endpoints
GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

CALENDAR_READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"


class GoogleOAuthClient:
    """Google OAuth 2.0 client.

    Example:
        ```python
        client = create_oauth_client(settings)

        # Redirect the user here
        url = client.generate_auth_url()

        # In the callback
        tokens = await client.exchange_code(code)

        # Later, for API calls
        client.attach_credentials(tokens)
        credentials = client.google_credentials()
        ```
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            client_id: Google OAuth client ID
            client_secret: Google OAuth client secret
            redirect_uri: OAuth callback URL
            transport: Optional httpx transport (used by tests)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = [CALENDAR_READONLY_SCOPE]
        self.credentials: CredentialSet | None = None
        self._transport = transport

    def generate_auth_url(self) -> str:
        """Build the consent screen URL.

        The URL depends only on the client configuration.
        """
        params = {
            "access_type": "offline",
            "prompt": "consent",
            "scope": " ".join(self.scopes),
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }
        return str(httpx.URL(GOOGLE_AUTHORIZE_URL, params=params))

    async def exchange_code(self, code: str) -> CredentialSet:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback

        Returns:
            CredentialSet with `expiry_date` computed from `expires_in`

        Raises:
            TokenExchangeError: On network failure or a non-200 response
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self.redirect_uri,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Token exchange request failed: {e}")
            raise TokenExchangeError(
                "Failed to exchange authorization code for tokens"
            ) from e

        if response.status_code != 200:
            logger.error(f"Token exchange failed: {response.status_code} {response.text}")
            raise TokenExchangeError("Failed to exchange authorization code for tokens")

        try:
            data = response.json()
        except ValueError as e:
            raise TokenExchangeError("Token endpoint returned invalid JSON") from e

        if not data.get("access_token"):
            raise TokenExchangeError("Token endpoint returned no access token")

        return _credentials_from_token_response(data)

    def attach_credentials(self, tokens: CredentialSet) -> None:
        """Bind a credential set to this client for subsequent calls."""
        self.credentials = tokens

    def google_credentials(self) -> Credentials:
        """Build google-auth credentials that can refresh themselves.

        Raises:
            RuntimeError: If no credential set is attached
        """
        if self.credentials is None:
            raise RuntimeError("No credentials attached to OAuth client")

        tokens = self.credentials
        expiry = None
        if tokens.expires_at is not None:
            # google-auth compares against naive UTC
            expiry = tokens.expires_at.astimezone(timezone.utc).replace(tzinfo=None)

        return Credentials(
            token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_uri=GOOGLE_TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=tokens.scope.split() if tokens.scope else None,
            expiry=expiry,
        )


def _credentials_from_token_response(data: dict[str, Any]) -> CredentialSet:
    record = dict(data)
    expires_in = record.pop("expires_in", None)
    if expires_in is not None:
        record["expiry_date"] = int(time.time() * 1000) + int(expires_in) * 1000
    return CredentialSet.model_validate(record)


def refreshed_credentials(
    previous: CredentialSet,
    credentials: Credentials,
) -> CredentialSet | None:
    """Return an updated credential set if google-auth refreshed the token.

    Returns None when the access token is unchanged.
    """
    if not credentials.token or credentials.token == previous.access_token:
        return None

    update: dict[str, Any] = {"access_token": credentials.token}
    if credentials.expiry is not None:
        expiry = credentials.expiry.replace(tzinfo=timezone.utc)
        update["expiry_date"] = int(expiry.timestamp() * 1000)
    if credentials.refresh_token:
        update["refresh_token"] = credentials.refresh_token
    return previous.model_copy(update=update)


def create_oauth_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GoogleOAuthClient:
    """Create a Google OAuth client from settings.

    Performs no I/O.

    Raises:
        ConfigurationError: If client id, secret or redirect URI is missing
    """
    if not settings.google_oauth_configured:
        raise ConfigurationError(
            "Missing required Google OAuth configuration",
            error_code="auth_configuration_error",
        )

    return GoogleOAuthClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
        transport=transport,
    )
