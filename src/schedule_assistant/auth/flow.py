"""Authorization flow for the single supported user.

## States

```
unauthenticated --(callback ok)--> authenticated
authenticated --(logout | upstream 401)--> unauthenticated
```

The consent screen leg ("authorizing") happens entirely between the browser
and Google; the server only learns about it when the callback arrives, so
beginning authorization does not change state.
"""

from __future__ import annotations

import logging
from enum import Enum

import httpx

from schedule_assistant.auth.google import create_oauth_client
from schedule_assistant.auth.token_store import TokenStore
from schedule_assistant.config import Settings
from schedule_assistant.errors import (
    ConfigurationError,
    RequestValidationError,
    ServiceError,
    StorageError,
    TokenExchangeError,
)
from schedule_assistant.models.credentials import CredentialSet

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Server-side authentication state."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthFlowService:
    """Drives consent, callback, logout and session checks.

    Example:
        ```python
        flow = AuthFlowService(settings, token_store)

        url = flow.begin_auth()                  # redirect the user
        await flow.handle_callback(code=code)    # -> authenticated
        await flow.logout()                      # -> unauthenticated
        ```
    """

    def __init__(
        self,
        settings: Settings,
        token_store: TokenStore,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.token_store = token_store
        self._transport = transport

    def begin_auth(self) -> str:
        """Return the Google consent URL.

        Raises:
            ConfigurationError: auth_configuration_error if OAuth is not configured
        """
        client = create_oauth_client(self.settings, transport=self._transport)
        return client.generate_auth_url()

    async def handle_callback(
        self,
        code: str | None = None,
        error: str | None = None,
    ) -> CredentialSet:
        """Complete authorization with the code Google sent back.

        Raises:
            RequestValidationError: oauth_error or missing_code
            TokenExchangeError: If the code cannot be exchanged
        """
        if error:
            logger.error(f"OAuth error: {error}")
            raise RequestValidationError("OAuth authorization failed", error_code="oauth_error")

        if not code:
            raise RequestValidationError(
                "Authorization code is required", error_code="missing_code"
            )

        try:
            client = create_oauth_client(self.settings, transport=self._transport)
        except ConfigurationError as e:
            logger.error(f"Cannot exchange code: {e}")
            raise TokenExchangeError(
                "Failed to exchange authorization code for tokens"
            ) from e

        tokens = await client.exchange_code(code)
        await self.token_store.save(tokens)

        logger.info("Google Calendar authorization completed")
        return tokens

    async def logout(self) -> None:
        """Forget stored credentials. Safe to call repeatedly."""
        try:
            await self.token_store.clear()
        except Exception as e:
            logger.error(f"Error during logout: {e}")
            raise ServiceError("Failed to logout", error_code="logout_failed") from e

        logger.info("Logged out")

    async def is_authenticated(self) -> bool:
        """Report whether a usable access token is stored. Never mutates state."""
        try:
            return await self.token_store.has_valid_tokens()
        except StorageError as e:
            logger.error(f"Error checking session: {e}")
            raise ServiceError(
                "Failed to check authentication status",
                error_code="session_check_failed",
            ) from e

    async def state(self) -> AuthState:
        if await self.is_authenticated():
            return AuthState.AUTHENTICATED
        return AuthState.UNAUTHENTICATED
