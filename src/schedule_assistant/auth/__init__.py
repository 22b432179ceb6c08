"""Authentication for the single supported Google account.

## OAuth Flow

1. GET /auth/google - redirect to Google's consent screen
2. Google redirects back to the callback with an authorization code
3. Exchange the code for access and refresh tokens
4. Persist the credential set in the token store

## Scopes

Only `calendar.readonly` is requested.

## Token Storage

One credential set per process, cached in memory and mirrored to a JSON
file or a database row.
"""

from schedule_assistant.auth.flow import AuthFlowService, AuthState
from schedule_assistant.auth.google import (
    CALENDAR_READONLY_SCOPE,
    GoogleOAuthClient,
    create_oauth_client,
)
from schedule_assistant.auth.token_store import (
    FileTokenBackend,
    TokenBackend,
    TokenStore,
    create_token_store,
)

__all__ = [
    "AuthFlowService",
    "AuthState",
    "CALENDAR_READONLY_SCOPE",
    "GoogleOAuthClient",
    "create_oauth_client",
    "FileTokenBackend",
    "TokenBackend",
    "TokenStore",
    "create_token_store",
]
