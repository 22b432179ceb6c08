"""Authentication routes.

Handles the Google OAuth flow for the single supported user.

## OAuth Flow

1. GET /auth/google - Redirect to Google consent screen
2. GET /oauth/callback - Handle OAuth callback (also served at
   /auth/google/callback and /oauth/google/callback)
3. POST /logout - Forget stored tokens
4. GET /session - Report whether valid tokens are stored
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from schedule_assistant.api.dependencies import get_auth_flow
from schedule_assistant.auth.flow import AuthFlowService
from schedule_assistant.normalizers import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_PATHS = ("/oauth/callback", "/auth/google/callback", "/oauth/google/callback")


class AuthResultResponse(BaseModel):
    """Result of a callback or logout."""

    success: bool
    message: str
    authenticated: bool


class SessionResponse(BaseModel):
    """Authentication status response."""

    authenticated: bool
    timestamp: str


@router.get("/auth/google")
async def begin_google_auth(
    flow: AuthFlowService = Depends(get_auth_flow),
) -> RedirectResponse:
    """Redirect the user to Google's consent screen."""
    auth_url = flow.begin_auth()
    return RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)


async def google_callback(
    code: str | None = None,
    error: str | None = None,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> AuthResultResponse:
    """Exchange the authorization code and store the tokens."""
    await flow.handle_callback(code=code, error=error)
    return AuthResultResponse(
        success=True,
        message="Successfully authenticated with Google Calendar",
        authenticated=True,
    )


for path in CALLBACK_PATHS:
    router.add_api_route(
        path,
        google_callback,
        methods=["GET"],
        response_model=AuthResultResponse,
        include_in_schema=path == CALLBACK_PATHS[0],
    )


@router.post("/logout", response_model=AuthResultResponse)
async def logout(
    flow: AuthFlowService = Depends(get_auth_flow),
) -> AuthResultResponse:
    """Forget the stored credentials. Calling it again is harmless."""
    await flow.logout()
    return AuthResultResponse(
        success=True,
        message="Successfully logged out",
        authenticated=False,
    )


@router.get("/session", response_model=SessionResponse)
async def get_session(
    flow: AuthFlowService = Depends(get_auth_flow),
) -> SessionResponse:
    """Report whether a usable access token is stored."""
    authenticated = await flow.is_authenticated()
    return SessionResponse(authenticated=authenticated, timestamp=utc_now_iso())
