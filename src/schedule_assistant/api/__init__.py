"""FastAPI application and routes.

This module provides the REST API consumed by the schedule assistant app.

## API Structure

- /auth/google, /oauth/callback - Google OAuth flow
- /session, /logout - Session status and logout
- /events - Calendar events (also /events/today, /events/upcoming)
- /weather - Weather forecast (also /weather/current)
- /health - Liveness

## Errors

Failures are returned as `{"error": "<code>", "message": "..."}`. Unexpected
upstream failures use the normalized shape
`{"error": true, "message", "context", "timestamp"}`.
"""

from schedule_assistant.api.app import create_app

__all__ = ["create_app"]
