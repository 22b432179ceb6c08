"""Google Calendar API client.

Thin wrapper over the discovery-based Calendar v3 client. Calls are made
on a worker thread so the event loop is never blocked.

## API Documentation

https://developers.google.com/calendar/api/v3/reference/events/list

## Authentication

Uses google-auth `Credentials`. When the access token has expired and a
refresh token is present, the transport refreshes it before the request;
callers can read the new token back from `client.credentials`.

## Errors

`HttpError` and `RefreshError` are translated into `CalendarAPIError`
carrying the HTTP status (a failed refresh is reported as 401). Transport
failures propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from schedule_assistant.normalizers import isoformat_utc

logger = logging.getLogger(__name__)

PRIMARY_CALENDAR = "primary"


class CalendarAPIError(Exception):
    """Google Calendar rejected a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GoogleCalendarClient:
    """Client for Google Calendar API.

    Example:
        ```python
        client = GoogleCalendarClient(credentials)
        items = await client.list_events(time_min, time_max, max_results=50)
        ```
    """

    def __init__(self, credentials: Credentials):
        """Initialize the client.

        Args:
            credentials: google-auth credentials for the user
        """
        self.credentials = credentials
        self._service = build(
            "calendar",
            "v3",
            credentials=credentials,
            cache_discovery=False,
        )

    async def list_events(
        self,
        time_min: datetime,
        time_max: datetime,
        max_results: int = 50,
        calendar_id: str = PRIMARY_CALENDAR,
    ) -> list[dict[str, Any]]:
        """List event occurrences in a time range.

        Recurring events are expanded into single occurrences and ordered by
        start time.

        Args:
            time_min: Lower bound (exclusive) for event end time
            time_max: Upper bound (exclusive) for event start time
            max_results: Maximum occurrences to return
            calendar_id: Calendar ID (use 'primary' for primary calendar)

        Returns:
            Raw event resources as returned by the API

        Raises:
            CalendarAPIError: If the API rejects the request
        """
        params: dict[str, Any] = {
            "calendarId": calendar_id,
            "timeMin": isoformat_utc(time_min),
            "timeMax": isoformat_utc(time_max),
            "singleEvents": True,  # Expand recurring events
            "orderBy": "startTime",
            "maxResults": max_results,
        }

        try:
            result = await asyncio.to_thread(self._list_events_sync, params)
        except HttpError as e:
            status_code = e.resp.status if e.resp is not None else None
            logger.error(f"Calendar API error: {status_code} - {e}")
            raise CalendarAPIError(f"Calendar API request failed: {status_code}", status_code) from e
        except RefreshError as e:
            logger.error(f"Calendar token refresh failed: {e}")
            raise CalendarAPIError("Token refresh failed", status_code=401) from e

        return result.get("items", [])

    def _list_events_sync(self, params: dict[str, Any]) -> dict[str, Any]:
        return self._service.events().list(**params).execute()
