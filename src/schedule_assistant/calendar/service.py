"""Calendar events service.

Fetches event occurrences for the stored user and normalizes them.

## Fetch Process

1. Check the token store for a usable access token (no upstream call otherwise)
2. Bind the stored credential set to an OAuth client
3. List occurrences from the primary calendar (max 50, expanded, by start)
4. Save a refreshed access token back to the store if the transport refreshed it
5. Normalize each occurrence

## Error Mapping

| Upstream outcome        | Result                                  |
|-------------------------|-----------------------------------------|
| 401 / refresh failure   | store cleared, 401 token_expired        |
| 403                     | store kept, 403 calendar_access_denied  |
| anything else           | 503 normalized error calendar_fetch_failed |
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Protocol

from google.oauth2.credentials import Credentials

from schedule_assistant.auth.google import create_oauth_client, refreshed_credentials
from schedule_assistant.auth.token_store import TokenStore
from schedule_assistant.calendar.google_calendar import CalendarAPIError, GoogleCalendarClient
from schedule_assistant.config import Settings
from schedule_assistant.errors import (
    AccessDeniedError,
    NotAuthenticatedError,
    RequestValidationError,
    ServiceError,
    StorageError,
    TokenExpiredError,
    UpstreamFailure,
)
from schedule_assistant.models.credentials import CredentialSet
from schedule_assistant.models.event import NormalizedEvent
from schedule_assistant.normalizers import isoformat_utc, normalize_google_event

logger = logging.getLogger(__name__)

MAX_EVENTS = 50
DEFAULT_RANGE = timedelta(days=7)


class CalendarClient(Protocol):
    credentials: Credentials

    def list_events(
        self,
        time_min: datetime,
        time_max: datetime,
        max_results: int = ...,
    ) -> Awaitable[list[dict[str, Any]]]:
        ...


CalendarClientFactory = Callable[[Credentials], CalendarClient]


@dataclass
class EventsResult:
    """Normalized events plus the range they were fetched for."""

    events: list[NormalizedEvent]
    time_min: datetime
    time_max: datetime
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_response(self, include_raw: bool = False) -> dict[str, Any]:
        return {
            "events": [event.to_response(include_raw) for event in self.events],
            "meta": {
                "count": len(self.events),
                "from": isoformat_utc(self.time_min),
                "to": isoformat_utc(self.time_max),
                "fetchedAt": isoformat_utc(self.fetched_at),
            },
        }


def parse_iso_datetime(value: str, name: str) -> datetime:
    """Parse an ISO-8601 query value; naive values are taken as UTC.

    Raises:
        RequestValidationError: invalid_date_range
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise RequestValidationError(
            f"'{name}' must be an ISO-8601 date or timestamp",
            error_code="invalid_date_range",
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def today_range(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Local midnight to midnight."""
    now = now or datetime.now().astimezone()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def upcoming_range(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Now to one week from now."""
    now = now or datetime.now(timezone.utc)
    return now, now + DEFAULT_RANGE


class EventsService:
    """Lists calendar events for the stored user.

    Example:
        ```python
        service = EventsService(settings, token_store)

        result = await service.list_events(time_from="2024-06-15T00:00:00Z")
        body = result.to_response()
        ```
    """

    def __init__(
        self,
        settings: Settings,
        token_store: TokenStore,
        client_factory: CalendarClientFactory = GoogleCalendarClient,
    ):
        """Initialize the service.

        Args:
            settings: Application settings (OAuth client configuration)
            token_store: Store holding the user's credential set
            client_factory: Builds a calendar client from credentials
        """
        self.settings = settings
        self.token_store = token_store
        self.client_factory = client_factory

    async def list_events(
        self,
        time_from: str | None = None,
        time_to: str | None = None,
    ) -> EventsResult:
        """List events in `[from, to]`, defaulting to the next seven days.

        Authentication is checked before the range is parsed.
        """
        await self._require_tokens()
        now = datetime.now(timezone.utc)
        time_min = parse_iso_datetime(time_from, "from") if time_from else now
        time_max = parse_iso_datetime(time_to, "to") if time_to else now + DEFAULT_RANGE
        return await self.fetch_events(time_min, time_max)

    async def list_today(self) -> EventsResult:
        return await self.fetch_events(*today_range())

    async def list_upcoming(self) -> EventsResult:
        return await self.fetch_events(*upcoming_range())

    async def fetch_events(self, time_min: datetime, time_max: datetime) -> EventsResult:
        """Fetch and normalize event occurrences in a range.

        Raises:
            NotAuthenticatedError: No usable token; nothing is sent upstream
            TokenExpiredError: Google rejected the token (store is cleared)
            AccessDeniedError: Google refused calendar access
            UpstreamFailure: Any other failure (calendar_fetch_failed)
        """
        try:
            tokens = await self._require_tokens()
            oauth = create_oauth_client(self.settings)
            oauth.attach_credentials(tokens)
            client = self.client_factory(oauth.google_credentials())

            items = await client.list_events(time_min, time_max, max_results=MAX_EVENTS)
        except ServiceError:
            raise
        except CalendarAPIError as e:
            await self._raise_for_calendar_error(e)
        except Exception as e:
            logger.error(f"Error fetching calendar events: {e}")
            raise UpstreamFailure(e, "calendar_fetch_failed") from e

        updated = refreshed_credentials(tokens, client.credentials)
        if updated is not None:
            logger.info("Access token was refreshed, saving")
            await self.token_store.save(updated)

        try:
            events = [normalize_google_event(item) for item in items[:MAX_EVENTS]]
        except Exception as e:
            logger.error(f"Malformed calendar payload: {e}")
            raise UpstreamFailure(e, "calendar_fetch_failed") from e

        return EventsResult(events=events, time_min=time_min, time_max=time_max)

    async def _require_tokens(self) -> CredentialSet:
        try:
            if not await self.token_store.has_valid_tokens():
                raise NotAuthenticatedError(
                    "Please authenticate with Google Calendar first"
                )
            return await self.token_store.load()
        except StorageError as e:
            raise UpstreamFailure(e, "calendar_fetch_failed") from e

    async def _raise_for_calendar_error(self, error: CalendarAPIError) -> None:
        if error.status_code == 401:
            logger.warning("Calendar rejected stored token, clearing credentials")
            await self.token_store.clear()
            raise TokenExpiredError(
                "Authentication expired. Please re-authenticate."
            ) from error

        if error.status_code == 403:
            raise AccessDeniedError(
                "Access to calendar denied. Please check permissions.",
                error_code="calendar_access_denied",
            ) from error

        raise UpstreamFailure(error, "calendar_fetch_failed") from error
