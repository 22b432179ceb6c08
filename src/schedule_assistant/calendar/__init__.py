"""Google Calendar integration.

Reads event occurrences from the user's primary calendar and normalizes
them for the client app.

Uses the Google Calendar API v3:
- https://developers.google.com/calendar/api/v3/reference
"""

from schedule_assistant.calendar.google_calendar import (
    CalendarAPIError,
    GoogleCalendarClient,
)
from schedule_assistant.calendar.service import (
    EventsResult,
    EventsService,
)

__all__ = [
    "CalendarAPIError",
    "GoogleCalendarClient",
    "EventsResult",
    "EventsService",
]
