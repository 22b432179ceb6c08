"""Response normalizers.

Pure functions that translate provider payloads into the stable shapes
returned to the mobile client:

- Google Calendar event -> `NormalizedEvent`
- OpenWeather One Call response -> `WeatherSummary`
- any exception -> normalized error dict

## OpenWeather Field Translation

| OpenWeather field          | Normalized field   | Notes                    |
|----------------------------|--------------------|--------------------------|
| current.temp               | current.tempC      | rounded                  |
| current.temp               | current.tempF      | C * 9/5 + 32, rounded    |
| current.weather[0].main    | current.condition  | "Unknown" if absent      |
| current.weather[0].description | current.description | "Unknown" if absent |
| current.humidity           | current.humidity   | percent, 0 if absent     |
| current.wind_speed         | current.windSpeed  | m/s (metric units)       |
| hourly[].dt                | hourly[].time      | Unix seconds -> ISO 8601 |
| hourly[].pop               | hourly[].precipProb| 0-1, 0 if absent         |
| timezone                   | location.name      | "Unknown" if absent      |

None of these functions raise for well-formed (even sparse) payloads.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from schedule_assistant.models.event import NormalizedEvent
from schedule_assistant.models.weather import (
    MAX_HOURLY_ENTRIES,
    UNKNOWN,
    CurrentConditions,
    HourlyEntry,
    WeatherLocation,
    WeatherSummary,
)

UNTITLED_EVENT = "Untitled Event"


def isoformat_utc(value: datetime) -> str:
    """Format as `2024-06-15T12:00:00.000Z`."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return isoformat_utc(datetime.now(timezone.utc))


def round_half_up(value: float) -> int:
    """Round halves toward +inf (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def celsius_to_fahrenheit(celsius: float) -> int:
    return round_half_up(celsius * 9 / 5 + 32)


# =============================================================================
# Calendar
# =============================================================================


def normalize_google_event(google_event: dict[str, Any]) -> NormalizedEvent:
    """Normalize a Google Calendar event.

    Timed events carry `start.dateTime`; all-day events only `start.date`.
    """
    start_data = google_event.get("start") or {}
    end_data = google_event.get("end") or {}

    start = start_data.get("dateTime") or start_data.get("date")
    end = end_data.get("dateTime") or end_data.get("date")

    return NormalizedEvent(
        id=google_event.get("id"),
        title=google_event.get("summary") or UNTITLED_EVENT,
        start=start,
        end=end,
        location=google_event.get("location") or None,
        description=google_event.get("description") or None,
        is_all_day=not start_data.get("dateTime"),
        raw=google_event,
    )


# =============================================================================
# Weather
# =============================================================================


def _first_condition(block: dict[str, Any]) -> dict[str, Any]:
    conditions = block.get("weather") or []
    if conditions and isinstance(conditions[0], dict):
        return conditions[0]
    return {}


def _unix_to_iso(timestamp: int | float | None) -> str | None:
    if timestamp is None:
        return None
    return isoformat_utc(datetime.fromtimestamp(timestamp, tz=timezone.utc))


def _normalize_hour(hour: dict[str, Any]) -> HourlyEntry:
    temp = hour.get("temp") or 0
    condition = _first_condition(hour)
    return HourlyEntry(
        time=_unix_to_iso(hour.get("dt")),
        temp_c=round_half_up(temp),
        temp_f=celsius_to_fahrenheit(temp),
        precip_prob=hour.get("pop") or 0,
        condition=condition.get("main") or UNKNOWN,
        description=condition.get("description") or UNKNOWN,
    )


def normalize_weather_data(weather_data: dict[str, Any]) -> WeatherSummary:
    """Normalize an OpenWeather One Call response (metric units)."""
    current = weather_data.get("current") or {}
    hourly = (weather_data.get("hourly") or [])[:MAX_HOURLY_ENTRIES]

    temp = current.get("temp") or 0
    condition = _first_condition(current)

    return WeatherSummary(
        current=CurrentConditions(
            temp_c=round_half_up(temp),
            temp_f=celsius_to_fahrenheit(temp),
            condition=condition.get("main") or UNKNOWN,
            description=condition.get("description") or UNKNOWN,
            humidity=current.get("humidity") or 0,
            wind_speed=current.get("wind_speed") or 0,
        ),
        hourly=[_normalize_hour(hour) for hour in hourly],
        location=WeatherLocation(
            lat=weather_data.get("lat"),
            lon=weather_data.get("lon"),
            name=weather_data.get("timezone") or UNKNOWN,
        ),
    )


# =============================================================================
# Errors
# =============================================================================


def normalize_error(error: BaseException, context: str = "unknown") -> dict[str, Any]:
    """Wrap any failure in the uniform error shape.

    Only the exception message is exposed, never the exception object.
    """
    return {
        "error": True,
        "message": str(error) or "An unknown error occurred",
        "context": context,
        "timestamp": utc_now_iso(),
    }
