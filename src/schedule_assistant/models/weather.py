"""Normalized weather summary models.

All temperatures are whole degrees. Celsius is the rounded provider value
and Fahrenheit is derived from the unrounded Celsius value.
"""

from __future__ import annotations

from schedule_assistant.models.base import ApiModel

UNKNOWN = "Unknown"

# OpenWeather hourly block covers 48h; clients only need the next day
MAX_HOURLY_ENTRIES = 24


class CurrentConditions(ApiModel):
    """Conditions right now."""

    temp_c: int
    temp_f: int
    condition: str = UNKNOWN
    description: str = UNKNOWN
    humidity: float = 0
    wind_speed: float = 0


class HourlyEntry(ApiModel):
    """One hour of forecast."""

    time: str | None
    temp_c: int
    temp_f: int
    precip_prob: float = 0  # 0-1
    condition: str = UNKNOWN
    description: str = UNKNOWN


class WeatherLocation(ApiModel):
    lat: float | None = None
    lon: float | None = None
    name: str = UNKNOWN


class WeatherSummary(ApiModel):
    """Current conditions plus up to 24 hourly entries."""

    current: CurrentConditions
    hourly: list[HourlyEntry]
    location: WeatherLocation
