"""Domain models for the schedule assistant API."""

from schedule_assistant.models.credentials import CredentialSet
from schedule_assistant.models.event import NormalizedEvent
from schedule_assistant.models.location import Coordinates
from schedule_assistant.models.weather import (
    CurrentConditions,
    HourlyEntry,
    WeatherLocation,
    WeatherSummary,
)

__all__ = [
    "CredentialSet",
    "NormalizedEvent",
    "Coordinates",
    "CurrentConditions",
    "HourlyEntry",
    "WeatherLocation",
    "WeatherSummary",
]
