"""Weather data providers."""

from schedule_assistant.providers.base import (
    AuthenticationError,
    BadRequestError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
    WeatherProvider,
)
from schedule_assistant.providers.openweather import OpenWeatherProvider

__all__ = [
    "WeatherProvider",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "BadRequestError",
    "ProviderTimeoutError",
    "OpenWeatherProvider",
]
