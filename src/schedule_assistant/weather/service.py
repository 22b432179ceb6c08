"""Weather forecast service.

Validates coordinates, calls the configured provider and maps provider
failures onto API errors. All validation happens before any network call.

## Error Mapping

| Condition                 | Status | error                        |
|---------------------------|--------|------------------------------|
| lat/lon missing           | 400    | missing_coordinates          |
| lat/lon not numeric       | 400    | invalid_coordinates          |
| lat/lon out of range      | 400    | coordinates_out_of_range     |
| no API key configured     | 500    | weather_api_not_configured   |
| provider 401              | 500    | weather_api_key_invalid      |
| provider 429              | 503    | weather_api_rate_limited     |
| provider 400              | 400    | weather_api_bad_request      |
| timeout                   | 503    | weather_api_timeout          |
| anything else             | 503    | normalized weather_fetch_failed |

A rejected API key is a server misconfiguration, not a user auth failure,
so it is reported as 500.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from schedule_assistant.config import Settings
from schedule_assistant.errors import (
    ConfigurationError,
    RequestValidationError,
    UpstreamFailure,
    UpstreamUnavailableError,
)
from schedule_assistant.models.location import Coordinates
from schedule_assistant.models.weather import WeatherSummary
from schedule_assistant.normalizers import utc_now_iso
from schedule_assistant.providers.base import (
    AuthenticationError,
    BadRequestError,
    ProviderTimeoutError,
    RateLimitError,
)
from schedule_assistant.providers.openweather import OpenWeatherProvider

logger = logging.getLogger(__name__)


def parse_coordinates(lat: str | None, lon: str | None) -> Coordinates:
    """Validate raw query values.

    Raises:
        RequestValidationError: missing_coordinates, invalid_coordinates
            or coordinates_out_of_range
    """
    if not lat or not lon:
        raise RequestValidationError(
            "Latitude (lat) and longitude (lon) are required",
            error_code="missing_coordinates",
        )

    try:
        lat_num = float(lat)
        lon_num = float(lon)
    except ValueError:
        lat_num = lon_num = math.nan

    if not (math.isfinite(lat_num) and math.isfinite(lon_num)):
        raise RequestValidationError(
            "Latitude and longitude must be valid numbers",
            error_code="invalid_coordinates",
        )

    if not (-90 <= lat_num <= 90 and -180 <= lon_num <= 180):
        raise RequestValidationError(
            "Latitude must be between -90 and 90, longitude between -180 and 180",
            error_code="coordinates_out_of_range",
        )

    return Coordinates(latitude=lat_num, longitude=lon_num)


class WeatherService:
    """Fetches normalized forecasts.

    Example:
        ```python
        service = WeatherService(settings)
        summary = await service.get_forecast("40.7128", "-74.0060")
        ```
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport

    def _provider(self) -> OpenWeatherProvider:
        if not self.settings.weather_configured:
            raise ConfigurationError(
                "Weather API is not configured",
                error_code="weather_api_not_configured",
            )
        return OpenWeatherProvider(
            api_key=self.settings.openweather_api_key,
            base_url=self.settings.openweather_base_url,
            timeout=self.settings.weather_timeout_seconds,
            transport=self._transport,
        )

    async def get_forecast(self, lat: str | None, lon: str | None) -> WeatherSummary:
        """Current conditions plus the next 24 hours."""
        coordinates = parse_coordinates(lat, lon)
        provider = self._provider()

        try:
            return await provider.get_forecast(coordinates)
        except AuthenticationError as e:
            logger.error(f"Weather API rejected key: {e}")
            raise ConfigurationError(
                "Invalid weather API key", error_code="weather_api_key_invalid"
            ) from e
        except RateLimitError as e:
            logger.warning(f"Weather API rate limited: {e}")
            raise UpstreamUnavailableError(
                "Weather API rate limit exceeded. Please try again later.",
                error_code="weather_api_rate_limited",
            ) from e
        except BadRequestError as e:
            raise RequestValidationError(
                "Invalid coordinates provided to weather service",
                error_code="weather_api_bad_request",
            ) from e
        except ProviderTimeoutError as e:
            logger.warning(f"Weather API timeout: {e}")
            raise UpstreamUnavailableError(
                "Weather service request timed out. Please try again.",
                error_code="weather_api_timeout",
            ) from e
        except Exception as e:
            logger.error(f"Error fetching weather data: {e}")
            raise UpstreamFailure(e, "weather_fetch_failed") from e

    async def get_current(self, lat: str | None, lon: str | None) -> dict[str, Any]:
        """Current conditions only."""
        summary = await self.get_forecast(lat, lon)
        return {
            "current": summary.current.to_json_dict(),
            "location": summary.location.to_json_dict(),
            "fetchedAt": utc_now_iso(),
        }
