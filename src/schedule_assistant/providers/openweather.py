"""OpenWeather One Call provider.

## API Documentation Summary
Source: https://openweathermap.org/api/one-call-3

## Endpoint
- URL: https://api.openweathermap.org/data/3.0/onecall
- Example: .../onecall?lat=40.71&lon=-74.01&units=metric&exclude=minutely,daily,alerts&appid=KEY

## Authentication
- API key passed as the `appid` query parameter

## Request Parameters
| Parameter | Value used                      |
|-----------|---------------------------------|
| units     | metric (Celsius, m/s)           |
| exclude   | minutely,daily,alerts           |

## Response Format
```json
{
  "lat": 40.71,
  "lon": -74.01,
  "timezone": "America/New_York",
  "current": {
    "dt": 1718452800,
    "temp": 22.4,
    "humidity": 60,
    "wind_speed": 3.5,
    "weather": [{"main": "Clouds", "description": "scattered clouds"}]
  },
  "hourly": [
    {"dt": 1718452800, "temp": 22.4, "pop": 0.1, "weather": [...]},
    ...
  ]
}
```

See `schedule_assistant.normalizers` for the field translation.
"""

from __future__ import annotations

from typing import Any

from schedule_assistant.models.location import Coordinates
from schedule_assistant.models.weather import WeatherSummary
from schedule_assistant.normalizers import normalize_weather_data
from schedule_assistant.providers.base import (
    AuthenticationError,
    ProviderError,
    WeatherProvider,
)

EXCLUDED_BLOCKS = "minutely,daily,alerts"


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather One Call 3.0 provider.

    Example:
        ```python
        provider = OpenWeatherProvider(api_key="your-api-key")
        summary = await provider.get_forecast(
            Coordinates(latitude=40.7128, longitude=-74.0060)
        )
        ```
    """

    name = "openweather"
    base_url = "https://api.openweathermap.org/data/3.0/onecall"

    def __init__(self, api_key: str, base_url: str | None = None, **kwargs: Any):
        super().__init__(api_key=api_key, **kwargs)
        if base_url:
            self.base_url = base_url

    async def get_forecast(self, coordinates: Coordinates) -> WeatherSummary:
        """Get current and hourly conditions.

        Raises:
            AuthenticationError: If API key is missing or invalid
            ProviderError: If the request fails or the body is not JSON
        """
        if not self.api_key:
            raise AuthenticationError(
                "API key required for OpenWeather",
                provider=self.name,
            )

        params: dict[str, Any] = {
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "appid": self.api_key,
            "units": "metric",
            "exclude": EXCLUDED_BLOCKS,
        }

        response = await self._fetch(self.base_url, params=params)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Failed to parse response: {e}",
                provider=self.name,
                response_body=response.text,
            )

        if not isinstance(data, dict):
            raise ProviderError("Unexpected response format", provider=self.name)

        return self._translate_response(data)

    def _translate_response(self, response_data: dict[str, Any]) -> WeatherSummary:
        return normalize_weather_data(response_data)
