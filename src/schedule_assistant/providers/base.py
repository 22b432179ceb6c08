"""Weather provider interface.

A provider makes exactly one HTTP request per forecast and turns the
outcome into either a `WeatherSummary` or one of the errors below. It knows
nothing about API error codes; `weather.service` maps these onto them.

## Status Mapping

| Upstream outcome   | Exception            |
|--------------------|----------------------|
| 401                | AuthenticationError  |
| 429                | RateLimitError       |
| 400                | BadRequestError      |
| timeout            | ProviderTimeoutError |
| other 4xx/5xx      | ProviderError        |
| connection failure | ProviderError        |
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from schedule_assistant import __version__
from schedule_assistant.models.location import Coordinates
from schedule_assistant.models.weather import WeatherSummary


class ProviderError(Exception):
    """A forecast request failed."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class AuthenticationError(ProviderError):
    """The API key was missing or rejected."""


class RateLimitError(ProviderError):
    """The provider's quota is exhausted."""


class BadRequestError(ProviderError):
    """The provider refused the query parameters."""


class ProviderTimeoutError(ProviderError):
    """No answer within the configured timeout."""


_STATUS_ERRORS: dict[int, tuple[type[ProviderError], str]] = {
    401: (AuthenticationError, "API key rejected"),
    429: (RateLimitError, "Rate limit exceeded"),
    400: (BadRequestError, "Request parameters rejected"),
}


class WeatherProvider(ABC):
    """Base class for forecast providers.

    Subclasses set `name` and `base_url` and implement `get_forecast` and
    `_translate_response`.
    """

    name: str
    base_url: str

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": f"schedule-assistant/{__version__}",
            "Accept": "application/json",
        }

    async def _fetch(self, url: str, params: dict[str, Any]) -> httpx.Response:
        """GET `url` once and raise for any non-2xx outcome."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(url, params=params, headers=self.headers)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"{self.name} did not respond within {self.timeout}s",
                provider=self.name,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name} request failed: {e}", provider=self.name) from e

        if response.is_success:
            return response

        error_class, message = _STATUS_ERRORS.get(
            response.status_code,
            (ProviderError, f"{self.name} returned HTTP {response.status_code}"),
        )
        raise error_class(
            message,
            provider=self.name,
            status_code=response.status_code,
            response_body=response.text,
        )

    @abstractmethod
    async def get_forecast(self, coordinates: Coordinates) -> WeatherSummary:
        """Current conditions plus the hourly forecast for a point.

        Raises:
            ProviderError: If the forecast cannot be retrieved
        """

    @abstractmethod
    def _translate_response(self, response_data: dict[str, Any]) -> WeatherSummary:
        """Convert the provider's payload to a `WeatherSummary`."""
