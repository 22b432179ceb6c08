"""Weather routes.

Coordinates are taken as raw strings so that validation errors use the
API's own error codes rather than FastAPI's 422 body.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from schedule_assistant.api.dependencies import get_weather_service
from schedule_assistant.weather.service import WeatherService

router = APIRouter()


async def _forecast(lat: str | None, lon: str | None, service: WeatherService) -> dict[str, Any]:
    summary = await service.get_forecast(lat, lon)
    return summary.to_json_dict()


@router.get("")
async def get_weather(
    lat: str | None = None,
    lon: str | None = None,
    service: WeatherService = Depends(get_weather_service),
) -> dict[str, Any]:
    """Current conditions and the next 24 hours."""
    return await _forecast(lat, lon, service)


@router.get("/location")
async def get_weather_for_location(
    lat: str | None = None,
    lon: str | None = None,
    service: WeatherService = Depends(get_weather_service),
) -> dict[str, Any]:
    """Same as GET /weather."""
    return await _forecast(lat, lon, service)


@router.get("/current")
async def get_current_weather(
    lat: str | None = None,
    lon: str | None = None,
    service: WeatherService = Depends(get_weather_service),
) -> dict[str, Any]:
    """Current conditions only."""
    return await service.get_current(lat, lon)
