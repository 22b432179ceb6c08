"""Calendar event routes.

All three routes share `EventsService.fetch_events` and each formats its own
response.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from schedule_assistant.api.dependencies import get_app_settings, get_events_service
from schedule_assistant.calendar.service import EventsService
from schedule_assistant.config import Settings

router = APIRouter()


@router.get("")
async def list_events(
    time_from: str | None = Query(default=None, alias="from"),
    time_to: str | None = Query(default=None, alias="to"),
    service: EventsService = Depends(get_events_service),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """List events between `from` and `to` (default: now to +7 days)."""
    result = await service.list_events(time_from=time_from, time_to=time_to)
    return result.to_response(include_raw=settings.include_raw_events)


@router.get("/today")
async def list_today(
    service: EventsService = Depends(get_events_service),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """List events from local midnight to the next midnight."""
    result = await service.list_today()
    return result.to_response(include_raw=settings.include_raw_events)


@router.get("/upcoming")
async def list_upcoming(
    service: EventsService = Depends(get_events_service),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """List events for the next seven days."""
    result = await service.list_upcoming()
    return result.to_response(include_raw=settings.include_raw_events)
