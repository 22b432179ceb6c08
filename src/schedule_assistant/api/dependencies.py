"""FastAPI dependencies.

Services are built once by the app factory and kept on `app.state`; route
handlers receive them through these dependencies, which lets tests swap in
their own instances.

## Usage

```python
from fastapi import Depends
from schedule_assistant.api.dependencies import get_events_service

@router.get("/events")
async def list_events(service: EventsService = Depends(get_events_service)):
    ...
```
"""

from __future__ import annotations

from fastapi import Request

from schedule_assistant.auth.flow import AuthFlowService
from schedule_assistant.calendar.service import EventsService
from schedule_assistant.config import Settings
from schedule_assistant.weather.service import WeatherService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_flow(request: Request) -> AuthFlowService:
    return request.app.state.auth_flow


def get_events_service(request: Request) -> EventsService:
    return request.app.state.events_service


def get_weather_service(request: Request) -> WeatherService:
    return request.app.state.weather_service
