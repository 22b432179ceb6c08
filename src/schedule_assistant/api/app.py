"""FastAPI application factory.

Creates and configures the FastAPI application with all routes and middleware.

## Usage

```python
from schedule_assistant.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3000)
```

## Configuration

Settings are assembled once (see `schedule_assistant.config`) and handed to
every service explicitly. Tests pass their own settings, token store,
calendar client factory or httpx transport.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schedule_assistant.auth.flow import AuthFlowService
from schedule_assistant.auth.token_store import TokenStore, create_token_store
from schedule_assistant.calendar.google_calendar import GoogleCalendarClient
from schedule_assistant.calendar.service import CalendarClientFactory, EventsService
from schedule_assistant.config import Settings, get_settings
from schedule_assistant.errors import ServiceError
from schedule_assistant.normalizers import utc_now_iso
from schedule_assistant.weather.service import WeatherService

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /health",
    "GET /auth/google",
    "GET /oauth/callback",
    "GET /events",
    "GET /events/today",
    "GET /events/upcoming",
    "GET /weather",
    "GET /weather/current",
    "GET /session",
    "POST /logout",
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Prepares the token storage on startup and releases it on shutdown.
    """
    settings: Settings = app.state.settings

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    await app.state.token_store.init()

    yield

    logger.info("Shutting down")
    await app.state.token_store.close()


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code != 404:
            return await http_exception_handler(request, exc)
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": f"Route {request.url.path} not found",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "timestamp": utc_now_iso(),
            },
        )


def create_app(
    settings: Settings | None = None,
    token_store: TokenStore | None = None,
    calendar_client_factory: CalendarClientFactory = GoogleCalendarClient,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (default: loaded from environment)
        token_store: Token store (default: built from settings)
        calendar_client_factory: Builds calendar clients from credentials
        transport: httpx transport for outbound OAuth and weather calls

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    token_store = token_store or create_token_store(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Calendar and weather proxy for the schedule assistant app",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.token_store = token_store
    app.state.auth_flow = AuthFlowService(settings, token_store, transport=transport)
    app.state.events_service = EventsService(
        settings, token_store, client_factory=calendar_client_factory
    )
    app.state.weather_service = WeatherService(settings, transport=transport)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        logger.info(f"{request.method} {request.url.path}")
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} - {duration_ms:.0f}ms"
        )
        return response

    _register_exception_handlers(app)

    # Include routers
    from schedule_assistant.api.routes import auth, events, health, weather

    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(events.router, prefix="/events", tags=["Events"])
    app.include_router(weather.router, prefix="/weather", tags=["Weather"])

    @app.get("/", tags=["Health"])
    async def root():
        """Service banner."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "timestamp": utc_now_iso(),
            "endpoints": {
                "health": "/health",
                "auth": "/auth/google",
                "events": "/events",
                "weather": "/weather",
                "session": "/session",
            },
        }

    return app
