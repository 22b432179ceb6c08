"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Secrets (OAuth client secret, weather API key) should be provided via
environment variables or a local `.env` file, never committed config.

## OAuth Variables

- GOOGLE_CLIENT_ID: Google OAuth client ID
- GOOGLE_CLIENT_SECRET: Google OAuth client secret
- GOOGLE_REDIRECT_URI: Callback URL registered with Google

## Weather Variables

- OPENWEATHER_API_KEY: OpenWeather One Call API key

## Token Storage

- TOKEN_STORAGE: "file" (default) or "database"
- TOKEN_FILE: Path of the JSON token file (default: tokens.json)
- DATABASE_URL: SQLAlchemy async URL, required for "database" storage

## Example .env file

```
GOOGLE_CLIENT_ID=your-google-client-id.apps.googleusercontent.com
GOOGLE_CLIENT_SECRET=your-google-client-secret
GOOGLE_REDIRECT_URI=http://localhost:3000/oauth/callback
OPENWEATHER_API_KEY=your-openweather-key
PORT=3000
```
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Dev origins: web, Expo web, Metro bundler
DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:19006",
    "http://localhost:8081",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Personal AI Task Schedule Assistant API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    base_url: str | None = None

    # Google OAuth
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str | None = None

    # Weather
    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/3.0/onecall"
    weather_timeout_seconds: float = Field(default=10.0, gt=0)

    # Token storage
    token_storage: Literal["file", "database"] = "file"
    token_file: Path = Path("tokens.json")
    database_url: str | None = None

    # Include provider payloads in normalized events (None = follow debug)
    expose_raw_events: bool | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str | None:
        """Ensure database URL uses an async driver."""
        if not v:
            return None
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def google_oauth_configured(self) -> bool:
        """Check if all three Google OAuth values are present."""
        return bool(
            self.google_client_id
            and self.google_client_secret
            and self.google_redirect_uri
        )

    @property
    def weather_configured(self) -> bool:
        return bool(self.openweather_api_key)

    @property
    def include_raw_events(self) -> bool:
        if self.expose_raw_events is None:
            return self.debug
        return self.expose_raw_events

    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins: only the public base URL in production."""
        if self.is_production:
            return [self.base_url] if self.base_url else []
        return list(DEV_ORIGINS)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()
