"""Location models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """A validated forecast point in decimal degrees.

    Built by `weather.service.parse_coordinates` from raw query strings, so
    the range checks here only guard direct construction.
    """

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def __str__(self) -> str:
        return f"{self.latitude},{self.longitude}"
