"""Normalized calendar event model."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from schedule_assistant.models.base import ApiModel

EVENT_SOURCE = "google-calendar"


class NormalizedEvent(ApiModel):
    """Provider-independent view of a calendar event.

    `start`/`end` are passed through as the provider sent them: an RFC 3339
    timestamp for timed events or a `YYYY-MM-DD` date for all-day events.
    `raw` is the debug passthrough of the provider payload and is only
    serialized when raw events are enabled.
    """

    id: str | None
    title: str
    start: str | None
    end: str | None
    location: str | None
    description: str | None
    is_all_day: bool
    source: Literal["google-calendar"] = EVENT_SOURCE
    raw: dict[str, Any] | None = Field(default=None, repr=False)

    def to_response(self, include_raw: bool = False) -> dict[str, Any]:
        if include_raw:
            return self.to_json_dict()
        return self.to_json_dict(exclude={"raw"})
