"""Shared base for models serialized to API clients."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Model whose JSON form uses camelCase keys (tempC, isAllDay, ...)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self, **kwargs) -> dict:
        return self.model_dump(mode="json", by_alias=True, **kwargs)
