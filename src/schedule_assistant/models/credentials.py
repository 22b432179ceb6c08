"""OAuth credential set for the single supported user."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


class CredentialSet(BaseModel):
    """OAuth token bundle as issued by Google.

    Field names follow Google's token response so a stored record can be
    handed back to the provider unchanged. `expiry_date` is epoch millis.
    Unknown keys (e.g. `id_token`) are kept.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str | None = None
    refresh_token: str | None = None
    expiry_date: int | None = None
    scope: str | None = None
    token_type: str | None = None

    @property
    def expires_at(self) -> datetime | None:
        """Expiry as an aware UTC datetime."""
        if self.expiry_date is None:
            return None
        return datetime.fromtimestamp(self.expiry_date / 1000, tz=timezone.utc)

    def to_record(self) -> dict:
        """Serialize for durable storage, dropping unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
