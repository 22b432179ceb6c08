"""Single-user OAuth token store.

Holds at most one credential set. The in-memory copy is authoritative for
the life of the process; the durable slot (a JSON file or a database row)
is read once and then only written to.

## Consistency

The store is not coherent across processes: a second instance will not see
a logout performed by the first until it restarts. Concurrent requests in
one process share the same cached snapshot, last writer wins.

## Expiry

`has_valid_tokens()` treats a token as expired five minutes before its
`expiry_date` so a request never starts with a token that dies mid-flight.
A credential set without `expiry_date` is never considered expired.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from schedule_assistant.config import Settings
from schedule_assistant.database.connection import DatabaseTokenBackend
from schedule_assistant.errors import ConfigurationError, StorageError
from schedule_assistant.models.credentials import CredentialSet

logger = logging.getLogger(__name__)

EXPIRY_BUFFER_MS = 5 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


class TokenBackend(Protocol):
    """Durable slot for one credential record."""

    async def read(self) -> dict[str, Any] | None:
        """Return the stored record, or None if nothing is stored."""
        ...

    async def init(self) -> None:
        """Prepare the slot (create tables, directories)."""
        ...

    async def write(self, record: dict[str, Any]) -> None:
        ...

    async def delete(self) -> None:
        """Remove the stored record; a missing record is not an error."""
        ...

    async def close(self) -> None:
        ...


class FileTokenBackend:
    """Stores the credential record as pretty-printed JSON in one file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    async def init(self) -> None:
        return None

    async def read(self) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, record: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write_sync, record)

    async def delete(self) -> None:
        await asyncio.to_thread(self.path.unlink, missing_ok=True)

    async def close(self) -> None:
        return None

    def _read_sync(self) -> dict[str, Any] | None:
        try:
            data = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return json.loads(data)

    def _write_sync(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Replace atomically so a crash never leaves a truncated file
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def __repr__(self) -> str:
        return f"<FileTokenBackend {self.path}>"


class TokenStore:
    """Cached access to the single stored credential set.

    Example:
        ```python
        store = TokenStore(FileTokenBackend("tokens.json"))

        await store.save(tokens)
        if await store.has_valid_tokens():
            tokens = await store.load()

        await store.clear()
        ```
    """

    def __init__(self, backend: TokenBackend):
        self.backend = backend
        self._tokens: CredentialSet | None = None
        self._loaded = False

    async def load(self) -> CredentialSet | None:
        """Return the credential set, reading durable storage on first use.

        Raises:
            StorageError: If the durable slot exists but cannot be read
        """
        if self._loaded:
            return self._tokens

        try:
            record = await self.backend.read()
        except Exception as e:
            logger.error(f"Failed to read stored tokens from {self.backend!r}: {e}")
            raise StorageError(f"Failed to read stored tokens: {e}") from e

        try:
            tokens = CredentialSet.model_validate(record) if record else None
        except ValidationError as e:
            logger.error(f"Stored token record in {self.backend!r} is invalid: {e}")
            raise StorageError("Stored token record is invalid") from e

        self._tokens = tokens
        self._loaded = True
        return self._tokens

    async def save(self, tokens: CredentialSet) -> None:
        """Replace the credential set.

        The in-memory copy is updated first. A failed durable write is logged
        and otherwise ignored.
        """
        self._tokens = tokens
        self._loaded = True

        try:
            await self.backend.write(tokens.to_record())
        except Exception as e:
            logger.error(f"Failed to persist tokens to {self.backend!r}: {e}")

    async def clear(self) -> None:
        """Forget the credential set in memory and in durable storage."""
        self._tokens = None
        self._loaded = True

        try:
            await self.backend.delete()
        except Exception as e:
            logger.error(f"Failed to delete stored tokens from {self.backend!r}: {e}")

    async def has_valid_tokens(self, at_ms: int | None = None) -> bool:
        """Check for a usable access token.

        Args:
            at_ms: Evaluation time in epoch millis (default: now)
        """
        tokens = await self.load()
        if tokens is None or not tokens.access_token:
            return False

        if tokens.expiry_date is not None:
            current = now_ms() if at_ms is None else at_ms
            return current < tokens.expiry_date - EXPIRY_BUFFER_MS

        return True

    async def init(self) -> None:
        await self.backend.init()

    async def close(self) -> None:
        await self.backend.close()


def create_token_store(settings: Settings) -> TokenStore:
    """Build the token store for the configured storage backend.

    Raises:
        ConfigurationError: If database storage is selected without DATABASE_URL
    """
    if settings.token_storage == "database":
        if not settings.database_url:
            raise ConfigurationError(
                "DATABASE_URL is required when TOKEN_STORAGE=database"
            )
        return TokenStore(DatabaseTokenBackend(settings.database_url, echo=settings.debug))

    return TokenStore(FileTokenBackend(settings.token_file))
