"""Database models.

## Schema Overview

```
oauth_credentials
└── one row per provider ("google"), token record stored as JSON
```

Only one row ever exists for the single supported user.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    type_annotation_map = {
        dict[str, Any]: JSON,
    }


class OAuthCredential(Base):
    """Stored OAuth credential record.

    The record is kept exactly as issued by the provider so that it can be
    handed back to the provider client unchanged.
    """

    __tablename__ = "oauth_credentials"

    provider: Mapped[str] = mapped_column(String(50), primary_key=True)
    record: Mapped[dict[str, Any]] = mapped_column(nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<OAuthCredential {self.provider}>"
