"""Database-backed token storage.

This module provides:
- SQLAlchemy async engine management
- The `oauth_credentials` table holding the single credential record
"""

from schedule_assistant.database.connection import DatabaseTokenBackend
from schedule_assistant.database.models import Base, OAuthCredential

__all__ = [
    "DatabaseTokenBackend",
    "Base",
    "OAuthCredential",
]
