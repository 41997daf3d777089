"""Database configuration and models."""

from datacompliance.db.config import (
    create_all,
    create_engine,
    create_session_factory,
    enable_sqlite_foreign_keys,
)
from datacompliance.db.models import AuditEntryRecord, Base

__all__ = [
    "AuditEntryRecord",
    "Base",
    "create_all",
    "create_engine",
    "create_session_factory",
    "enable_sqlite_foreign_keys",
]
