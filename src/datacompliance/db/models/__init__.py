"""Database models."""

from .audit import AuditEntryRecord
from .base import Base, JSONDocument

__all__ = ["AuditEntryRecord", "Base", "JSONDocument"]
