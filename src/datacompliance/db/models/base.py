"""Declarative base shared by the audit and domain store models."""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

JSONDocument = JSON().with_variant(JSONB(), "postgresql")
"""Outcome and params documents; JSONB on PostgreSQL."""


class Base(DeclarativeBase):
    pass
