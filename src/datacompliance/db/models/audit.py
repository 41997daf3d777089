"""Audit entry model for recorded erasures."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, Integer, String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from datacompliance.core.exceptions import AuditMutationDenied

from .base import Base, JSONDocument


class AuditEntryRecord(Base):
    """Immutable, append-only record of one erasure.

    Holds identifiers and category labels only. Rows are inserted once and
    never updated or deleted; the mapper rejects both.
    """

    __tablename__ = "erasure_audit_entries"

    # UUIDv7 is time-ordered, making entries naturally sortable by ID
    entry_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid7)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    subject_id: Mapped[int] = mapped_column(Integer, nullable=False)
    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    request_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # domain -> category -> [identifiers]
    outcome: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    # domain -> completed | failed | skipped
    domain_status: Mapped[dict] = mapped_column(JSONDocument, nullable=False)

    __table_args__ = (
        Index("idx_erasure_audit_subject", "subject_id"),
        Index("idx_erasure_audit_recorded", "recorded_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditEntryRecord(id={self.entry_id}, status={self.status})>"


@event.listens_for(AuditEntryRecord, "before_update")
def _reject_update(mapper, connection, target):  # noqa: ARG001
    raise AuditMutationDenied("edit")


@event.listens_for(AuditEntryRecord, "before_delete")
def _reject_delete(mapper, connection, target):  # noqa: ARG001
    raise AuditMutationDenied("remove")
