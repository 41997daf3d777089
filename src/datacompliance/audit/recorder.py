"""Audit recorder: append-only persistence of erasure audit entries."""

from typing import Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from datacompliance.audit.types import AuditEntry
from datacompliance.core.exceptions import StoreUnavailable
from datacompliance.core.logging import get_logger
from datacompliance.db.models.audit import AuditEntryRecord

logger = get_logger(__name__)


@runtime_checkable
class AuditRecorder(Protocol):
    """Appends audit entries. There is no update or delete operation."""

    async def record(self, entry: AuditEntry) -> None:
        """Durably append one entry.

        Raises:
            StoreUnavailable: If the write cannot be committed
        """
        ...


class SqlAuditRecorder:
    """AuditRecorder backed by the erasure_audit_entries table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(self, entry: AuditEntry) -> None:
        row = AuditEntryRecord(
            entry_id=entry.entry_id,
            recorded_at=entry.recorded_at,
            subject_id=entry.subject_id,
            actor_id=entry.actor_id,
            request_type=entry.request_type.value,
            status=entry.status.value,
            outcome=entry.outcome,
            domain_status=entry.domain_status,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("audit_write_failed", entry_id=str(entry.entry_id), error_type=type(e).__name__)
            raise StoreUnavailable("audit", "record", f"{type(e).__name__}: audit write not committed") from e

        logger.info(
            "audit_entry_recorded",
            entry_id=str(entry.entry_id),
            subject_id=entry.subject_id,
            status=entry.status.value,
        )
