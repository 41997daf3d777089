"""Read path of the erasure audit trail.

Every read asks the authorization gate first. Every mutation is refused
for every actor.
"""

from datetime import UTC
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from datacompliance.audit.gate import AuthorizationGate, assert_task_allowed
from datacompliance.audit.types import AuditEntry
from datacompliance.core.context import Actor
from datacompliance.core.exceptions import (
    AuditAccessDenied,
    AuditEntryNotFound,
    AuditMutationDenied,
    StoreUnavailable,
)
from datacompliance.core.logging import get_logger
from datacompliance.db.models.audit import AuditEntryRecord
from datacompliance.types import UserID

logger = get_logger(__name__)

MAX_PAGE_SIZE = 1000


def _to_entry(row: AuditEntryRecord) -> AuditEntry:
    recorded_at = row.recorded_at
    if recorded_at.tzinfo is None:
        recorded_at = recorded_at.replace(tzinfo=UTC)  # SQLite drops the timezone
    return AuditEntry(
        entry_id=row.entry_id,
        recorded_at=recorded_at,
        subject_id=row.subject_id,
        actor_id=row.actor_id,
        request_type=row.request_type,
        status=row.status,
        outcome=row.outcome,
        domain_status=row.domain_status,
    )


class AuditTrail:
    """Query audit entries on behalf of an actor.

    Usage:
        trail = AuditTrail(session_factory, CapabilityGate())
        entries = await trail.list_entries(actor, subject_id=42)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gate: AuthorizationGate,
    ):
        self._session_factory = session_factory
        self._gate = gate

    def _authorize_read(self, actor: Actor) -> None:
        if not self._gate.may_view_audit_trail(actor):
            logger.warning("audit_access_denied", actor_id=actor.actor_id)
            raise AuditAccessDenied(actor.actor_id)

    async def list_entries(
        self,
        actor: Actor,
        subject_id: UserID | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditEntry]:
        """List entries, newest first.

        Args:
            actor: The requesting actor
            subject_id: Filter by erased user
            limit: Max results (max 1000)
            offset: Pagination offset

        Raises:
            AuditAccessDenied: If the actor may not view the audit trail
            StoreUnavailable: If the audit store cannot be read
        """
        self._authorize_read(actor)
        assert_task_allowed("browse")

        query = select(AuditEntryRecord).order_by(
            AuditEntryRecord.recorded_at.desc(),
            AuditEntryRecord.entry_id.desc(),  # Secondary sort for equal timestamps
        )
        if subject_id is not None:
            query = query.where(AuditEntryRecord.subject_id == subject_id)
        query = query.limit(min(limit, MAX_PAGE_SIZE)).offset(offset)

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreUnavailable("audit", "list", type(e).__name__) from e

        return [_to_entry(row) for row in rows]

    async def get_entry(self, actor: Actor, entry_id: UUID) -> AuditEntry:
        """Get a single entry.

        Raises:
            AuditAccessDenied: If the actor may not view the audit trail
            AuditEntryNotFound: If no such entry exists
        """
        self._authorize_read(actor)
        assert_task_allowed("read")

        try:
            async with self._session_factory() as session:
                row = await session.get(AuditEntryRecord, entry_id)
        except SQLAlchemyError as e:
            raise StoreUnavailable("audit", "get", type(e).__name__) from e

        if row is None:
            raise AuditEntryNotFound(entry_id)
        return _to_entry(row)

    async def perform_task(self, actor: Actor, task: str, entry_id: UUID) -> None:
        """Run a controller task against an entry; every mutating task is refused.

        Raises:
            AuditMutationDenied: Always, for any task other than reading
        """
        logger.warning(
            "audit_mutation_rejected", actor_id=actor.actor_id, task=task, entry_id=str(entry_id)
        )
        assert_task_allowed(task)
        raise AuditMutationDenied(task)

    async def update_entry(self, actor: Actor, entry_id: UUID, **changes: object) -> None:  # noqa: ARG002
        """Always refused."""
        await self.perform_task(actor, "edit", entry_id)

    async def delete_entry(self, actor: Actor, entry_id: UUID) -> None:
        """Always refused."""
        await self.perform_task(actor, "remove", entry_id)
