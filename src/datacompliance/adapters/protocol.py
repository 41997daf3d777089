"""Domain adapter protocol.

This module defines the interface every data domain implements so the
erasure and export orchestrators can process a user's records without
knowing how or where a domain stores them.
"""

from collections.abc import AsyncIterator, Sequence
from typing import Protocol, runtime_checkable

from datacompliance.types import DomainRecord, ErasureAction, ExportSection, UserID


@runtime_checkable
class DomainAdapter(Protocol):
    """Interface all domain adapters must implement.

    Adapters never retry and never interpret store failures: they raise
    StoreUnavailable or RecordConstraintViolated and let the orchestrator
    decide.

    Example implementation:
        class NewsletterAdapter:
            domain = "newsletter"
            description = "Newsletter subscriptions"

            async def list_user_records(self, user_id):
                for row in await self._store.rows_for(user_id):
                    yield DomainRecord(domain=self.domain, kind="signup", ...)

            async def dependents_of(self, record):
                return []

            async def erase_record(self, record):
                await self._store.delete(record.key)
                return ErasureAction.deleted("signups", record.key)

            async def export_user_records(self, user_id):
                ...
    """

    @property
    def domain(self) -> str:
        """Unique domain name (e.g. "subscriptions")."""
        ...

    @property
    def description(self) -> str:
        """Human-readable description of the domain."""
        ...

    def list_user_records(self, user_id: UserID) -> AsyncIterator[DomainRecord]:
        """Enumerate every top-level record of the user.

        Finite and restartable; never paginated, since erasure must see
        every record.
        """
        ...

    async def dependents_of(self, record: DomainRecord) -> Sequence[DomainRecord]:
        """Records that must be erased before the given record.

        Returns:
            Ordered dependents, possibly empty
        """
        ...

    async def erase_record(self, record: DomainRecord) -> ErasureAction:
        """Delete or anonymize one record.

        The decision must be deterministic given the record's lifecycle state.
        """
        ...

    async def export_user_records(self, user_id: UserID) -> Sequence[ExportSection]:
        """Export the user's records (and their dependents) as labeled sections.

        Never includes derived secrets such as payment tokens.
        """
        ...
