"""Type definitions for the erasure audit trail."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from uuid_utils.compat import uuid7

from datacompliance.erasure.types import ErasureOutcome, ErasureStatus
from datacompliance.types import RequestType, UserID


class AuditEntry(BaseModel):
    """What was erased, when, for whom and by whom.

    Immutable once created. Carries the subject's id, the actor's id,
    category labels and record identifiers; nothing else.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: UUID = Field(default_factory=uuid7)
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    subject_id: UserID
    actor_id: str
    request_type: RequestType
    status: ErasureStatus
    outcome: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    """domain -> category -> identifiers."""

    domain_status: dict[str, str] = Field(default_factory=dict)
    """domain -> completed | failed | skipped."""

    @classmethod
    def from_outcome(cls, outcome: ErasureOutcome, actor_id: str) -> "AuditEntry":
        """Summarize an erasure outcome for the audit trail."""
        return cls(
            subject_id=outcome.user_id,
            actor_id=actor_id,
            request_type=outcome.request_type,
            status=outcome.status,
            outcome=outcome.summary(),
            domain_status={name: d.status.value for name, d in outcome.domains.items()},
        )
