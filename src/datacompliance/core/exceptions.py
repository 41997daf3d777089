"""Error taxonomy for erasure, export and audit operations.

Policy outcomes (a hold vetoing deletion) and infrastructure failures
(a store that cannot be reached) are separate types so callers can never
confuse "you may not delete this account right now" with "the system could
not complete deletion".
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from datacompliance.erasure.types import ErasureOutcome
    from datacompliance.holds.types import HoldVerdict


class DataComplianceError(Exception):
    """Base exception for all datacompliance errors."""

    pass


class ConfigurationError(DataComplianceError):
    """Error in configuration or component wiring."""

    pass


class HoldVeto(DataComplianceError):
    """Raised when a hold forbids deleting a user right now.

    This is an expected, user-facing outcome and not a system failure.

    Attributes:
        verdict: The vetoing HoldVerdict
    """

    def __init__(self, verdict: HoldVerdict):
        super().__init__(verdict.reason or "Deletion is not permitted right now")
        self.verdict = verdict

    @property
    def reason(self) -> str:
        return self.args[0]

    @property
    def hold_name(self) -> str | None:
        return self.verdict.source

    @property
    def user_message(self) -> str:
        return f"Deletion is not permitted right now: {self.reason}"

    def __str__(self) -> str:
        return f"HoldVeto({self.hold_name}): {self.reason}"


class ErasureVetoed(HoldVeto):
    """Raised by the erasure orchestrator when a hold blocks an erasure request.

    Attributes:
        user_id: The user whose erasure was blocked
        request_type: Who or what initiated the request
    """

    def __init__(self, verdict: HoldVerdict, user_id: int, request_type: str):
        super().__init__(verdict)
        self.user_id = user_id
        self.request_type = request_type


class StoreUnavailable(DataComplianceError):
    """Raised when a record or audit store cannot be reached in time.

    Transient: the caller may retry. Nothing retries internally.

    Attributes:
        domain: Domain (or "audit") whose store failed
        operation: The store operation that failed
    """

    def __init__(self, domain: str, operation: str, reason: str = "store unavailable"):
        super().__init__(reason)
        self.domain = domain
        self.operation = operation

    def __str__(self) -> str:
        return f"StoreUnavailable({self.domain}.{self.operation}): {self.args[0]}"


class RecordConstraintViolated(DataComplianceError):
    """Raised when the store rejects a change for referential integrity reasons.

    Fatal to the erasure of the affected domain.

    Attributes:
        domain: Domain of the offending record
        record_ref: Non-identifying reference of the record (kind:key)
    """

    def __init__(self, domain: str, record_ref: str, reason: str):
        super().__init__(reason)
        self.domain = domain
        self.record_ref = record_ref

    def __str__(self) -> str:
        return f"RecordConstraintViolated({self.domain}, {self.record_ref}): {self.args[0]}"


class AuditWriteFailed(DataComplianceError):
    """Raised when erasure side effects happened but could not be audited.

    Operators must reconcile manually using the attached outcome.

    Attributes:
        outcome: The ErasureOutcome that could not be recorded
    """

    def __init__(self, outcome: ErasureOutcome, reason: str):
        super().__init__(reason)
        self.outcome = outcome

    def __str__(self) -> str:
        return (
            f"AuditWriteFailed: erasure of user {self.outcome.user_id} "
            f"succeeded but could not be audited ({self.args[0]})"
        )


class ConcurrentOperationConflict(DataComplianceError):
    """Raised when an operation for the same user is already in flight.

    Attributes:
        user_id: The contended user
        running: Kind of operation currently holding the user
        requested: Kind of operation that was rejected
    """

    def __init__(self, user_id: int, running: str, requested: str):
        super().__init__(f"A {running} operation is already in progress for user {user_id}")
        self.user_id = user_id
        self.running = running
        self.requested = requested

    def __str__(self) -> str:
        return f"ConcurrentOperationConflict: {self.args[0]} (requested={self.requested})"


class AuditAccessDenied(DataComplianceError):
    """Raised when an actor may not view the audit trail.

    Attributes:
        actor_id: The actor that was denied
    """

    def __init__(self, actor_id: UUID | str):
        super().__init__(f"Actor {actor_id} may not view the audit trail")
        self.actor_id = actor_id


class AuditMutationDenied(DataComplianceError):
    """Raised on every attempt to change or remove an audit entry.

    No capability grants audit mutation, administrators included.

    Attributes:
        task: The rejected audit task (edit, remove, ...)
    """

    def __init__(self, task: str):
        super().__init__(f"Audit entries are immutable; task '{task}' is not permitted")
        self.task = task


class AuditEntryNotFound(DataComplianceError):
    """Raised when an audit entry does not exist."""

    def __init__(self, entry_id: UUID | str):
        super().__init__(f"Audit entry not found: {entry_id}")
        self.entry_id = entry_id
