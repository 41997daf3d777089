"""Erasure audit trail: append-only recording and gated reading.

Example Usage:
    ```python
    from datacompliance.audit import AuditTrail, CapabilityGate, SqlAuditRecorder

    recorder = SqlAuditRecorder(session_factory)
    trail = AuditTrail(session_factory, CapabilityGate())

    entries = await trail.list_entries(actor, subject_id=user_id)
    ```
"""

from datacompliance.audit.gate import (
    AUDIT_TASK_PRIVILEGES,
    AuthorizationGate,
    CapabilityGate,
    assert_task_allowed,
)
from datacompliance.audit.recorder import AuditRecorder, SqlAuditRecorder
from datacompliance.audit.trail import AuditTrail
from datacompliance.audit.types import AuditEntry

__all__ = [
    "AUDIT_TASK_PRIVILEGES",
    "AuditEntry",
    "AuditRecorder",
    "AuditTrail",
    "AuthorizationGate",
    "CapabilityGate",
    "SqlAuditRecorder",
    "assert_task_allowed",
]
