"""Core services and utilities for datacompliance."""

from .context import (
    SYSTEM_ACTOR,
    VIEW_TRAIL_CAPABILITY,
    Actor,
    ActorType,
    OperationContext,
    get_current_context_or_none,
    operation_context,
)
from .exceptions import (
    AuditAccessDenied,
    AuditEntryNotFound,
    AuditMutationDenied,
    AuditWriteFailed,
    ConcurrentOperationConflict,
    ConfigurationError,
    DataComplianceError,
    ErasureVetoed,
    HoldVeto,
    RecordConstraintViolated,
    StoreUnavailable,
)
from .locks import UserOperationLocks
from .timeouts import bounded

__all__ = [
    # Context
    "Actor",
    "ActorType",
    "OperationContext",
    "SYSTEM_ACTOR",
    "VIEW_TRAIL_CAPABILITY",
    "get_current_context_or_none",
    "operation_context",
    # Exceptions
    "AuditAccessDenied",
    "AuditEntryNotFound",
    "AuditMutationDenied",
    "AuditWriteFailed",
    "ConcurrentOperationConflict",
    "ConfigurationError",
    "DataComplianceError",
    "ErasureVetoed",
    "HoldVeto",
    "RecordConstraintViolated",
    "StoreUnavailable",
    # Concurrency
    "UserOperationLocks",
    "bounded",
]
