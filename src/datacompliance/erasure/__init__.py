"""Erasure of a user's personal data.

The orchestrator lives in ``datacompliance.erasure.orchestrator``; it is not
re-exported here because the audit package depends on these outcome types.
"""

from datacompliance.erasure.pseudonymizer import (
    PSEUDONYMIZED_NOTE,
    PseudonymizationMethod,
    PseudonymizationResult,
    PseudonymizationRule,
    Pseudonymizer,
    generate_pseudonym_key,
)
from datacompliance.erasure.types import (
    UNCONFIRMED_CATEGORY,
    DomainFailure,
    DomainOutcome,
    DomainStatus,
    ErasureOutcome,
    ErasureStatus,
    FailureKind,
    is_valid_identifier,
    normalize_identifier,
)

__all__ = [
    # Outcome
    "DomainFailure",
    "DomainOutcome",
    "DomainStatus",
    "ErasureOutcome",
    "ErasureStatus",
    "FailureKind",
    "UNCONFIRMED_CATEGORY",
    "is_valid_identifier",
    "normalize_identifier",
    # Pseudonymization
    "PSEUDONYMIZED_NOTE",
    "PseudonymizationMethod",
    "PseudonymizationResult",
    "PseudonymizationRule",
    "Pseudonymizer",
    "generate_pseudonym_key",
]
