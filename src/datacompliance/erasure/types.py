"""Type definitions for erasure processing.

An ErasureOutcome is what the orchestrator returns and what the audit
entry persists: per domain, per action category, an ordered list of
non-identifying record identifiers. Names, addresses, free-text notes, IP
addresses and user agents never enter it.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from datacompliance.types import ErasureAction, RequestType, UserID

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:/#-]{0,63}$")
"""Identifiers are short tokens: ids and display numbers, never free text."""

CATEGORY_PATTERN = re.compile(r"^[a-z][a-z0-9_]{0,63}$")

UNCONFIRMED_CATEGORY = "unconfirmed"
"""Records whose change may or may not have been applied when the store failed."""

_IDENTIFIER_INVALID_RUN = re.compile(r"[^A-Za-z0-9._:/#-]+")


class ErasureStatus(str, Enum):
    """Overall status of an erasure request."""

    COMPLETED = "completed"
    """Every domain was fully processed."""

    PARTIAL_FAILURE = "partial_failure"
    """At least one domain completed before another failed."""

    FAILED = "failed"
    """The first domain to run failed, possibly after committing some actions."""


class DomainStatus(str, Enum):
    """Status of one domain within an erasure request."""

    COMPLETED = "completed"
    FAILED = "failed"
    """Aborted part-way; actions listed are the ones that were committed."""

    SKIPPED = "skipped"
    """Not started because an earlier domain failed."""


class FailureKind(str, Enum):
    """Why a domain's erasure stopped."""

    STORE_UNAVAILABLE = "store_unavailable"
    RECORD_CONSTRAINT_VIOLATED = "record_constraint_violated"
    INTERNAL_ERROR = "internal_error"


class DomainFailure(BaseModel):
    """Failure details for one domain."""

    kind: FailureKind
    message: str
    record_ref: str | None = None
    """kind:key of the record being processed, if any."""


def is_valid_identifier(value: str) -> bool:
    return IDENTIFIER_PATTERN.match(value) is not None


def _validate_identifier(value: str) -> str:
    if not IDENTIFIER_PATTERN.match(value):
        raise ValueError(f"Not a non-identifying record identifier: {value[:16]!r}")
    return value


def normalize_identifier(value: str) -> str:
    """Fold a display number into an identifier token.

    Runs of characters outside the identifier alphabet become a single "-",
    so "CN 2024/0001" becomes "CN-2024/0001". The result may still be
    invalid (e.g. empty); callers check it with is_valid_identifier().
    """
    token = _IDENTIFIER_INVALID_RUN.sub("-", value.strip())
    return token.lstrip("._:/#-")[:64]


class DomainOutcome(BaseModel):
    """Actions taken in one domain."""

    domain: str
    status: DomainStatus = DomainStatus.COMPLETED
    categories: dict[str, list[str]] = Field(default_factory=dict)
    failure: DomainFailure | None = None

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for category, identifiers in value.items():
            if not CATEGORY_PATTERN.match(category):
                raise ValueError(f"Invalid category label: {category!r}")
            for identifier in identifiers:
                _validate_identifier(identifier)
        return value

    def add(self, action: ErasureAction) -> None:
        """Append an action's identifier under its category.

        Raises:
            ValueError: If the category or identifier could carry free text
        """
        if not CATEGORY_PATTERN.match(action.category):
            raise ValueError(f"Invalid category label: {action.category!r}")
        identifier = _validate_identifier(action.identifier)
        self.categories.setdefault(action.category, []).append(identifier)

    def mark_unconfirmed(self, identifier: str) -> None:
        """Record a record whose erase call failed without a definite answer."""
        self.categories.setdefault(UNCONFIRMED_CATEGORY, []).append(
            _validate_identifier(identifier)
        )

    @property
    def actions_count(self) -> int:
        return sum(
            len(ids) for category, ids in self.categories.items()
            if category != UNCONFIRMED_CATEGORY
        )


class ErasureOutcome(BaseModel):
    """Structured result of one erasure request."""

    user_id: UserID
    request_type: RequestType
    status: ErasureStatus = ErasureStatus.COMPLETED
    domains: dict[str, DomainOutcome] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.status == ErasureStatus.COMPLETED

    @property
    def failures(self) -> dict[str, DomainFailure]:
        """Failures by domain name."""
        return {
            name: outcome.failure
            for name, outcome in self.domains.items()
            if outcome.failure is not None
        }

    @property
    def actions_count(self) -> int:
        return sum(outcome.actions_count for outcome in self.domains.values())

    @property
    def user_message(self) -> str:
        """Human-readable summary for the requester."""
        if self.is_complete:
            return "The account data has been erased."
        failed = ", ".join(self.failures) or "unknown"
        return (
            "The system could not complete deletion "
            f"(failed domain: {failed}). Completed work has been recorded."
        )

    def summary(self) -> dict[str, dict[str, list[str]]]:
        """Domain -> category -> identifiers mapping persisted in the audit entry."""
        return {
            name: {category: list(ids) for category, ids in outcome.categories.items()}
            for name, outcome in self.domains.items()
        }
