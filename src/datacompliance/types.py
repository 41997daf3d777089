"""Shared type definitions for erasure and export processing.

These are the values that cross the domain adapter contract: record
snapshots, the erasure action an adapter reports back, and the labeled
export sections an adapter produces.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, Field

UserID: TypeAlias = int
"""Opaque, stable identifier of the data subject."""


class RequestType(str, Enum):
    """Who or what initiated an erasure request."""

    USER = "user"
    """The data subject asked for their own account to be deleted."""

    ADMIN = "admin"
    """An administrator deleted the account."""

    LIFECYCLE = "lifecycle"
    """An expired-account lifecycle job deleted the account."""


class ActionKind(str, Enum):
    """What happened to a record during erasure."""

    DELETED = "deleted"
    ANONYMIZED = "anonymized"


@dataclass(frozen=True)
class DomainRecord:
    """Snapshot of one stored entity belonging to a user.

    Adapters build these from explicit store reads. A record never loads
    related records on its own; dependents are fetched through
    DomainAdapter.dependents_of().
    """

    domain: str
    """Domain that owns the record (e.g. "subscriptions")."""

    kind: str
    """Record type within the domain (e.g. "subscription", "invoice")."""

    key: int | str
    """Store primary key."""

    display_id: str
    """Non-identifying label used in outcomes (id or display number)."""

    lifecycle_state: str | None = None
    """Mutable lifecycle state (e.g. payment state)."""

    settled: bool = False
    """Whether the lifecycle state counts as settled."""

    created_at: datetime | None = None
    """When the record was created."""

    data: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)
    """Raw column values, used only for export."""

    @property
    def ref(self) -> str:
        """Non-identifying reference used in logs and errors."""
        return f"{self.kind}:{self.key}"


@dataclass(frozen=True)
class ErasureAction:
    """Result of erasing a single record.

    Attributes:
        kind: Deleted or anonymized
        category: Outcome category label (e.g. "subscriptions_deleted")
        identifier: Non-identifying record identifier
        fields_cleared: Names of the fields an anonymization cleared
    """

    kind: ActionKind
    category: str
    identifier: str
    fields_cleared: tuple[str, ...] = ()

    @classmethod
    def deleted(cls, category: str, identifier: str | int) -> "ErasureAction":
        return cls(ActionKind.DELETED, category, str(identifier))

    @classmethod
    def anonymized(
        cls,
        category: str,
        identifier: str | int,
        fields_cleared: Iterable[str] = (),
    ) -> "ErasureAction":
        return cls(ActionKind.ANONYMIZED, category, str(identifier), tuple(fields_cleared))


def _export_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Decimal | int | float):
        return str(value)
    if isinstance(value, Mapping | list | tuple):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


class ExportItem(BaseModel):
    """One exported record as ordered field/value pairs."""

    fields: dict[str, str | None] = Field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        exclude: Iterable[str] = (),
    ) -> "ExportItem":
        """Build an item from column values, dropping excluded fields.

        Args:
            data: Column name to value mapping
            exclude: Field names never to disclose (derived secrets)

        Returns:
            ExportItem with values rendered as strings
        """
        excluded = set(exclude)
        return cls(
            fields={
                name: _export_value(value) for name, value in data.items() if name not in excluded
            }
        )


class ExportSection(BaseModel):
    """A domain-labeled group of exported items."""

    name: str
    description: str = ""
    items: list[ExportItem] = Field(default_factory=list)
    warning: str | None = None
    """Set when the section is empty because its adapter failed."""


class ExportTree(BaseModel):
    """Snapshot of all personal data held about one user."""

    user_id: UserID
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sections: list[ExportSection] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """Whether any adapter failed and left an empty section."""
        return bool(self.warnings)

    def section(self, name: str) -> ExportSection | None:
        """Get a section by name."""
        return next((s for s in self.sections if s.name == name), None)
