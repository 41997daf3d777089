"""Type definitions for deletion holds."""

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict

from datacompliance.types import UserID


class HoldVerdict(BaseModel):
    """Answer of one hold, or of the whole evaluator.

    Computed fresh on every erasure attempt and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    vetoed: bool
    """Whether deletion is blocked."""

    reason: str | None = None
    """Human-readable reason for the veto."""

    source: str | None = None
    """Name of the hold that raised the veto."""

    @classmethod
    def allow(cls) -> "HoldVerdict":
        return cls(vetoed=False)

    @classmethod
    def veto(cls, source: str, reason: str) -> "HoldVerdict":
        return cls(vetoed=True, reason=reason, source=source)


HoldPredicate: TypeAlias = Callable[[UserID], Awaitable[HoldVerdict]]
"""Async callable deciding whether a user may be deleted."""
