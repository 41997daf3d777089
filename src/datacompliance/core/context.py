"""Operation context for erasure and export calls.

Carries the acting principal and a correlation id through one inbound
operation using contextvars, so log entries and audit entries can name the
initiating actor without passing it through every adapter call.

Usage:
    from datacompliance.core.context import Actor, operation_context

    actor = Actor(actor_id="admin-7", capabilities=frozenset({VIEW_TRAIL_CAPABILITY}))

    with operation_context(actor) as ctx:
        await service.request_erasure(user_id, RequestType.ADMIN, actor=ctx.actor)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from uuid_utils.compat import uuid7

VIEW_TRAIL_CAPABILITY = "datacompliance.view_trail"


class ActorType(str, Enum):
    """Type of actor performing the operation."""

    HUMAN = "human"  # The data subject or an administrator
    SERVICE = "service"  # Internal service call
    SYSTEM = "system"  # Lifecycle jobs (e.g. expired accounts)


class Actor(BaseModel):
    """The principal initiating an operation."""

    model_config = ConfigDict(frozen=True)

    actor_id: str
    actor_type: ActorType = ActorType.HUMAN
    capabilities: frozenset[str] = Field(default_factory=frozenset)

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities


SYSTEM_ACTOR = Actor(actor_id="system", actor_type=ActorType.SYSTEM)


class OperationContext(BaseModel):
    """Context for a single inbound operation."""

    actor: Actor
    correlation_id: UUID = Field(default_factory=uuid7)
    initiated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_log_dict(self) -> dict[str, Any]:
        """Fields safe to attach to every log entry."""
        return {
            "correlation_id": str(self.correlation_id),
            "actor_id": self.actor.actor_id,
            "actor_type": self.actor.actor_type.value,
        }


_operation_context: ContextVar[OperationContext | None] = ContextVar(
    "operation_context", default=None
)


def get_current_context_or_none() -> OperationContext | None:
    """Get the current operation context, or None if not set."""
    return _operation_context.get()


def set_context(ctx: OperationContext) -> Token[OperationContext | None]:
    """Set the operation context and return a token for restoration.

    This is a low-level API. Prefer using the operation_context() context manager.
    """
    return _operation_context.set(ctx)


def reset_context(token: Token[OperationContext | None]) -> None:
    """Reset the context to its previous value using a token."""
    _operation_context.reset(token)


@contextmanager
def operation_context(
    actor: Actor,
    correlation_id: UUID | None = None,
) -> Iterator[OperationContext]:
    """Context manager binding an OperationContext for the duration of the block.

    Works for both sync and async code because contextvars are propagated
    to tasks created inside the block.

    Args:
        actor: The acting principal
        correlation_id: Optional correlation ID (auto-generated if not provided)

    Yields:
        The context that was set
    """
    ctx = OperationContext(actor=actor, correlation_id=correlation_id or uuid7())
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)
