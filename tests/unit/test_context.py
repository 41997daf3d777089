"""Unit tests for the operation context."""

import asyncio
from uuid import UUID

from datacompliance.core.context import (
    SYSTEM_ACTOR,
    VIEW_TRAIL_CAPABILITY,
    Actor,
    ActorType,
    OperationContext,
    get_current_context_or_none,
    operation_context,
)


class TestActor:
    """Tests for Actor."""

    def test_capabilities(self):
        actor = Actor(actor_id="admin-1", capabilities=frozenset({VIEW_TRAIL_CAPABILITY}))

        assert actor.has_capability(VIEW_TRAIL_CAPABILITY)
        assert not actor.has_capability("core.admin")

    def test_system_actor(self):
        assert SYSTEM_ACTOR.actor_id == "system"
        assert SYSTEM_ACTOR.actor_type == ActorType.SYSTEM
        assert not SYSTEM_ACTOR.capabilities


class TestOperationContext:
    """Tests for operation_context."""

    def test_no_context_by_default(self):
        assert get_current_context_or_none() is None

    def test_context_set_and_restored(self):
        """Test that the context is visible inside the block and cleared after."""
        actor = Actor(actor_id="user-42")

        with operation_context(actor) as ctx:
            assert get_current_context_or_none() is ctx
            assert ctx.actor == actor
            assert isinstance(ctx.correlation_id, UUID)

        assert get_current_context_or_none() is None

    def test_nested_contexts(self):
        outer_actor = Actor(actor_id="outer")
        inner_actor = Actor(actor_id="inner")

        with operation_context(outer_actor) as outer:
            with operation_context(inner_actor):
                assert get_current_context_or_none().actor.actor_id == "inner"
            assert get_current_context_or_none() is outer

    def test_explicit_correlation_id(self):
        correlation_id = UUID("0190a5d2-7e3b-7c4d-8e9f-0a1b2c3d4e5f")

        with operation_context(SYSTEM_ACTOR, correlation_id=correlation_id) as ctx:
            assert ctx.correlation_id == correlation_id

    async def test_propagates_to_tasks(self):
        """Test that tasks created inside the block see the context."""
        actor = Actor(actor_id="user-42")

        async def read_actor():
            return get_current_context_or_none().actor.actor_id

        with operation_context(actor):
            assert await asyncio.create_task(read_actor()) == "user-42"

    def test_log_dict_has_no_capabilities(self):
        ctx = OperationContext(
            actor=Actor(actor_id="admin-1", capabilities=frozenset({VIEW_TRAIL_CAPABILITY}))
        )

        assert ctx.to_log_dict() == {
            "correlation_id": str(ctx.correlation_id),
            "actor_id": "admin-1",
            "actor_type": "human",
        }
