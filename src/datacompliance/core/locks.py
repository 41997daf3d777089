"""Per-user operation lock.

Erasure holds a user exclusively; exports share the user with each other
but never with an erasure. A conflicting request is rejected immediately
with ConcurrentOperationConflict instead of queueing behind the running
operation.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from datacompliance.core.exceptions import ConcurrentOperationConflict
from datacompliance.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _UserLockState:
    exclusive_operation: str | None = None
    shared_holders: int = 0

    @property
    def is_free(self) -> bool:
        return self.exclusive_operation is None and self.shared_holders == 0


class UserOperationLocks:
    """Registry of in-flight operations keyed by user ID.

    Usage:
        locks = UserOperationLocks()

        async with locks.exclusive(user_id, "erasure"):
            ...  # no export or other erasure of user_id can start here

        async with locks.shared(user_id, "export"):
            ...  # other exports of user_id may run concurrently
    """

    def __init__(self):
        self._states: dict[int, _UserLockState] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def exclusive(self, user_id: int, operation: str = "erasure") -> AsyncIterator[None]:
        """Hold user_id exclusively for the duration of the block.

        Raises:
            ConcurrentOperationConflict: If any operation already holds the user
        """
        async with self._lock:
            state = self._states.setdefault(user_id, _UserLockState())
            if not state.is_free:
                running = state.exclusive_operation or "export"
                logger.warning(
                    "operation_conflict", user_id=user_id, running=running, requested=operation
                )
                raise ConcurrentOperationConflict(user_id, running=running, requested=operation)
            state.exclusive_operation = operation

        try:
            yield
        finally:
            async with self._lock:
                state.exclusive_operation = None
                self._discard_if_free(user_id)

    @asynccontextmanager
    async def shared(self, user_id: int, operation: str = "export") -> AsyncIterator[None]:
        """Share user_id with other shared holders for the duration of the block.

        Raises:
            ConcurrentOperationConflict: If an exclusive operation holds the user
        """
        async with self._lock:
            state = self._states.setdefault(user_id, _UserLockState())
            if state.exclusive_operation is not None:
                running = state.exclusive_operation
                logger.warning(
                    "operation_conflict", user_id=user_id, running=running, requested=operation
                )
                raise ConcurrentOperationConflict(user_id, running=running, requested=operation)
            state.shared_holders += 1

        try:
            yield
        finally:
            async with self._lock:
                state.shared_holders -= 1
                self._discard_if_free(user_id)

    def is_busy(self, user_id: int) -> bool:
        """Check whether any operation currently holds user_id."""
        state = self._states.get(user_id)
        return state is not None and not state.is_free

    def _discard_if_free(self, user_id: int) -> None:
        state = self._states.get(user_id)
        if state is not None and state.is_free:
            del self._states[user_id]
