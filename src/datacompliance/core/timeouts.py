"""Bounded store calls.

Every adapter and audit store call runs under a caller-supplied timeout;
expiry surfaces as StoreUnavailable instead of blocking indefinitely.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from datacompliance.core.exceptions import StoreUnavailable

T = TypeVar("T")


async def bounded(
    awaitable: Awaitable[T],
    *,
    timeout: float | None,
    domain: str,
    operation: str,
) -> T:
    """Await a store call, converting a timeout into StoreUnavailable.

    Args:
        awaitable: The store call
        timeout: Seconds to wait (None waits indefinitely)
        domain: Domain name used in the error
        operation: Operation name used in the error

    Returns:
        The store call's result

    Raises:
        StoreUnavailable: If the call does not complete within timeout
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError as e:
        raise StoreUnavailable(domain, operation, f"Timeout after {timeout}s") from e
