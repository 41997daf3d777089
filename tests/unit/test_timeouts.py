"""Unit tests for bounded store calls."""

import asyncio

import pytest

from datacompliance.core.exceptions import StoreUnavailable
from datacompliance.core.timeouts import bounded


async def _value(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def test_returns_result():
    assert await bounded(_value(7), timeout=1.0, domain="shop", operation="list") == 7


async def test_no_timeout_waits():
    assert await bounded(_value("ok", 0.01), timeout=None, domain="shop", operation="list") == "ok"


async def test_timeout_becomes_store_unavailable():
    """Test that an expired call raises StoreUnavailable naming the call."""
    with pytest.raises(StoreUnavailable) as exc_info:
        await bounded(_value(1, 1.0), timeout=0.01, domain="shop", operation="erase_record")

    assert exc_info.value.domain == "shop"
    assert exc_info.value.operation == "erase_record"
    assert "Timeout" in str(exc_info.value)


async def test_other_errors_propagate():
    async def failing():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await bounded(failing(), timeout=1.0, domain="shop", operation="list")
