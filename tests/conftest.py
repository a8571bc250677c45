"""Global pytest configuration and fixtures.

Unit tests run the lock against the in-memory store with a manual clock so
TTL expiry can be exercised without sleeping.
"""

from __future__ import annotations

import pytest
import pytest_asyncio

from leaderlock.kv.base import KeyValue
from leaderlock.kv.memory import MemoryBackend
from leaderlock.provision import new_key_value
from tests.support import TEST_BUCKET, TEST_TTL, ManualClock


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def backend(clock: ManualClock) -> MemoryBackend:
    return MemoryBackend(clock=clock)


@pytest_asyncio.fixture
async def kv(backend: MemoryBackend) -> KeyValue:
    """Provisioned lock bucket with a 60s TTL."""
    return await new_key_value(backend, TEST_BUCKET, TEST_TTL)
