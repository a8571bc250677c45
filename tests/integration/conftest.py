"""Integration test fixtures using Docker.

Starts real Redis and NATS (JetStream) servers so the lock runs against the
stores it is deployed on. Skipped when Docker is unavailable.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from uuid import uuid4

import pytest
import pytest_asyncio

from leaderlock.kv.base import KeyValueBackend
from tests.integration.docker_utils import (
    StoreContainer,
    get_docker_client,
    store_container,
    wait_until_ready,
)


def pytest_collection_modifyitems(items):
    """Mark everything in this directory as an integration test."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def docker_client():
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        client = get_docker_client()
        client.ping()
    except Exception as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def redis_container(docker_client) -> Iterator[StoreContainer]:
    with store_container(docker_client, "redis:7-alpine", scheme="redis", port=6379) as redis:
        yield redis


@pytest.fixture(scope="session")
def nats_container(docker_client) -> Iterator[StoreContainer]:
    """NATS with JetStream enabled."""
    with store_container(
        docker_client,
        "nats:2.10-alpine",
        scheme="nats",
        port=4222,
        command=["-js"],
        ready_log="Server is ready",
    ) as nats:
        yield nats


@pytest_asyncio.fixture
async def redis_backend(redis_container: StoreContainer) -> AsyncIterator[KeyValueBackend]:
    """Redis backend with a unique key prefix per test."""
    from leaderlock.kv.redis import RedisBackend

    backend = RedisBackend.from_url(f"{redis_container.url}/0", prefix=f"test-{uuid4().hex[:8]}")
    await wait_until_ready(backend.client.ping)
    yield backend
    await backend.close()


@pytest_asyncio.fixture
async def nats_backend(nats_container: StoreContainer) -> AsyncIterator[KeyValueBackend]:
    pytest.importorskip("nats")
    from leaderlock.kv.nats import NatsBackend

    backend = await NatsBackend.connect(nats_container.url)
    yield backend
    await backend.close()


@pytest.fixture
def bucket_name() -> str:
    return f"test-bucket-{uuid4().hex[:8]}"
