"""In-memory TTL key-value store.

For tests and single-process development. Expiry is evaluated lazily against
an injectable monotonic clock, so tests can advance time without sleeping.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from leaderlock.errors import BucketNotFoundError, KeyNotFoundError
from leaderlock.kv.base import BucketStatus, KeyValue, KeyValueBackend


@dataclass
class _Bucket:
    ttl: float
    # key -> (value, written_at)
    entries: dict[str, tuple[bytes, float]] = field(default_factory=dict)


class MemoryKeyValue(KeyValue):
    """Bucket handle backed by a ``MemoryBackend``."""

    def __init__(self, backend: MemoryBackend, name: str):
        self._backend = backend
        self._name = name

    @property
    def bucket(self) -> str:
        return self._name

    def _bucket(self) -> _Bucket:
        bucket = self._backend._buckets.get(self._name)
        if bucket is None:
            raise BucketNotFoundError(self._name)
        return bucket

    async def get(self, key: str) -> bytes:
        bucket = self._bucket()
        entry = bucket.entries.get(key)
        if entry is None:
            raise KeyNotFoundError(key)

        value, written_at = entry
        if self._backend.clock() - written_at >= bucket.ttl:
            del bucket.entries[key]
            raise KeyNotFoundError(key)
        return value

    async def put(self, key: str, value: bytes) -> None:
        bucket = self._bucket()
        bucket.entries[key] = (bytes(value), self._backend.clock())

    async def purge(self, key: str) -> None:
        self._bucket().entries.pop(key, None)

    async def status(self) -> BucketStatus:
        return BucketStatus(bucket=self._name, ttl=self._bucket().ttl)


class MemoryBackend(KeyValueBackend):
    """Process-local store of TTL buckets.

    Args:
        clock: Monotonic time source in seconds (default ``time.monotonic``)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._buckets: dict[str, _Bucket] = {}

    async def key_value(self, name: str) -> KeyValue:
        if name not in self._buckets:
            raise BucketNotFoundError(name)
        return MemoryKeyValue(self, name)

    async def create_key_value(self, name: str, ttl: float) -> KeyValue:
        self._buckets.setdefault(name, _Bucket(ttl=ttl))
        return MemoryKeyValue(self, name)

    async def delete_key_value(self, name: str) -> None:
        if self._buckets.pop(name, None) is None:
            raise BucketNotFoundError(name)
