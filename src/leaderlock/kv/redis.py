"""Redis TTL key-value store.

Redis has no native bucket concept, so a bucket is a marker key holding the
bucket TTL in milliseconds, and each entry is a plain key written with that
TTL as its expiry:

    {prefix}:bucket:{name}       -> "<ttl_ms>"
    {prefix}:kv:{name}:{key}     -> value (PX ttl_ms)

Writes go through a Lua script that reads the marker and refuses to write
when the bucket is gone, so a deleted bucket cannot be resurrected by a
late put.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from leaderlock.errors import BackendError, BucketNotFoundError, KeyNotFoundError
from leaderlock.kv.base import BucketStatus, KeyValue, KeyValueBackend

if TYPE_CHECKING:
    from redis.asyncio import Redis

DEFAULT_PREFIX = "leaderlock"

# KEYS[1] = bucket marker, KEYS[2] = entry key, ARGV[1] = value
_PUT_SCRIPT = """
local ttl = redis.call("GET", KEYS[1])
if not ttl then
    return 0
end
redis.call("SET", KEYS[2], ARGV[1], "PX", ttl)
return 1
"""


class RedisKeys:
    """Key generator for one key prefix."""

    def __init__(self, prefix: str = DEFAULT_PREFIX):
        self.prefix = prefix

    def bucket(self, name: str) -> str:
        """Key for the bucket marker."""
        return f"{self.prefix}:bucket:{name}"

    def entry(self, name: str, key: str) -> str:
        """Key for an entry inside a bucket."""
        return f"{self.prefix}:kv:{name}:{key}"

    def entry_pattern(self, name: str) -> str:
        """SCAN pattern matching every entry of a bucket."""
        return f"{self.prefix}:kv:{name}:*"


class RedisKeyValue(KeyValue):
    """Bucket handle backed by Redis."""

    def __init__(self, client: Redis, keys: RedisKeys, name: str):
        self.client = client
        self.keys = keys
        self._name = name

    @property
    def bucket(self) -> str:
        return self._name

    async def get(self, key: str) -> bytes:
        try:
            async with self.client.pipeline() as pipe:
                pipe.get(self.keys.bucket(self._name))
                pipe.get(self.keys.entry(self._name, key))
                marker, value = await pipe.execute()
        except RedisError as e:
            raise BackendError(f"redis get {key!r} failed: {e}") from e

        if marker is None:
            raise BucketNotFoundError(self._name)
        if value is None:
            raise KeyNotFoundError(key)
        return value if isinstance(value, bytes) else str(value).encode("utf-8")

    async def put(self, key: str, value: bytes) -> None:
        try:
            written = await cast(
                Awaitable[int],
                self.client.eval(
                    _PUT_SCRIPT,
                    2,
                    self.keys.bucket(self._name),
                    self.keys.entry(self._name, key),
                    value,
                ),
            )
        except RedisError as e:
            raise BackendError(f"redis put {key!r} failed: {e}") from e

        if not written:
            raise BucketNotFoundError(self._name)

    async def purge(self, key: str) -> None:
        try:
            async with self.client.pipeline() as pipe:
                pipe.exists(self.keys.bucket(self._name))
                pipe.delete(self.keys.entry(self._name, key))
                exists, _ = await pipe.execute()
        except RedisError as e:
            raise BackendError(f"redis purge {key!r} failed: {e}") from e

        if not exists:
            raise BucketNotFoundError(self._name)

    async def status(self) -> BucketStatus:
        try:
            marker = await self.client.get(self.keys.bucket(self._name))
        except RedisError as e:
            raise BackendError(f"redis status failed: {e}") from e

        if marker is None:
            raise BucketNotFoundError(self._name)
        return BucketStatus(bucket=self._name, ttl=int(marker) / 1000)


class RedisBackend(KeyValueBackend):
    """Store of TTL buckets in a Redis database.

    Args:
        client: redis-py asyncio client (``decode_responses=False``)
        prefix: Namespace for every key the backend writes
    """

    def __init__(self, client: Redis, prefix: str = DEFAULT_PREFIX):
        self.client = client
        self.keys = RedisKeys(prefix)

    @classmethod
    def from_url(cls, url: str, prefix: str = DEFAULT_PREFIX) -> RedisBackend:
        client = redis.from_url(  # type: ignore[no-untyped-call]
            url,
            encoding="utf-8",
            decode_responses=False,  # Values are bytes
        )
        return cls(client, prefix=prefix)

    async def key_value(self, name: str) -> KeyValue:
        try:
            exists = await self.client.exists(self.keys.bucket(name))
        except RedisError as e:
            raise BackendError(f"redis bucket lookup failed: {e}") from e

        if not exists:
            raise BucketNotFoundError(name)
        return RedisKeyValue(self.client, self.keys, name)

    async def create_key_value(self, name: str, ttl: float) -> KeyValue:
        ttl_ms = max(1, int(ttl * 1000))
        try:
            # NX: a concurrent creator's bucket wins and is returned unchanged
            await self.client.set(self.keys.bucket(name), ttl_ms, nx=True)
        except RedisError as e:
            raise BackendError(f"redis bucket create failed: {e}") from e
        return RedisKeyValue(self.client, self.keys, name)

    async def delete_key_value(self, name: str) -> None:
        try:
            deleted = await self.client.delete(self.keys.bucket(name))
            # Use SCAN to avoid blocking on large keyspaces
            async for key in self.client.scan_iter(match=self.keys.entry_pattern(name)):
                await self.client.delete(key)
        except RedisError as e:
            raise BackendError(f"redis bucket delete failed: {e}") from e

        if not deleted:
            raise BucketNotFoundError(name)

    async def close(self) -> None:
        await self.client.aclose()
