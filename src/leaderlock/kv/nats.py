"""NATS JetStream TTL key-value store.

JetStream key-value buckets carry a TTL natively, so this adapter only maps
nats-py errors onto the leaderlock taxonomy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import nats
import nats.errors
import nats.js.errors

from leaderlock.errors import BackendError, BucketNotFoundError, KeyNotFoundError
from leaderlock.kv.base import BucketStatus, KeyValue, KeyValueBackend

if TYPE_CHECKING:
    from nats.aio.client import Client
    from nats.js import JetStreamContext
    from nats.js.kv import KeyValue as JetStreamKeyValue


# JetStream API error code for "stream not found"
STREAM_NOT_FOUND = 10059


def _stream_missing(exc: BaseException) -> bool:
    """Whether ``exc`` was raised while handling a stream-not-found reply.

    nats-py reports every failed lookup from ``KeyValue.get`` as
    ``KeyNotFoundError``; the server's reason is only kept on the context.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if (
            isinstance(current, nats.js.errors.APIError)
            and current.err_code == STREAM_NOT_FOUND
        ):
            return True
        current = current.__cause__ or current.__context__
    return False


class NatsKeyValue(KeyValue):
    """Bucket handle backed by a JetStream key-value bucket."""

    def __init__(self, kv: JetStreamKeyValue, name: str):
        self.kv = kv
        self._name = name

    @property
    def bucket(self) -> str:
        return self._name

    async def _bucket_gone(self) -> bool:
        # Direct gets and publishes go to the stream itself, so a deleted
        # stream shows up as no responders rather than a 404
        try:
            await self.kv.status()
        except nats.js.errors.NotFoundError:
            return True
        except nats.errors.Error:
            return False
        return False

    async def get(self, key: str) -> bytes:
        try:
            entry = await self.kv.get(key)
        except nats.js.errors.KeyNotFoundError as e:
            if _stream_missing(e):
                raise BucketNotFoundError(self._name) from e
            raise KeyNotFoundError(key) from e
        except nats.js.errors.NotFoundError as e:
            raise BucketNotFoundError(self._name) from e
        except nats.errors.NoRespondersError as e:
            if await self._bucket_gone():
                raise BucketNotFoundError(self._name) from e
            raise BackendError(f"nats get {key!r} failed: {e}") from e
        except nats.errors.Error as e:
            raise BackendError(f"nats get {key!r} failed: {e}") from e

        return entry.value or b""

    async def put(self, key: str, value: bytes) -> None:
        try:
            await self.kv.put(key, value)
        except nats.js.errors.NotFoundError as e:
            raise BucketNotFoundError(self._name) from e
        except nats.js.errors.NoStreamResponseError as e:
            if await self._bucket_gone():
                raise BucketNotFoundError(self._name) from e
            raise BackendError(f"nats put {key!r} failed: {e}") from e
        except nats.errors.Error as e:
            raise BackendError(f"nats put {key!r} failed: {e}") from e

    async def purge(self, key: str) -> None:
        try:
            await self.kv.purge(key)
        except nats.js.errors.NotFoundError as e:
            raise BucketNotFoundError(self._name) from e
        except nats.js.errors.NoStreamResponseError as e:
            if await self._bucket_gone():
                raise BucketNotFoundError(self._name) from e
            raise BackendError(f"nats purge {key!r} failed: {e}") from e
        except nats.errors.Error as e:
            raise BackendError(f"nats purge {key!r} failed: {e}") from e

    async def status(self) -> BucketStatus:
        try:
            status = await self.kv.status()
        except nats.js.errors.NotFoundError as e:
            raise BucketNotFoundError(self._name) from e
        except nats.errors.Error as e:
            raise BackendError(f"nats status failed: {e}") from e

        return BucketStatus(bucket=self._name, ttl=status.ttl or 0.0)


class NatsBackend(KeyValueBackend):
    """Store of TTL buckets in NATS JetStream.

    Args:
        nc: Connected NATS client
        js: JetStream context (created from ``nc`` when omitted)
    """

    def __init__(self, nc: Client, js: JetStreamContext | None = None):
        self.nc = nc
        self.js = js or nc.jetstream()

    @classmethod
    async def connect(cls, url: str, timeout: float = 2.0) -> NatsBackend:
        try:
            nc = await nats.connect(url, connect_timeout=timeout)
        except (nats.errors.Error, OSError) as e:
            raise BackendError(f"nats connect to {url} failed: {e}") from e
        return cls(nc)

    async def key_value(self, name: str) -> KeyValue:
        try:
            kv = await self.js.key_value(name)
        except nats.js.errors.BucketNotFoundError as e:
            raise BucketNotFoundError(name) from e
        except nats.errors.Error as e:
            raise BackendError(f"nats bucket lookup failed: {e}") from e
        return NatsKeyValue(kv, name)

    async def create_key_value(self, name: str, ttl: float) -> KeyValue:
        try:
            kv = await self.js.create_key_value(bucket=name, ttl=ttl)
        except nats.js.errors.BadRequestError:
            # Created concurrently with a different config; use the existing one
            return await self.key_value(name)
        except nats.errors.Error as e:
            raise BackendError(f"nats bucket create failed: {e}") from e
        return NatsKeyValue(kv, name)

    async def delete_key_value(self, name: str) -> None:
        try:
            await self.js.delete_key_value(name)
        except nats.js.errors.NotFoundError as e:
            raise BucketNotFoundError(name) from e
        except nats.errors.Error as e:
            raise BackendError(f"nats bucket delete failed: {e}") from e

    async def close(self) -> None:
        await self.nc.drain()
