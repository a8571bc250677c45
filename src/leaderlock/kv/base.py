"""Base TTL key-value store interface.

Defines the abstract contract the leader lock is built on. Entries are grouped
into named buckets; each bucket carries a single TTL applied to every key in
it, and entries not rewritten within that window disappear.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BucketStatus:
    """Status snapshot of a bucket."""

    bucket: str
    ttl: float  # Seconds


class KeyValue(ABC):
    """Handle to a single TTL bucket."""

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Name of the bucket this handle is bound to."""
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the value stored under ``key``.

        Raises:
            KeyNotFoundError: If the key is absent or expired
            BucketNotFoundError: If the bucket no longer exists
            BackendError: On any other store failure
        """
        ...

    @abstractmethod
    async def put(self, key: str, value: bytes) -> None:
        """Unconditionally write ``value``, restarting the key's TTL window."""
        ...

    @abstractmethod
    async def purge(self, key: str) -> None:
        """Unconditionally delete ``key``."""
        ...

    @abstractmethod
    async def status(self) -> BucketStatus:
        """Return the bucket's configured status."""
        ...

    async def put_string(self, key: str, value: str) -> None:
        await self.put(key, value.encode("utf-8"))


class KeyValueBackend(ABC):
    """A store that hosts TTL buckets."""

    @abstractmethod
    async def key_value(self, name: str) -> KeyValue:
        """Open an existing bucket.

        Raises:
            BucketNotFoundError: If no bucket with this name exists
        """
        ...

    @abstractmethod
    async def create_key_value(self, name: str, ttl: float) -> KeyValue:
        """Create a bucket, returning the existing one if it already exists."""
        ...

    @abstractmethod
    async def delete_key_value(self, name: str) -> None:
        """Delete a bucket and every entry in it."""
        ...

    async def close(self) -> None:
        """Release client connections held by the backend."""
        return None
