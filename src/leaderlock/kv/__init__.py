"""TTL key-value stores for leaderlock.

Backends:
- RedisBackend: redis-py asyncio client (default)
- NatsBackend: NATS JetStream key-value buckets (``leaderlock[nats]``)
- MemoryBackend: process-local, for tests and development
"""

from leaderlock.kv.base import BucketStatus, KeyValue, KeyValueBackend
from leaderlock.kv.factory import close_backend, get_backend, open_backend
from leaderlock.kv.memory import MemoryBackend, MemoryKeyValue

__all__ = [
    "BucketStatus",
    "KeyValue",
    "KeyValueBackend",
    "MemoryBackend",
    "MemoryKeyValue",
    "open_backend",
    "get_backend",
    "close_backend",
]
