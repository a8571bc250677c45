"""Key-value backend factory for leaderlock."""

from __future__ import annotations

from leaderlock.config import Settings, settings
from leaderlock.kv.base import KeyValueBackend
from leaderlock.kv.memory import MemoryBackend

_backend: KeyValueBackend | None = None


async def open_backend(config: Settings | None = None) -> KeyValueBackend:
    """Build a new backend from settings (module settings by default)."""
    config = config or settings
    backend = config.backend.lower()

    if backend == "redis":
        from leaderlock.kv.redis import RedisBackend

        return RedisBackend.from_url(config.redis_url, prefix=config.redis_prefix)
    if backend == "nats":
        # nats-py is an optional extra
        from leaderlock.kv.nats import NatsBackend

        return await NatsBackend.connect(config.nats_url, timeout=config.nats_connect_timeout)
    if backend == "memory":
        return MemoryBackend()

    raise ValueError("Unsupported backend. Supported values: redis, nats, memory.")


async def get_backend() -> KeyValueBackend:
    """Return a singleton backend based on the module settings."""
    global _backend
    if _backend is None:
        _backend = await open_backend()
    return _backend


async def close_backend() -> None:
    """Close the singleton backend's connections."""
    global _backend
    if _backend is not None:
        await _backend.close()
        _backend = None
