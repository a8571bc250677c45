"""Tests for backend selection."""

import pytest

from leaderlock.config import Settings
from leaderlock.kv import factory
from leaderlock.kv.memory import MemoryBackend
from leaderlock.kv.redis import RedisBackend


@pytest.fixture
def memory_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    config = Settings(backend="memory")
    monkeypatch.setattr(factory, "settings", config)
    monkeypatch.setattr(factory, "_backend", None)
    return config


class TestOpenBackend:
    """Tests for open_backend."""

    @pytest.mark.asyncio
    async def test_memory(self) -> None:
        backend = await factory.open_backend(Settings(backend="memory"))

        assert isinstance(backend, MemoryBackend)

    @pytest.mark.asyncio
    async def test_redis_uses_url_and_prefix(self) -> None:
        """The Redis client is built lazily; no server is contacted."""
        config = Settings(backend="redis", redis_prefix="orders")

        backend = await factory.open_backend(config)
        try:
            assert isinstance(backend, RedisBackend)
            assert backend.keys.bucket("b") == "orders:bucket:b"
        finally:
            await backend.close()

    @pytest.mark.asyncio
    async def test_unknown_backend(self) -> None:
        config = Settings().model_copy(update={"backend": "etcd"})

        with pytest.raises(ValueError, match="Unsupported backend"):
            await factory.open_backend(config)


class TestSingleton:
    """Tests for get_backend/close_backend."""

    @pytest.mark.asyncio
    async def test_get_backend_is_cached(self, memory_settings: Settings) -> None:
        first = await factory.get_backend()

        assert await factory.get_backend() is first

    @pytest.mark.asyncio
    async def test_close_backend_resets(self, memory_settings: Settings) -> None:
        first = await factory.get_backend()

        await factory.close_backend()

        assert factory._backend is None
        assert await factory.get_backend() is not first
