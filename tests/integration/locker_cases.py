"""Lock scenarios shared by every real store.

Test modules subclass ``LockerStoreCases`` and provide a ``store`` fixture
returning a connected ``KeyValueBackend``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from leaderlock.errors import BucketNotFoundError, KeyNotFoundError, ValidationError
from leaderlock.identity import Identity
from leaderlock.kv.base import KeyValue, KeyValueBackend
from leaderlock.locker import Locker, LockerConfig
from leaderlock.provision import new_key_value

TTL = 60.0


class LockerStoreCases:
    """Provisioning and lock behaviour against a live store."""

    @pytest_asyncio.fixture
    async def kv(self, store: KeyValueBackend, bucket_name: str) -> AsyncIterator[KeyValue]:
        kv = await new_key_value(store, bucket_name, TTL)
        yield kv
        try:
            await store.delete_key_value(bucket_name)
        except BucketNotFoundError:
            pass

    @pytest.mark.asyncio
    async def test_provision_rejects_bad_arguments(
        self, store: KeyValueBackend, bucket_name: str
    ) -> None:
        with pytest.raises(ValidationError):
            await new_key_value(store, bucket_name, 0)
        with pytest.raises(ValidationError):
            await new_key_value(store, "", TTL)

    @pytest.mark.asyncio
    async def test_provision_creates_then_opens(self, store: KeyValueBackend, kv: KeyValue) -> None:
        """First call creates the bucket and the second returns it."""
        assert (await kv.status()).ttl == TTL

        again = await new_key_value(store, kv.bucket, TTL)

        assert again.bucket == kv.bucket
        assert (await again.status()).ttl == TTL

    @pytest.mark.asyncio
    async def test_provision_keeps_existing_ttl(self, store: KeyValueBackend, kv: KeyValue) -> None:
        """Opening an existing bucket never changes its TTL."""
        again = await new_key_value(store, kv.bucket, TTL * 2)

        assert (await again.status()).ttl == TTL

    @pytest.mark.asyncio
    async def test_name_and_ttl(self, kv: KeyValue) -> None:
        locker = Locker(LockerConfig(kv=kv))

        assert locker.name == kv.bucket
        assert await locker.ttl() == TTL

    @pytest.mark.asyncio
    async def test_acquire_lead(self, store: KeyValueBackend, kv: KeyValue) -> None:
        first = Locker(LockerConfig(kv=kv, identity=Identity.new()))
        second = Locker(LockerConfig(kv=kv, identity=Identity.new()))

        assert await first.acquire_lead() is True
        assert await first.acquire_lead() is True
        assert await second.acquire_lead() is False
        assert await kv.get("leader") == first.identity.encode()

        await store.delete_key_value(kv.bucket)

        with pytest.raises(BucketNotFoundError):
            await first.acquire_lead()

    @pytest.mark.asyncio
    async def test_release_lead(self, store: KeyValueBackend, kv: KeyValue) -> None:
        first = Locker(LockerConfig(kv=kv, identity=Identity.new()))
        second = Locker(LockerConfig(kv=kv, identity=Identity.new()))

        # Nothing to release yet
        await first.release_lead()

        await kv.put_string("leader", str(first.identity))

        await second.release_lead()
        assert await kv.get("leader") == first.identity.encode()

        await first.release_lead()
        with pytest.raises(KeyNotFoundError):
            await kv.get("leader")

        await store.delete_key_value(kv.bucket)

        with pytest.raises(BucketNotFoundError):
            await first.release_lead()

    @pytest.mark.asyncio
    async def test_handover(self, kv: KeyValue) -> None:
        """Leadership moves to a follower once the leader releases."""
        leader = Locker(LockerConfig(kv=kv))
        follower = Locker(LockerConfig(kv=kv))

        assert await leader.acquire_lead() is True
        assert await follower.acquire_lead() is False

        await leader.release_lead()

        assert await follower.acquire_lead() is True
        assert await leader.current_holder() == follower.identity
