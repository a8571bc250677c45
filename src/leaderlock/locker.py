"""TTL lease leader lock.

A fleet of equivalent workers agree on one leader by racing for a single key
in a shared TTL bucket. The key's value is the identity of the current
holder; the holder keeps the lease alive by calling ``acquire_lead()`` more
often than the bucket TTL, and an entry that is not rewritten in time expires
so another worker can claim it.

Acquire and release are read-then-write, not compare-and-swap, so two
workers racing on an empty key can both believe they lead until the next
round settles on the last writer.

Example:
    kv = await new_key_value(backend, "my-service", ttl=60)
    locker = Locker(LockerConfig(kv=kv, logger=logging.getLogger("lock")))

    while running:
        if await locker.acquire_lead():
            await do_leader_work()
        await asyncio.sleep(20)

    await locker.release_lead()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from leaderlock.errors import IdentityParseError, KeyNotFoundError, LeaderLockError
from leaderlock.identity import Identity
from leaderlock.kv.base import KeyValue

DEFAULT_KEY_NAME = "leader"


def _discard_logger() -> logging.Logger:
    # Not registered with the logging manager: no parent, nothing propagates
    discard = logging.Logger("leaderlock.locker.discard")
    discard.addHandler(logging.NullHandler())
    return discard


@dataclass
class LockerConfig:
    """Locker configuration.

    Unset fields fall back to their defaults: a fresh random identity, the
    ``"leader"`` key, and a logger that discards everything.
    """

    kv: KeyValue | None = None
    key: str = DEFAULT_KEY_NAME
    identity: Identity | None = None
    identity_factory: Callable[[], Identity] = Identity.new
    logger: logging.Logger | None = None


class Locker:
    """Distributed leader lock backed by a TTL key-value bucket.

    One instance is meant to be driven by a single task; it holds no internal
    lock since its only state is an immutable identity and a store handle.
    Construction never contacts the store.
    """

    def __init__(self, config: LockerConfig | None = None) -> None:
        config = config or LockerConfig()
        self.identity = config.identity or config.identity_factory()
        self.kv = config.kv
        self.key = config.key or DEFAULT_KEY_NAME
        self.logger = config.logger or _discard_logger()

    @property
    def store(self) -> KeyValue:
        if self.kv is None:
            raise RuntimeError("Locker has no key-value store configured")
        return self.kv

    def _fields(self, **kwargs: str) -> dict[str, str]:
        return {"key": self.key, "id": str(self.identity), **kwargs}

    async def acquire_lead(self) -> bool:
        """Try to take or keep the leader lock.

        Returns:
            True if this locker leads, False if another identity holds the lock

        Raises:
            LeaderLockError: If the lock could not be read (including a missing
                bucket) or a corrupt lock value could not be replaced. The
                caller should treat itself as not leading.
        """
        kv = self.store

        try:
            raw = await kv.get(self.key)
        except KeyNotFoundError:
            # No holder: claim the lock
            try:
                await kv.put(self.key, self.identity.encode())
            except LeaderLockError as e:
                # Nobody else held the lock when we looked, so proceed as lead
                self.logger.warning(
                    f"Unable to create leader lock, still proceeding as lead: {e}",
                    extra=self._fields(),
                )
                return True

            self.logger.info("Obtained leader lock", extra=self._fields())
            return True
        except LeaderLockError as e:
            self.logger.error(f"Error getting lock key from kv store: {e}", extra=self._fields())
            raise

        self.logger.debug("Got lock value", extra=self._fields(value=repr(raw)))

        try:
            holder = Identity.parse(raw)
        except IdentityParseError as e:
            # Something other than an identity is in the lock; take it over
            self.logger.warning(
                f"Unable to parse lock value, will try to update the lock: {e}",
                extra=self._fields(),
            )
            try:
                await kv.put(self.key, self.identity.encode())
            except LeaderLockError as put_error:
                self.logger.error(f"Error updating lock: {put_error}", extra=self._fields())
                raise
            return True

        if holder != self.identity:
            self.logger.info(
                "Existing lock found (someone else is the leader)",
                extra=self._fields(value=str(holder)),
            )
            return False

        self.logger.info(
            "Existing lock found (i am the leader)", extra=self._fields(value=str(holder))
        )

        # Rewrite the same value so the TTL doesn't expire
        try:
            await kv.put(self.key, self.identity.encode())
        except LeaderLockError as e:
            self.logger.warning(f"Unable to update lock: {e}", extra=self._fields())

        return True

    async def release_lead(self) -> None:
        """Release the leader lock if this locker holds it.

        Releasing a lock that is absent, expired, corrupt or held by another
        identity is a no-op.

        Raises:
            LeaderLockError: If the lock could not be read or purged
        """
        kv = self.store

        try:
            raw = await kv.get(self.key)
        except KeyNotFoundError:
            return

        self.logger.debug("Got lock value", extra=self._fields(value=repr(raw)))

        try:
            holder = Identity.parse(raw)
        except IdentityParseError:
            return

        if holder != self.identity:
            return

        await kv.purge(self.key)
        self.logger.info("Released leader lock", extra=self._fields())

    async def current_holder(self) -> Identity | None:
        """Identity holding the lock, or None if absent or unparseable."""
        try:
            raw = await self.store.get(self.key)
        except KeyNotFoundError:
            return None

        try:
            return Identity.parse(raw)
        except IdentityParseError:
            return None

    @property
    def name(self) -> str:
        """Name of the lock bucket."""
        return self.store.bucket

    async def ttl(self) -> float:
        """TTL of the lock bucket in seconds, or 0.0 if it can't be determined."""
        try:
            status = await self.store.status()
        except LeaderLockError as e:
            self.logger.error(str(e))
            return 0.0

        return status.ttl
