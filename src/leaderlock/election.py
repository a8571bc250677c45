"""Leader election loop on top of a Locker.

A Locker only answers "am I leader right now?" when asked. Keeping
leadership means asking again before the bucket TTL runs out; this module
does the asking:

1. Every ``renewal_interval`` seconds call ``acquire_lead()``
2. Track transitions and wake tasks waiting on them
3. On shutdown release the lock so another instance can take over at once

Example:
    election = LeaderElection(locker)
    await election.start()

    while running:
        if election.is_leader:
            await do_leader_work()
        await asyncio.sleep(1)

    await election.stop()

    # Or for a single attempt
    async with LeaderElection(locker) as election:
        if election.is_leader:
            await run_cleanup()
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Awaitable, Callable, ParamSpec, TypeVar

from leaderlock.errors import LeaderLockError
from leaderlock.locker import Locker

logger = logging.getLogger(__name__)

# Renew three times per TTL window when no interval is given
RENEWALS_PER_TTL = 3


class LeaderElection:
    """Periodic leader election for a distributed singleton worker.

    Args:
        locker: Locker bound to the shared lock bucket
        renewal_interval: Seconds between acquire attempts. Must be shorter
            than the bucket TTL; defaults to a third of it.
    """

    def __init__(self, locker: Locker, renewal_interval: float | None = None):
        self.locker = locker
        self.renewal_interval = renewal_interval

        self._is_leader = False
        self._running = False
        self._task: asyncio.Task[None] | None = None

        self._on_elected: list[asyncio.Future[None]] = []
        self._on_demoted: list[asyncio.Future[None]] = []

    @property
    def is_leader(self) -> bool:
        """Whether the last election round made this instance the leader."""
        return self._is_leader

    @property
    def instance_id(self) -> str:
        return str(self.locker.identity)

    async def start(self) -> None:
        """Start participating in leader election.

        Raises:
            ValueError: If no interval was given and the bucket TTL is unknown
        """
        if self._running:
            return

        if self.renewal_interval is None:
            ttl = await self.locker.ttl()
            if ttl <= 0:
                raise ValueError(
                    f"Cannot derive renewal interval for '{self.locker.name}': bucket TTL unknown"
                )
            self.renewal_interval = ttl / RENEWALS_PER_TTL

        self._running = True
        self._task = asyncio.create_task(self._election_loop())
        logger.info(f"Started leader election for '{self.locker.name}' as {self.instance_id}")

    async def stop(self) -> None:
        """Stop participating and release the lock if held.

        The release is attempted even when the last round ended in an error,
        since the lock may still carry this instance's identity.
        """
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Election loop for '{self.locker.name}' failed: {e}")
            self._task = None

        try:
            await self.locker.release_lead()
        except Exception as e:
            logger.error(f"Error releasing leadership for '{self.locker.name}': {e}")

        if self._is_leader:
            await self._handle_demotion()

        logger.info(f"Stopped leader election for '{self.locker.name}'")

    async def _election_loop(self) -> None:
        """Main election loop."""
        while self._running:
            try:
                await self.run_once()
                await asyncio.sleep(self.renewal_interval or 0)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in election loop for '{self.locker.name}': {e}")
                if self._is_leader:
                    await self._handle_demotion()
                await asyncio.sleep(self.renewal_interval or 0)

    async def run_once(self) -> bool:
        """Run a single election round and return the resulting leader state."""
        try:
            leading = await self.locker.acquire_lead()
        except LeaderLockError as e:
            # Status unknown, so act as if not leading
            logger.error(f"Error in election round for '{self.locker.name}': {e}")
            leading = False

        if leading and not self._is_leader:
            await self._handle_election()
        elif not leading and self._is_leader:
            await self._handle_demotion()

        return leading

    async def _handle_election(self) -> None:
        self._is_leader = True
        logger.info(f"Elected as leader for '{self.locker.name}'")

        for future in self._on_elected:
            if not future.done():
                future.set_result(None)
        self._on_elected.clear()

    async def _handle_demotion(self) -> None:
        self._is_leader = False
        logger.warning(f"Lost leadership for '{self.locker.name}'")

        for future in self._on_demoted:
            if not future.done():
                future.set_result(None)
        self._on_demoted.clear()

    async def wait_for_leadership(self, timeout: float | None = None) -> bool:
        """Wait until this instance becomes the leader.

        Args:
            timeout: Maximum time to wait in seconds (None = wait forever)

        Returns:
            True if leadership was acquired, False if timeout
        """
        if self._is_leader:
            return True

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._on_elected.append(future)

        try:
            await asyncio.wait_for(future, timeout=timeout)
            return True
        except asyncio.TimeoutError:
            if future in self._on_elected:
                self._on_elected.remove(future)
            return False

    async def wait_for_demotion(self, timeout: float | None = None) -> bool:
        """Wait until this instance loses leadership."""
        if not self._is_leader:
            return True

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._on_demoted.append(future)

        try:
            await asyncio.wait_for(future, timeout=timeout)
            return True
        except asyncio.TimeoutError:
            if future in self._on_demoted:
                self._on_demoted.remove(future)
            return False

    async def __aenter__(self) -> LeaderElection:
        """Context manager entry - try to acquire leadership once."""
        self._is_leader = await self.locker.acquire_lead()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit - release leadership if held."""
        if self._is_leader:
            await self.locker.release_lead()
            self._is_leader = False


P = ParamSpec("P")
R = TypeVar("R")


def leader_only(
    locker: Locker,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R | None]]]:
    """Decorator that makes a coroutine run only while ``locker`` leads.

    Each call makes one acquire attempt, which also refreshes the lease. The
    lock is not released afterwards.

    Example:
        @leader_only(locker)
        async def generate_daily_report():
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R | None]]:
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | None:
            if await locker.acquire_lead():
                return await func(*args, **kwargs)
            logger.debug(f"Skipping {func.__name__} - not leader for '{locker.name}'")
            return None

        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper

    return decorator
