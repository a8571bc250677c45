"""CLI command for running a leader election until interrupted.

Usage:
    leaderlock campaign
    leaderlock campaign --bucket orders --interval 5
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Awaitable

import typer

from leaderlock.cli.common import (
    BackendOption,
    BucketOption,
    KeyOption,
    TtlOption,
    build_locker,
    resolve_settings,
)
from leaderlock.election import LeaderElection
from leaderlock.errors import LeaderLockError
from leaderlock.kv.factory import open_backend
from leaderlock.observability.logging import LogContext

app = typer.Typer(help="Campaign for leadership until interrupted")


@app.callback(invoke_without_command=True)
def campaign(
    backend: str | None = BackendOption,
    bucket: str | None = BucketOption,
    ttl: float | None = TtlOption,
    key: str | None = KeyOption,
    interval: float | None = typer.Option(
        None,
        "--interval",
        help="Seconds between acquire attempts (default: a third of the TTL)",
    ),
) -> None:
    """Join the election and report every change of leadership.

    The lock is released on SIGINT/SIGTERM so another instance can take over
    without waiting for the TTL.
    """
    config = resolve_settings(backend=backend, bucket=bucket, ttl=ttl, key=key)

    async def _run() -> None:
        store = await open_backend(config)
        try:
            locker = await build_locker(store, config, create=True)
            election = LeaderElection(
                locker, renewal_interval=interval or config.renewal_interval
            )

            shutdown = asyncio.Event()
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, shutdown.set)

            with LogContext(instance_id=election.instance_id, bucket=locker.name):
                typer.echo(f"Campaigning for '{locker.name}' as {election.instance_id}")
                await election.start()
                try:
                    while not shutdown.is_set():
                        if election.is_leader:
                            typer.echo("Leading")
                            await _wait_any(election.wait_for_demotion(), shutdown.wait())
                        else:
                            typer.echo("Following")
                            await _wait_any(election.wait_for_leadership(), shutdown.wait())
                finally:
                    await election.stop()
        finally:
            await store.close()

    try:
        asyncio.run(_run())
    except LeaderLockError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


async def _wait_any(*aws: Awaitable[object]) -> None:
    """Wait until the first of several coroutines completes."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
