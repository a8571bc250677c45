"""CLI command for releasing the lock on behalf of a holder.

Usage:
    leaderlock release --identity 6f1c2a4e-...
"""

from __future__ import annotations

import asyncio

import typer

from leaderlock.cli.common import (
    BackendOption,
    BucketOption,
    KeyOption,
    build_locker,
    resolve_settings,
)
from leaderlock.errors import LeaderLockError
from leaderlock.identity import Identity
from leaderlock.kv.factory import open_backend

app = typer.Typer(help="Release the leader lock held by a given identity")


@app.callback(invoke_without_command=True)
def release(
    identity: str = typer.Option(..., "--identity", "-i", help="Identity of the holder"),
    backend: str | None = BackendOption,
    bucket: str | None = BucketOption,
    key: str | None = KeyOption,
) -> None:
    """Remove the lock if (and only if) ``identity`` holds it.

    For clearing the lease of a holder that crashed without releasing,
    instead of waiting for the TTL to run out.
    """
    try:
        holder = Identity.parse(identity)
    except LeaderLockError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e

    config = resolve_settings(backend=backend, bucket=bucket, key=key)

    async def _run() -> bool:
        store = await open_backend(config)
        try:
            locker = await build_locker(store, config, create=False, identity=holder)
            if await locker.current_holder() != holder:
                return False
            await locker.release_lead()
            return True
        finally:
            await store.close()

    try:
        released = asyncio.run(_run())
    except LeaderLockError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if released:
        typer.echo(f"Released lock for {holder}")
    else:
        typer.echo(f"Lock is not held by {holder}; left unchanged")
