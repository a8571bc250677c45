"""CLI command for provisioning the lock bucket.

Usage:
    leaderlock provision
    leaderlock provision --bucket orders --ttl 30
"""

from __future__ import annotations

import asyncio

import typer

from leaderlock.cli.common import BackendOption, BucketOption, TtlOption, resolve_settings
from leaderlock.errors import LeaderLockError
from leaderlock.kv.factory import open_backend
from leaderlock.provision import new_key_value

app = typer.Typer(help="Ensure the lock bucket exists")


@app.callback(invoke_without_command=True)
def provision(
    backend: str | None = BackendOption,
    bucket: str | None = BucketOption,
    ttl: float | None = TtlOption,
) -> None:
    """Create the lock bucket if missing and print its name and TTL.

    An existing bucket is left unchanged, whatever TTL is passed.
    """
    config = resolve_settings(backend=backend, bucket=bucket, ttl=ttl)

    async def _run() -> tuple[str, float]:
        store = await open_backend(config)
        try:
            kv = await new_key_value(store, config.bucket, config.bucket_ttl)
            status = await kv.status()
            return status.bucket, status.ttl
        finally:
            await store.close()

    try:
        name, bucket_ttl = asyncio.run(_run())
    except LeaderLockError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Bucket: {name}")
    typer.echo(f"TTL: {bucket_ttl:g}s")
