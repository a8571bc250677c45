"""CLI command for inspecting the leader lock.

Usage:
    leaderlock status
    leaderlock status --bucket orders --format json
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer

from leaderlock.cli.common import (
    BackendOption,
    BucketOption,
    KeyOption,
    build_locker,
    resolve_settings,
)
from leaderlock.errors import LeaderLockError
from leaderlock.kv.factory import open_backend

app = typer.Typer(help="Show the lock bucket and its current holder")


@app.callback(invoke_without_command=True)
def status(
    backend: str | None = BackendOption,
    bucket: str | None = BucketOption,
    key: str | None = KeyOption,
    output_format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text, json",
    ),
) -> None:
    """Print bucket name, TTL and the identity holding the lock."""
    from rich.console import Console

    console = Console()
    config = resolve_settings(backend=backend, bucket=bucket, key=key)

    async def _run() -> dict[str, Any]:
        store = await open_backend(config)
        try:
            locker = await build_locker(store, config, create=False)
            holder = await locker.current_holder()
            return {
                "bucket": locker.name,
                "key": locker.key,
                "ttl": await locker.ttl(),
                "holder": str(holder) if holder else None,
            }
        finally:
            await store.close()

    try:
        result = asyncio.run(_run())
    except LeaderLockError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    if output_format == "json":
        console.print(json.dumps(result, indent=2))
        return

    console.print(f"[bold]Bucket:[/bold] {result['bucket']}")
    console.print(f"[bold]Key:[/bold]    {result['key']}")
    console.print(f"[bold]TTL:[/bold]    {result['ttl']:g}s")
    if result["holder"]:
        console.print(f"[bold]Holder:[/bold] [green]{result['holder']}[/green]")
    else:
        console.print("[bold]Holder:[/bold] [yellow]none[/yellow]")
