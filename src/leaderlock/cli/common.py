"""Shared option handling for leaderlock CLI commands."""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError as PydanticValidationError

from leaderlock.config import Settings
from leaderlock.identity import Identity
from leaderlock.kv.base import KeyValueBackend
from leaderlock.locker import Locker, LockerConfig
from leaderlock.observability.logging import configure_logging, get_logger
from leaderlock.provision import new_key_value

BackendOption = typer.Option(None, "--backend", help="Store backend: redis, nats, memory")
BucketOption = typer.Option(None, "--bucket", "-b", help="Lock bucket name")
TtlOption = typer.Option(None, "--ttl", "-t", help="Bucket TTL in seconds")
KeyOption = typer.Option(None, "--key", "-k", help="Lock key name")


def resolve_settings(
    backend: str | None = None,
    bucket: str | None = None,
    ttl: float | None = None,
    key: str | None = None,
) -> Settings:
    """Overlay command-line overrides on the environment settings.

    Invalid overrides are reported and exit with status 2, like other usage
    errors.
    """
    overrides: dict[str, Any] = {
        "backend": backend,
        "bucket": bucket,
        "bucket_ttl": ttl,
        "key_name": key,
    }
    try:
        config = Settings(**{name: value for name, value in overrides.items() if value is not None})
    except PydanticValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            typer.echo(f"Error: invalid {field}: {error['msg']}", err=True)
        raise typer.Exit(code=2) from e

    configure_logging(json_format=config.log_json, level=config.log_level)
    return config


async def build_locker(
    backend: KeyValueBackend,
    config: Settings,
    *,
    create: bool,
    identity: Identity | None = None,
) -> Locker:
    """Open (or provision, when ``create``) the bucket and bind a Locker to it."""
    if create:
        kv = await new_key_value(backend, config.bucket, config.bucket_ttl)
    else:
        kv = await backend.key_value(config.bucket)

    return Locker(
        LockerConfig(
            kv=kv,
            key=config.key_name,
            identity=identity,
            logger=get_logger("leaderlock.locker"),
        )
    )
