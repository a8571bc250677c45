"""Bucket provisioning for the leader lock."""

from __future__ import annotations

import logging

from leaderlock.errors import BucketNotFoundError, ValidationError
from leaderlock.kv.base import KeyValue, KeyValueBackend

logger = logging.getLogger(__name__)


async def new_key_value(backend: KeyValueBackend, name: str, ttl: float) -> KeyValue:
    """Return the bucket ``name``, creating it with ``ttl`` seconds if missing.

    An existing bucket is returned as-is, even if its TTL differs from ``ttl``.

    Raises:
        ValidationError: If ``name`` is empty or ``ttl`` is not positive
    """
    if not name or ttl <= 0:
        raise ValidationError(f"bucket name and ttl are required (name={name!r}, ttl={ttl})")

    try:
        return await backend.key_value(name)
    except BucketNotFoundError:
        pass

    kv = await backend.create_key_value(name, ttl)
    logger.info(f"Created key-value bucket '{name}' with ttl {ttl}s")
    return kv
