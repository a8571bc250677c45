"""leaderlock: TTL lease leader election over a shared key-value store.

Example:
    from leaderlock import Locker, LockerConfig, new_key_value
    from leaderlock.kv import open_backend

    backend = await open_backend()
    kv = await new_key_value(backend, "orders", ttl=60)
    locker = Locker(LockerConfig(kv=kv))

    if await locker.acquire_lead():
        ...
    await locker.release_lead()
"""

from leaderlock.election import LeaderElection, leader_only
from leaderlock.errors import (
    BackendError,
    BucketNotFoundError,
    IdentityParseError,
    KeyNotFoundError,
    LeaderLockError,
    NotFoundError,
    ValidationError,
)
from leaderlock.identity import Identity
from leaderlock.locker import DEFAULT_KEY_NAME, Locker, LockerConfig
from leaderlock.provision import new_key_value
from leaderlock.reconciler import Action, ReconcileClient, Reconciler, Summary

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_KEY_NAME",
    "Identity",
    "Locker",
    "LockerConfig",
    "new_key_value",
    # Election
    "LeaderElection",
    "leader_only",
    # Reconciliation
    "Action",
    "ReconcileClient",
    "Reconciler",
    "Summary",
    # Errors
    "LeaderLockError",
    "ValidationError",
    "NotFoundError",
    "KeyNotFoundError",
    "BucketNotFoundError",
    "BackendError",
    "IdentityParseError",
]
