"""Exception hierarchy for leaderlock.

Store adapters translate their client library errors into these types so the
locking protocol only ever reasons about one taxonomy:

- ``NotFoundError`` subclasses are expected control flow (absent or expired
  entry, missing bucket).
- ``BackendError`` covers every other store failure.
- ``ValidationError`` is raised before any store call is made.
- ``IdentityParseError`` marks a stored value that is not an identity.
"""

from __future__ import annotations


class LeaderLockError(Exception):
    """Base class for all leaderlock errors."""


class ValidationError(LeaderLockError, ValueError):
    """Invalid bucket name or TTL passed to provisioning."""


class NotFoundError(LeaderLockError):
    """A key or bucket does not exist."""


class KeyNotFoundError(NotFoundError):
    """The key is absent or its entry expired."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"key not found: {key}")


class BucketNotFoundError(NotFoundError):
    """The key-value bucket does not exist."""

    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__(f"bucket not found: {bucket}")


class BackendError(LeaderLockError):
    """Any store failure other than not-found."""


class IdentityParseError(LeaderLockError, ValueError):
    """A value could not be parsed as an identity."""
