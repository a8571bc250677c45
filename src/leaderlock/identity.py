"""Locker identity tokens.

An identity is a random 128-bit token minted once per locker. It is stored as
the lock value in its canonical 36 character text form, which is the only
bit-exact contract shared between lockers.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from leaderlock.errors import IdentityParseError


@dataclass(frozen=True)
class Identity:
    """Opaque, globally unique lock holder token."""

    value: uuid.UUID

    @classmethod
    def new(cls) -> Identity:
        """Mint a fresh random identity."""
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls, raw: str | bytes) -> Identity:
        """Parse the text (or UTF-8 bytes) form of an identity.

        Raises:
            IdentityParseError: If ``raw`` is not a valid token.
        """
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            return cls(uuid.UUID(text))
        except (UnicodeDecodeError, ValueError, TypeError) as e:
            raise IdentityParseError(f"invalid identity {raw!r}: {e}") from e

    def encode(self) -> bytes:
        return str(self).encode("utf-8")

    def __str__(self) -> str:
        return str(self.value)
