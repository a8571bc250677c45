"""Leader-gated reconciliation with a downstream system.

Only the elected leader pushes create/update/delete actions downstream; other
instances drop them. What an action means is up to the ``ReconcileClient``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from leaderlock.election import LeaderElection

module_logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Event actions understood by the reconciler."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class Summary:
    """Items touched by a reconcile action."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add_created(self, item: str) -> None:
        self.created.append(item)

    def add_updated(self, item: str) -> None:
        self.updated.append(item)

    def add_deleted(self, item: str) -> None:
        self.deleted.append(item)

    def add_error(self, item: str) -> None:
        self.errors.append(item)

    def merge(self, other: Summary) -> None:
        """Append every list of ``other`` to this summary."""
        self.created.extend(other.created)
        self.updated.extend(other.updated)
        self.deleted.extend(other.deleted)
        self.errors.extend(other.errors)

    @property
    def empty(self) -> bool:
        return not (self.created or self.updated or self.deleted or self.errors)


class ReconcileClient(Protocol):
    """Creates, updates and deletes objects in the downstream system."""

    async def create(self, obj: Any) -> Summary: ...

    async def update(self, obj: Any) -> Summary: ...

    async def delete(self, obj: Any) -> Summary: ...


class Reconciler:
    """Dispatches actions to a client while this instance is the leader.

    Args:
        client: Downstream client
        election: Running election whose ``is_leader`` gates every action
        logger: Logger for dispatch results (default: this module's logger)
    """

    def __init__(
        self,
        client: ReconcileClient,
        election: LeaderElection,
        logger: logging.Logger | None = None,
    ):
        self.client = client
        self.election = election
        self.logger = logger or module_logger
        self.totals = Summary()
        self.logger.debug("Creating new reconciler")

    async def handle(self, action: Action | str, obj: Any) -> Summary | None:
        """Apply one action, or return None when not leading.

        Client failures are recorded in the returned summary rather than
        raised, so one bad object does not stop an event stream.

        Raises:
            ValueError: If ``action`` is not a known action
        """
        action = Action(action)

        if not self.election.is_leader:
            self.logger.debug(f"Skipping {action.value} - not leader")
            return None

        handler = {
            Action.CREATE: self.client.create,
            Action.UPDATE: self.client.update,
            Action.DELETE: self.client.delete,
        }[action]

        try:
            summary = await handler(obj)
        except Exception as e:
            self.logger.error(f"Reconcile {action.value} failed: {e}")
            summary = Summary()
            summary.add_error(f"{action.value}: {e}")

        self.totals.merge(summary)
        self.logger.info(
            f"Reconciled {action.value}: {len(summary.created)} created, "
            f"{len(summary.updated)} updated, {len(summary.deleted)} deleted, "
            f"{len(summary.errors)} errors"
        )
        return summary
