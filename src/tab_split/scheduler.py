"""Deferred actions keyed by tab id.

Delayed UI transitions (settle after the check-mark animation, dismiss a
toast) are queued here and run when the host calls run_due(). Deleting a tab
cancels whatever was queued for it.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from .exceptions import TabSplitError

logger = logging.getLogger(__name__)


@dataclass
class _Pending:
    due: float
    action: Callable[[], object]


class DeferredActions:
    """Single-threaded, host-driven queue of named actions per tab."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._pending: dict[tuple[UUID, str], _Pending] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(
        self,
        tab_id: UUID,
        delay: float,
        action: Callable[[], object],
        name: str = "default",
    ):
        """Run action after delay seconds, replacing the same-named action for tab_id."""
        key = (tab_id, name)
        if key in self._pending:
            logger.debug(f"Replacing deferred {name!r} action for tab {tab_id}")
        self._pending[key] = _Pending(due=self.clock() + delay, action=action)

    def cancel(self, tab_id: UUID, name: str | None = None) -> int:
        """Drop queued actions for a tab (all of them when name is None)."""
        keys = [
            key
            for key in self._pending
            if key[0] == tab_id and (name is None or key[1] == name)
        ]
        for key in keys:
            del self._pending[key]
        return len(keys)

    def is_pending(self, tab_id: UUID, name: str | None = None) -> bool:
        return any(
            key[0] == tab_id and (name is None or key[1] == name)
            for key in self._pending
        )

    def run_due(self) -> int:
        """
        Run every action whose deadline has passed, earliest first.

        Returns:
            Number of actions run
        """
        now = self.clock()
        due = sorted(
            ((key, p) for key, p in self._pending.items() if p.due <= now),
            key=lambda item: item[1].due,
        )

        ran = 0
        for key, pending in due:
            # an earlier action may have cancelled or replaced this one
            if self._pending.get(key) is not pending:
                continue
            del self._pending[key]
            ran += 1
            try:
                pending.action()
            except TabSplitError:
                logger.exception(f"Deferred {key[1]!r} action for tab {key[0]} failed")

        return ran
