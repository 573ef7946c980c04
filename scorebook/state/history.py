"""
Undo history.

A stack of committed MatchState snapshots. States are immutable, so a
snapshot is just the previous reference and undo hands back exactly the
value that was pushed.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Optional

from scorebook.state.models import MatchState

logger = logging.getLogger(__name__)


class History:
    """Ordered snapshots of prior states, newest last.

    ``limit`` caps how many snapshots are kept; the oldest are dropped first.
    """

    def __init__(self, limit: Optional[int] = None):
        if limit is not None and limit < 1:
            raise ValueError(f"History limit must be at least 1, got {limit}")
        self._snapshots: deque[MatchState] = deque(maxlen=limit)

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return bool(self._snapshots)

    def push(self, state: MatchState) -> None:
        self._snapshots.append(state)

    def peek(self) -> Optional[MatchState]:
        return self._snapshots[-1] if self._snapshots else None

    def undo(self) -> Optional[MatchState]:
        """Pop the most recent snapshot, or return None if there is nothing to undo."""
        if not self._snapshots:
            logger.info("Nothing to undo")
            return None
        return self._snapshots.pop()

    def clear(self) -> None:
        self._snapshots.clear()
