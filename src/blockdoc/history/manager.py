"""
Linear undo/redo history of document snapshots.

The stack holds deep copies; `cursor` points at the snapshot matching the
live document. Rapid field edits are coalesced through a single-slot
deferred push, so a burst of keystrokes becomes one undo step.

No timers or threads are started: the owner calls `poll()` (or any
immediate push / undo / redo flushes the slot).
"""

import time
from typing import Callable, List, Optional, Sequence

import structlog

from ..config import settings
from ..models.document import Section, copy_sections

logger = structlog.get_logger(__name__)


class DeferredAction:
    """
    Single-slot deferred callable.

    Scheduling replaces whatever was pending and restarts the delay.
    """

    def __init__(self, delay_ms: int, clock: Callable[[], float] = time.monotonic):
        self.delay_s = delay_ms / 1000.0
        self.clock = clock
        self._action: Optional[Callable[[], None]] = None
        self._due_at: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._action is not None

    def schedule(self, action: Callable[[], None]) -> None:
        self._action = action
        self._due_at = self.clock() + self.delay_s

    def cancel(self) -> None:
        self._action = None
        self._due_at = None

    def flush(self) -> bool:
        """Run the pending action now. Returns whether one ran."""
        action = self._action
        self.cancel()
        if action is None:
            return False
        action()
        return True

    def poll(self) -> bool:
        """Run the pending action if its delay has elapsed."""
        if self._action is None or self.clock() < self._due_at:
            return False
        return self.flush()


class HistoryManager:
    """
    Bounded snapshot stack with a cursor.

    Args:
        max_entries: Stack bound; the oldest snapshot is evicted beyond it
        debounce_ms: Delay of a non-immediate push
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(
        self,
        max_entries: int = None,
        debounce_ms: int = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries or settings.history_max_entries
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.stack: List[List[Section]] = []
        self.cursor = -1
        self.deferred = DeferredAction(
            settings.history_debounce_ms if debounce_ms is None else debounce_ms, clock
        )

    # ---- recording -------------------------------------------------------

    def push(self, sections: Sequence[Section], immediate: bool = True) -> None:
        """
        Record a snapshot of `sections`.

        A non-immediate push is deferred and replaces any pending one. An
        immediate push first commits the pending one, then records.
        """
        snapshot = copy_sections(sections)
        if not immediate:
            self.deferred.schedule(lambda: self._record(snapshot))
            return
        self.deferred.flush()
        self._record(snapshot)

    def _record(self, snapshot: List[Section]) -> None:
        del self.stack[self.cursor + 1:]
        self.stack.append(snapshot)
        evicted = 0
        while len(self.stack) > self.max_entries:
            self.stack.pop(0)
            evicted += 1
        self.cursor = len(self.stack) - 1
        logger.debug("history_pushed", size=len(self.stack), cursor=self.cursor, evicted=evicted)

    def poll(self) -> bool:
        """Commit the deferred push if its delay has elapsed."""
        return self.deferred.poll()

    def flush(self) -> bool:
        """Commit the deferred push now."""
        return self.deferred.flush()

    def clear(self) -> None:
        self.deferred.cancel()
        self.stack = []
        self.cursor = -1

    # ---- navigation ------------------------------------------------------

    def can_undo(self) -> bool:
        return self.cursor > 0 or (self.deferred.pending and self.cursor >= 0)

    def can_redo(self) -> bool:
        return not self.deferred.pending and self.cursor < len(self.stack) - 1

    def undo(self) -> Optional[List[Section]]:
        """
        Step back one snapshot.

        Returns:
            Deep copy of the previous snapshot, or None at the oldest entry
        """
        self.deferred.flush()
        if self.cursor <= 0:
            return None
        self.cursor -= 1
        logger.debug("history_undo", cursor=self.cursor)
        return copy_sections(self.stack[self.cursor])

    def redo(self) -> Optional[List[Section]]:
        """
        Step forward one snapshot.

        Returns:
            Deep copy of the next snapshot, or None at the newest entry
        """
        self.deferred.flush()
        if self.cursor >= len(self.stack) - 1:
            return None
        self.cursor += 1
        logger.debug("history_redo", cursor=self.cursor)
        return copy_sections(self.stack[self.cursor])

    def current(self) -> Optional[List[Section]]:
        if self.cursor < 0:
            return None
        return copy_sections(self.stack[self.cursor])

    def __len__(self) -> int:
        return len(self.stack)
