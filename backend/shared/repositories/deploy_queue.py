"""In-process store for the deploy turn queue."""

from __future__ import annotations

import logging
import threading

from shared.models.deploy_queue import EmptyQueueError, Holder, Matcher, QueueEntry, matches

logger = logging.getLogger(__name__)


class DeployQueue:
    """Ordered turn queue; position 0 holds the turn.

    Every read and mutation runs under ``lock``. The lock is re-entrant so
    callers can hold it across a compound check (see ``TurnNotifier``).
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._entries: list[QueueEntry] = []

    def push(self, holder: Holder, metadata: str = "") -> QueueEntry:
        """Append a turn at the tail. Duplicates are allowed."""
        entry = QueueEntry(holder=holder, metadata=(metadata or "").strip())
        with self.lock:
            self._entries.append(entry)
            logger.debug(f"Queued {holder!r} at position {len(self._entries) - 1}")
        return entry

    def length(self) -> int:
        with self.lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.length()

    def is_empty(self) -> bool:
        with self.lock:
            return not self._entries

    def current(self) -> QueueEntry | None:
        with self.lock:
            return self._entries[0] if self._entries else None

    def next(self) -> QueueEntry | None:
        with self.lock:
            return self._entries[1] if len(self._entries) > 1 else None

    def is_current(self, matcher: Matcher) -> bool:
        with self.lock:
            return bool(self._entries) and matches(self._entries[0], matcher)

    def is_next(self, matcher: Matcher) -> bool:
        with self.lock:
            return len(self._entries) > 1 and matches(self._entries[1], matcher)

    def contains(self, matcher: Matcher) -> bool:
        with self.lock:
            return any(matches(entry, matcher) for entry in self._entries)

    def advance(self) -> QueueEntry:
        """Finish the current turn and return its entry.

        Callers must check ``is_current`` first; advancing an empty queue is a
        contract violation.
        """
        with self.lock:
            if not self._entries:
                raise EmptyQueueError("advance() called on an empty deploy queue")
            finished = self._entries.pop(0)
            logger.debug(f"Advanced past {finished.holder!r}, {len(self._entries)} left")
            return finished

    def remove(self, matcher: Matcher) -> int:
        """Drop every matching entry. Returns how many were removed."""
        with self.lock:
            kept = [entry for entry in self._entries if not matches(entry, matcher)]
            removed = len(self._entries) - len(kept)
            self._entries = kept
        if removed:
            logger.debug(f"Removed {removed} entr{'y' if removed == 1 else 'ies'}")
        return removed

    def clear(self) -> int:
        with self.lock:
            cleared = len(self._entries)
            self._entries = []
        return cleared

    def get(self) -> tuple[QueueEntry, ...]:
        """Immutable snapshot of the queue in turn order."""
        with self.lock:
            return tuple(self._entries)

    def first_group(self) -> tuple[QueueEntry, ...]:
        """Leading run of entries that share the current holder."""
        with self.lock:
            if not self._entries:
                return ()
            group = [self._entries[0]]
            for entry in self._entries[1:]:
                if entry.holder != group[-1].holder:
                    break
                group.append(entry)
            return tuple(group)
