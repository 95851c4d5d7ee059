"""Data models for the in-memory deploy queue."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

Holder = Hashable


class DeployQueueError(Exception):
    """Base error for deploy queue contract violations."""


class EmptyQueueError(DeployQueueError):
    """Raised when the queue is advanced while nobody holds the turn."""


@dataclass(frozen=True, slots=True)
class QueueEntry:
    """One turn in the deploy queue.

    A holder may own several entries; each push creates a distinct record.
    """

    holder: Holder
    metadata: str = ""
    enqueued_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )


Matcher = Union[Holder, Callable[[QueueEntry], bool]]


def matches(entry: QueueEntry, matcher: Matcher) -> bool:
    """Callables are predicates over the entry; anything else is a holder."""
    if callable(matcher):
        return bool(matcher(entry))
    return entry.holder == matcher
