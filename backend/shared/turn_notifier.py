"""Idle reminder for whoever currently holds the deploy turn.

A single countdown is outstanding at any time. Arming replaces the pending
countdown; on expiry the holder is reminded only if the queue still reports
them as current.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from shared.models.deploy_queue import Holder
from shared.repositories.deploy_queue import DeployQueue

LOGGER = logging.getLogger("TurnNotifier")


@dataclass(frozen=True, slots=True)
class StillWorking:
    """Emitted when the current holder has been idle for the whole countdown."""

    holder: Holder
    fired_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


StillWorkingCallback = Callable[[StillWorking], Awaitable[None]]


class TurnNotifier:
    """Background countdown that reminds the current deployer when they go idle.

    Each ``arm`` replaces the pending countdown with a fresh asyncio task. When
    it expires, the queue lock is taken and the reminder is sent only if this
    countdown is still the latest one and its holder still has the turn.
    """

    def __init__(self, queue: DeployQueue, on_still_working: StillWorkingCallback) -> None:
        self._queue = queue
        self._on_still_working = on_still_working
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._armed_for: Holder | None = None
        self._deadline: datetime | None = None

    @property
    def armed_for(self) -> Holder | None:
        return self._armed_for

    @property
    def deadline(self) -> datetime | None:
        return self._deadline

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, holder: Holder, duration: float | timedelta) -> None:
        """Start a fresh countdown for ``holder``, discarding any pending one."""
        seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        self.cancel()
        self._generation += 1
        self._armed_for = holder
        self._deadline = datetime.now(timezone.utc) + timedelta(seconds=seconds)
        self._task = asyncio.create_task(
            self._countdown(self._generation, holder, seconds),
            name=f"turn-notifier-{self._generation}",
        )
        LOGGER.debug(f"Armed idle reminder for {holder!r} ({seconds:.0f}s)")

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            LOGGER.debug(f"Cancelled idle reminder for {self._armed_for!r}")
        self._generation += 1
        self._task = None
        self._armed_for = None
        self._deadline = None

    async def aclose(self) -> None:
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _countdown(self, generation: int, holder: Holder, seconds: float) -> None:
        await asyncio.sleep(seconds)

        with self._queue.lock:
            if generation != self._generation:
                LOGGER.debug(f"Dropped superseded reminder for {holder!r}")
                return
            # Detach so a re-arm from the callback does not cancel this delivery.
            self._task = None
            self._armed_for = None
            self._deadline = None
            if not self._queue.is_current(holder):
                LOGGER.debug(f"Dropped stale reminder, {holder!r} no longer holds the turn")
                return

        LOGGER.info(f"Reminding {holder!r} after {seconds:.0f}s idle")
        try:
            await self._on_still_working(StillWorking(holder=holder))
        except Exception as e:
            LOGGER.exception(f"Idle reminder for {holder!r} failed: {e}")
