"""
Purpose:
- Bound a whole request by an overall budget that starts at request entry.
- Guarantee exactly one answer per request, even when the delegate finishes late.

How it's used:
- The handler creates a Watchdog on entry, starts the delegate as a task and
  awaits watchdog.run(task).
- If the budget expires first, the watchdog claims the answer, sets the cancel
  event handed to the delegate, and parks the task in the InFlight registry so
  its browser cleanup finishes in the background. The task's eventual result is
  only logged, never written.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


class InFlight:
    """Background tasks that outlived their request; drained on shutdown."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self, timeout_s: float) -> int:
        """Wait for tracked tasks; return how many were still pending at the deadline."""
        if not self._tasks:
            return 0
        _done, pending = await asyncio.wait(set(self._tasks), timeout=max(timeout_s, 0))
        return len(pending)


class Watchdog:
    def __init__(self, budget_ms: int, started: Optional[float] = None) -> None:
        self.budget_ms = budget_ms
        self.started = time.perf_counter() if started is None else started
        self.cancel = asyncio.Event()
        self._answered = False

    @property
    def answered(self) -> bool:
        return self._answered

    def claim(self) -> bool:
        """Take the right to answer. Only the first caller gets True."""
        if self._answered:
            return False
        self._answered = True
        return True

    def elapsed_ms(self) -> int:
        return max(int((time.perf_counter() - self.started) * 1000), 0)

    def remaining_s(self) -> float:
        return max(self.budget_ms / 1000.0 - (time.perf_counter() - self.started), 0.0)

    async def run(
        self,
        task: asyncio.Task,
        inflight: InFlight,
        on_late: Optional[Callable[[asyncio.Task], None]] = None,
    ) -> bool:
        """Return True if `task` finished inside the budget.

        Either way the answer is claimed here, so the caller writes exactly
        one response. On expiry, or when the caller itself is cancelled, the
        task keeps running (so it can release its resources), the cancel event
        is set and `on_late` fires when it eventually ends.
        """
        try:
            done, _pending = await asyncio.wait({task}, timeout=self.remaining_s())
        except asyncio.CancelledError:
            # client went away; let the delegate clean up on its own
            self._abandon(task, inflight, on_late)
            raise
        self.claim()
        if task in done:
            return True
        self._abandon(task, inflight, on_late)
        return False

    def _abandon(
        self,
        task: asyncio.Task,
        inflight: InFlight,
        on_late: Optional[Callable[[asyncio.Task], None]],
    ) -> None:
        self.cancel.set()
        if on_late is not None:
            task.add_done_callback(on_late)
        inflight.track(task)
