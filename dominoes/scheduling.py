"""
Deferred callbacks for AI "thinking time".

The engine never sleeps. When an AI player is to move it asks a Scheduler
for a cancellable handle that fires after the configured delay, and keeps
at most one such handle at a time.

Two schedulers are provided:
    AsyncioScheduler  - real delays on the running asyncio event loop.
    ManualScheduler   - a virtual clock advanced explicitly, for tests and
                        headless simulation.
"""

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    """A pending callback that can be aborted."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall: ...


class AsyncioScheduler:
    """
    Schedule callbacks on an asyncio event loop.

    Args:
        loop: Loop to use. Defaults to the loop running when the first
              callback is scheduled.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise RuntimeError(
                    "AsyncioScheduler needs a running event loop; "
                    "use ManualScheduler for synchronous play"
                ) from e
        return self._loop.call_later(max(0.0, delay), callback)


@dataclass(order=True)
class ManualHandle:
    """Handle returned by ManualScheduler."""
    when: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    _cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """
    Deterministic scheduler driven by a virtual clock.

    Callbacks run only from advance() or run_until_idle(), in due-time
    order, so tests can observe the engine between AI moves.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[ManualHandle] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + max(0.0, delay), next(self._counter), callback)
        heapq.heappush(self._queue, handle)
        return handle

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) callbacks."""
        return sum(1 for h in self._queue if not h.cancelled())

    def _pop_due(self, until: float) -> Optional[ManualHandle]:
        while self._queue:
            handle = self._queue[0]
            if handle.cancelled():
                heapq.heappop(self._queue)
                continue
            if handle.when > until:
                return None
            heapq.heappop(self._queue)
            return handle
        return None

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every callback that comes due.

        Returns:
            Number of callbacks run.
        """
        target = self.now + seconds
        ran = 0
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self.now = max(self.now, handle.when)
            handle.callback()
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """
        Run callbacks (including ones they schedule) until none remain.

        Args:
            max_callbacks: Safety limit against runaway rescheduling.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        while ran < max_callbacks:
            handle = self._pop_due(float("inf"))
            if handle is None:
                break
            self.now = max(self.now, handle.when)
            handle.callback()
            ran += 1
        if ran >= max_callbacks:
            logger.warning(f"run_until_idle stopped after {ran} callbacks")
        return ran
