"""
core/rhythm.py

The room has two heartbeats: a fast one for movement and a slow one
for judgement. Some things also happen a moment later.

Time here is simulated milliseconds. Nothing fires until the scheduler
is advanced, and everything due fires in order.

Inspired by:
- Event-driven simulation loops
- Browser timers (interval and one-shot)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


@dataclass(order=True)
class _Entry:
    due: float
    seq: int
    handle: "TimerHandle" = field(compare=False)


@dataclass(eq=False)
class TimerHandle:
    """A scheduled callback. Periodic handles re-arm after firing."""
    callback: Callable[[], None]
    period: Optional[float] = None
    name: str = ""
    cancelled: bool = False

    @property
    def periodic(self) -> bool:
        return self.period is not None

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """
    Single-threaded timer wheel over simulated time.

    - every(period, cb): fire cb each period, first at now + period
    - call_later(delay, cb): fire cb once at now + delay
    - advance(ms): move the clock forward, firing everything that falls due
    - cancel_all(): teardown; nothing pending will ever fire

    Events with the same due time fire in registration order.
    """

    def __init__(self, start_ms: float = 0.0):
        self.now = float(start_ms)
        self._queue: List[_Entry] = []
        self._counter = itertools.count()

    # ==================== Registration ====================

    def every(
        self,
        period_ms: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError(f"Period must be positive, got {period_ms}")
        handle = TimerHandle(callback=callback, period=float(period_ms), name=name)
        self._push(self.now + period_ms, handle)
        return handle

    def call_later(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError(f"Delay must be non-negative, got {delay_ms}")
        handle = TimerHandle(callback=callback, name=name)
        self._push(self.now + delay_ms, handle)
        return handle

    def _push(self, due: float, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, _Entry(due, next(self._counter), handle))

    # ==================== Time ====================

    def advance(self, ms: float) -> int:
        """
        Move time forward by ms, firing due callbacks in order.

        The clock reads each callback's due time while it runs.
        Returns the number of callbacks fired.
        """
        if ms < 0:
            raise ValueError(f"Cannot move time backwards ({ms} ms)")
        target = self.now + ms
        fired = 0

        while self._queue and self._queue[0].due <= target:
            entry = heapq.heappop(self._queue)
            handle = entry.handle
            if handle.cancelled:
                continue

            self.now = entry.due
            if handle.periodic:
                self._push(entry.due + handle.period, handle)
            handle.callback()
            fired += 1

        self.now = target
        return fired

    def cancel_all(self) -> int:
        """Cancel everything pending. Returns how many were live."""
        names = []
        for entry in self._queue:
            if not entry.handle.cancelled:
                entry.handle.cancel()
                names.append(entry.handle.name or "anonymous")
        self._queue = []
        if names:
            logger.debug(
                f"Cancelled {len(names)} pending timers at t={self.now:.0f}ms: {', '.join(names)}"
            )
        return len(names)

    @property
    def pending(self) -> int:
        return sum(1 for e in self._queue if not e.handle.cancelled)

    def __repr__(self) -> str:
        return f"Scheduler(now={self.now:.0f}ms, pending={self.pending})"
