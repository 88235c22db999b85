"""Hand-off queue between a capture thread and a processing thread."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable, Deque

QUEUE_MIN = 8 * 1024
_REBALANCE_INTERVAL = 5
_DEMAND_FACTOR = 0.15
_REDUCTION_STEPS = (100000, 50000, 20000, 10000)


class PcapQueue:
    """Queue of captured records with a pool of reusable buffer slots.

    The capture side pushes records cheaply; the processing side drains
    them in one short critical section and handles them without holding
    the lock. Slots that grew during a stall are released by ``rebalance``.
    """

    def __init__(self, minimum: int = QUEUE_MIN):
        if minimum < 0:
            raise ValueError("minimum must not be negative")
        self.minimum = minimum
        self._lock = threading.Lock()
        self._used: Deque[Any] = deque()
        self.free_depth = minimum
        self.free_miss = 0
        self.mangled = 0
        self._buffers_used = 0
        self.last_buffers_used = 0
        self._last_buffer_time = 0
        self._last_rebalance_time = 0

    @property
    def used_depth(self) -> int:
        return len(self._used)

    def push(self, record: Any) -> None:
        """Queue ``record``, taking a free slot or growing the pool."""
        with self._lock:
            if self.free_depth:
                self.free_depth -= 1
            else:
                self.free_miss += 1
            self._used.append(record)

    def service(self, handler: Callable[[Any], Any], now: int) -> int:
        """Pass every queued record to ``handler`` in order; return how many.

        ``now`` is the current time in whole seconds, used for the
        per-second usage figure that drives rebalancing.
        """
        with self._lock:
            if not self._used:
                return 0
            items, self._used = self._used, deque()
        count = len(items)

        for record in items:
            try:
                if record is None:
                    self.mangled += 1
                else:
                    handler(record)
            finally:
                with self._lock:
                    self.free_depth += 1

        if self._last_buffer_time != now:
            self._last_buffer_time = now
            self.last_buffers_used = self._buffers_used
            self._buffers_used = 0
        self._buffers_used += count
        return count

    def _reduce(self, count: int) -> int:
        with self._lock:
            removable = max(0, min(count, self.free_depth - self.minimum))
            self.free_depth -= removable
        return removable

    def rebalance(self, now: int) -> int:
        """Release idle free slots at most once every few seconds; return how many."""
        if self._last_rebalance_time + _REBALANCE_INTERVAL >= now:
            return 0
        self._last_rebalance_time = now

        demand = self.last_buffers_used * _DEMAND_FACTOR
        available = float(self.free_depth)
        if available <= demand:
            return 0
        balance = available - demand
        for step in _REDUCTION_STEPS:
            if balance > step:
                return self._reduce(step)
        return 0