"""
Monotonic clock used for every latency measurement.

Phase runners, batch writers and the concurrency harness read time only
through a ``Clock``, so tests can substitute a deterministic one.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Source of monotonic time in seconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """Clock backed by time.perf_counter()."""

    def now(self) -> float:
        return time.perf_counter()


def elapsed_ms(clock: Clock, start: float) -> float:
    """Milliseconds elapsed on ``clock`` since ``start``."""
    return (clock.now() - start) * 1000
