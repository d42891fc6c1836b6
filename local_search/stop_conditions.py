"""
Stop conditions for the local search engine.

A stop condition is called with the solution, (element,) and the move just
considered, and returns True to terminate the current round. The ones here
ignore their arguments and keep internal state instead, so they also work
as ``on_success`` / ``on_fail`` continuation predicates once negated.
"""

import time
from typing import Any, Callable

from utils.functors import always_false

never_stop = always_false


class StopConditionCountLimit:
    """
    Fires once it has been asked more than ``limit`` times.

    The first ``limit`` calls return False, every later call returns True.

    Args:
        limit: Number of calls allowed before stopping (>= 0)
    """

    def __init__(self, limit: int):
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self.limit = limit
        self.count = 0

    def __call__(self, *args: Any) -> bool:
        fired = self.count >= self.limit
        self.count += 1
        return fired

    def reset(self) -> None:
        self.count = 0


class StopConditionTimeLimit:
    """
    Fires when ``duration`` seconds have elapsed since construction (or reset).

    Args:
        duration: Time budget in seconds (> 0)
        clock: Monotonic clock returning seconds (default: time.perf_counter)
    """

    def __init__(self, duration: float, clock: Callable[[], float] = time.perf_counter):
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration}")
        self.duration = duration
        self.clock = clock
        self.start_time = clock()

    def __call__(self, *args: Any) -> bool:
        return self.elapsed() >= self.duration

    def elapsed(self) -> float:
        return self.clock() - self.start_time

    def reset(self) -> None:
        self.start_time = self.clock()
