"""
Per-group event rate estimators.

Two signals are maintained for every group:
- SlidingWindowRate: events observed in a trailing fixed-duration window
- ExponentialMovingAverage: one-minute style decayed average, ticked every few seconds

Both accept an injectable monotonic clock and guard their state with a
per-instance lock, so concurrent producers of different groups never contend.
"""

import math
import threading
import time
from collections import deque
from collections.abc import Callable

Clock = Callable[[], float]


def _check_count(n: int) -> None:
    if n < 1:
        raise ValueError(f"Event count must be >= 1, got {n}")


class SlidingWindowRate:
    """Counts events in a trailing time window"""

    def __init__(self, window_seconds: float = 1.0, clock: Clock = time.monotonic):
        if not window_seconds > 0:
            raise ValueError("window_seconds must be positive")
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: deque[tuple[float, int]] = deque()
        self._count = 0
        self._lock = threading.Lock()

    def observe(self, n: int = 1) -> None:
        """Register n events at the current instant"""
        _check_count(n)
        now = self._clock()
        with self._lock:
            self._entries.append((now, n))
            self._count += n
            self._evict(now)

    def count(self) -> int:
        """Number of events inside the window"""
        now = self._clock()
        with self._lock:
            self._evict(now)
            return self._count

    def rate(self) -> float:
        """Events per second over the window"""
        return self.count() / self.window_seconds

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._entries and self._entries[0][0] <= cutoff:
            _, n = self._entries.popleft()
            self._count -= n


class ExponentialMovingAverage:
    """Exponentially decayed event rate, advanced on a fixed tick.

    Events accumulate as uncounted until the next tick boundary, where the
    instant rate ``uncounted / tick`` is folded into the average with
    ``alpha = 1 - exp(-tick / window)``. Ticks are applied lazily whenever
    the estimator is touched, one per elapsed tick boundary.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        tick_seconds: float = 5.0,
        clock: Clock = time.monotonic,
    ):
        if not (window_seconds > 0 and tick_seconds > 0):
            raise ValueError("window_seconds and tick_seconds must be positive")
        self.window_seconds = window_seconds
        self.tick_seconds = tick_seconds
        self.alpha = 1.0 - math.exp(-tick_seconds / window_seconds)
        self._clock = clock
        self._rate = 0.0
        self._uncounted = 0
        self._last_tick = clock()
        self._lock = threading.Lock()

    def observe(self, n: int = 1) -> None:
        """Register n events at the current instant"""
        _check_count(n)
        with self._lock:
            self._tick_if_necessary()
            self._uncounted += n

    def rate(self) -> float:
        """Decayed rate in events per second"""
        with self._lock:
            self._tick_if_necessary()
            return self._rate

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        age = now - self._last_tick
        if age < self.tick_seconds:
            return

        ticks = int(age // self.tick_seconds)
        self._last_tick += ticks * self.tick_seconds

        # First tick folds in the pending events, the rest only decay
        instant_rate = self._uncounted / self.tick_seconds
        self._uncounted = 0
        self._rate += self.alpha * (instant_rate - self._rate)
        if ticks > 1:
            self._rate *= (1.0 - self.alpha) ** (ticks - 1)
