from __future__ import annotations

import time
from typing import Callable

# Time source returning seconds (monotonic)
TimeSource = Callable[[], float]


class Stopwatch:
    """
    Millisecond stopwatch measuring time since the last start().

    The time source is injectable so that simulations and tests can drive
    time deterministically with a ManualClock.
    """

    def __init__(self, time_source: TimeSource | None = None):
        self._time_source = time_source or time.monotonic
        self._origin_s: float | None = None

    @property
    def running(self) -> bool:
        return self._origin_s is not None

    def start(self) -> None:
        """(Re)start the stopwatch at zero."""
        self._origin_s = self._time_source()

    def stop(self) -> None:
        self._origin_s = None

    def time_ms(self) -> float:
        """
        Elapsed time since start() in milliseconds.

        A stopwatch that was never started reads 0.
        """
        if self._origin_s is None:
            return 0.0
        return (self._time_source() - self._origin_s) * 1000.0


class ManualClock:
    """
    Manually advanced time source (seconds).

    Usable anywhere a TimeSource is expected:
        >>> clock = ManualClock()
        >>> watch = Stopwatch(clock)
        >>> watch.start()
        >>> _ = clock.advance(2.0)
        >>> watch.time_ms()
        2000.0
    """

    def __init__(self, start_s: float = 0.0):
        self._now_s = float(start_s)

    def __call__(self) -> float:
        return self._now_s

    @property
    def now_s(self) -> float:
        return self._now_s

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("cannot advance clock backwards")
        self._now_s += seconds
        return self._now_s
