from __future__ import annotations

import random
from typing import Callable

# Default guide camera exposure (seconds)
DEFAULT_EXPOSURE_S = 2.0

# Type alias for schedule functions: cycle -> exposure duration (s)
Schedule = Callable[[int], float]


def constant_exposure(seconds: float = DEFAULT_EXPOSURE_S) -> Schedule:
    """
    Same exposure every cycle.

    Args:
        seconds: Exposure duration (> 0)

    Returns:
        Schedule function: cycle -> exposure seconds
    """
    if seconds <= 0:
        raise ValueError("exposure must be > 0")

    def schedule(cycle: int) -> float:
        return seconds
    return schedule


def jittered_exposure(
    seconds: float = DEFAULT_EXPOSURE_S,
    jitter_s: float = 0.1,
    seed: int = 0,
) -> Schedule:
    """
    Exposure with uniform timing jitter, as seen with real camera readout
    and download overheads.

    The jitter of a cycle depends only on (seed, cycle), so the schedule
    may be queried in any order and still be reproducible.

    Args:
        seconds: Nominal exposure duration
        jitter_s: Maximum deviation from nominal (< seconds)
        seed: Random seed

    Returns:
        Schedule function: cycle -> exposure seconds
    """
    if not 0 <= jitter_s < seconds:
        raise ValueError("jitter must be in [0, exposure)")

    def schedule(cycle: int) -> float:
        rng = random.Random(seed * 1_000_003 + cycle)
        return seconds + rng.uniform(-jitter_s, jitter_s)
    return schedule


def step_exposure(
    before_s: float = 1.0,
    after_s: float = 4.0,
    step_at_cycle: int = 50,
) -> Schedule:
    """
    Exposure change at a specific cycle.

    Useful for checking that the drift prediction scales with the interval.

    Args:
        before_s: Exposure before the step
        after_s: Exposure from step_at_cycle on
        step_at_cycle: Cycle at which to step

    Returns:
        Schedule function: cycle -> exposure seconds
    """
    if before_s <= 0 or after_s <= 0:
        raise ValueError("exposure must be > 0")

    def schedule(cycle: int) -> float:
        return before_s if cycle < step_at_cycle else after_s
    return schedule
