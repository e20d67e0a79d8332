from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator

# Number of guiding cycles kept for the trend fit
HISTORY_CAPACITY = 200


@dataclass(frozen=False, slots=True)
class Sample:
    """
    One guiding cycle as seen by the guider.

    Mutable because a sample is appended before its control output is
    decided; the control is filled in at the end of the same step.
    """
    timestamp: float = 0.0               # Seconds since first sample (interval midpoint)
    raw_measurement: float = 0.0         # Sensor-reported position error
    corrected_measurement: float = 0.0   # Error with prior corrections undone
    control_output: float = 0.0          # Correction issued this cycle


class SampleHistory:
    """
    Fixed-capacity FIFO ring of Samples, addressed from the front.

    Index 0 is always the most recently inserted sample, index 1 the one
    before it. Once full, pushing a new sample evicts the oldest.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self._samples: deque[Sample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen  # type: ignore[return-value]

    def push_front(self, sample: Sample | None = None) -> Sample:
        """Insert a sample as the newest entry and return it."""
        if sample is None:
            sample = Sample()
        self._samples.appendleft(sample)
        return sample

    @property
    def front(self) -> Sample:
        """Most recent sample."""
        return self[0]

    def clear(self) -> None:
        self._samples.clear()

    def oldest_first(self) -> list[Sample]:
        return list(reversed(self._samples))

    def __getitem__(self, index: int) -> Sample:
        if not -len(self._samples) <= index < len(self._samples):
            raise IndexError(f"history index {index} out of range (len={len(self)})")
        return self._samples[index]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        """Iterate newest first."""
        return iter(self._samples)
