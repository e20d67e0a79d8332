from __future__ import annotations

import math
import random

from driftguide.config import DriftParams


class MountAxisPlant:
    """
    One mount axis drifting away from its guide star.

    The star drifts along the uncorrected trajectory f(t) (see DriftParams).
    Every correction issued by the guider moves the mount by that amount, so
    the error seen by the guide camera at time t is

        e(t) = f(t) - sum(corrections) + noise

    Noise is drawn from a seeded RNG, so runs are reproducible.
    """

    def __init__(self, params: DriftParams, seed: int = 0):
        """
        Initialize the plant.

        Args:
            params: Drift trajectory and noise parameters
            seed: Random seed for measurement noise
        """
        self.params = params
        self._seed = seed
        self._rng = random.Random(seed)
        self._cumulative_correction: float = 0.0

    def reset(self) -> None:
        """Undo all corrections and restart the noise sequence."""
        self._rng = random.Random(self._seed)
        self._cumulative_correction = 0.0

    @property
    def cumulative_correction(self) -> float:
        return self._cumulative_correction

    def drift(self, t_s: float) -> float:
        """Uncorrected error trajectory f(t) (arcsec)."""
        p = self.params
        value = p.offset + p.drift_rate * t_s
        if p.periodic_amplitude:
            value += p.periodic_amplitude * math.sin(2 * math.pi * t_s / p.periodic_period_s)
        return value

    def residual(self, t_s: float) -> float:
        """Noise-free pointing error after all corrections so far."""
        return self.drift(t_s) - self._cumulative_correction

    def measure(self, t_s: float) -> float:
        """Error reported by the guide camera at time t."""
        noise = self._rng.gauss(0.0, self.params.noise_sigma) if self.params.noise_sigma else 0.0
        return self.residual(t_s) + noise

    def apply(self, correction: float) -> None:
        """Move the mount by a correction (arcsec)."""
        self._cumulative_correction += correction
