from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from driftguide.control.linear_regression import (
    DEFAULT_CONTROL_GAIN,
    DEFAULT_MIN_SAMPLES_FOR_INFERENCE,
)


def _clean_path_name(path_name: str) -> str:
    # Remove unsafe characters from directory name
    cleaned = [c if (c.isalnum() or c in ("-", "_")) else "_" for c in path_name]
    return "".join(cleaned).strip("_")

# slots are used to enfore good interface hygiene, disables dynamic attribute creation.
@dataclass(frozen=True, slots=True)
class SimConfig:
    """
    SimConfig

    Definitions and configuration for a simulated guiding run

    Params:
    - name (str) : run name
    - cycles (int) : number of guiding cycles to simulate
    - seed (int) : random seed for measurement noise and exposure jitter
    - out_dir (str|None) : output directory for run artifacts
                           default: artifacts/runs/<timestamp>_<name>
    """
    name: str
    cycles: int
    seed: int
    out_dir: Path

    @staticmethod
    def from_args(
        *,
        name: str,
        cycles: int,
        seed: int,
        out_dir: str | None
    ) -> "SimConfig":
        if not isinstance(name, str) or not name:
            raise ValueError("name must be a non-empty string")
        if cycles < 0:
            raise ValueError("cycles must be >= 0")

        if out_dir is not None:
            out_dir = Path(out_dir)
        else:
            """
            Default output location:
            artifacts/runs/<timestamp>_<name>
            Timestamp is UTC in YYYYmmdd_HHMMSS format.
            """
            ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            clean_name = _clean_path_name(name)

            # Check if name is empty after cleaning
            if not clean_name:
                clean_name = "run"
            out_dir = Path("artifacts").joinpath(f"runs/{ts}_{clean_name}")

        return SimConfig(
            name=name,
            cycles=int(cycles),
            seed=int(seed),
            out_dir=out_dir,
        )


@dataclass(frozen=True, slots=True)
class DriftParams:
    """
    Uncorrected error trajectory of one mount axis (arcsec).

        f(t) = offset + drift_rate * t + periodic_amplitude * sin(2πt / periodic_period_s)

    Measurements add zero-mean Gaussian noise with noise_sigma.
    """
    offset: float = 0.0                 # Initial pointing error (arcsec)
    drift_rate: float = 0.01            # Linear drift (arcsec/s)
    noise_sigma: float = 0.0            # Measurement noise (arcsec, 1σ)
    periodic_amplitude: float = 0.0     # Periodic error amplitude (arcsec)
    periodic_period_s: float = 480.0    # Periodic error period (s), worm gear

    def __post_init__(self) -> None:
        for field_name in ("offset", "drift_rate", "periodic_amplitude"):
            if not math.isfinite(getattr(self, field_name)):
                raise ValueError(f"{field_name} must be finite")
        if not self.noise_sigma >= 0:
            raise ValueError("noise_sigma must be >= 0")
        if not self.periodic_period_s > 0:
            raise ValueError("periodic_period_s must be > 0")


@dataclass(frozen=True, slots=True)
class GuideConfig:
    """
    Defaults for a simulated guiding session.
    """
    exposure_s: float = 2.0              # Guide camera exposure (s)
    gain: float = DEFAULT_CONTROL_GAIN                                   # Proportional gain
    min_samples_for_inference: int = DEFAULT_MIN_SAMPLES_FOR_INFERENCE  # Samples before drift prediction
