from __future__ import annotations

from dataclasses import dataclass

# slots are used to enfore good interface hygiene, disables dynamic attribute creation.
@dataclass(frozen=True, slots=True)
class CycleSample:
    """
    One simulated guiding cycle.

    Recorded after the guider has answered and its correction has been
    applied, and written to timeseries.json for offline analysis.
    """
    cycle: int                  # Cycle number
    time_s: float               # End of exposure (s since run start)
    exposure_s: float           # Exposure that produced this measurement (s)
    drift: float                # Uncorrected trajectory f(t) (arcsec)
    residual: float             # Noise-free error before this correction (arcsec)
    raw_error: float | None     # Measured error (arcsec), None when the star was lost
    control: float              # Correction applied (arcsec)
    prediction_active: bool     # Whether the drift prediction contributed
    star_lost: bool = False     # Measurement missing; prediction only


@dataclass(frozen=True, slots=True)
class RunMetrics:
    total_cycles: int
    scenario_name: str
    algorithm: str
    start_time: str
    finish_time: str
    rms_raw_error: float            # RMS of measured errors (arcsec)
    rms_residual: float             # RMS of noise-free errors (arcsec)
    drift_rate_estimate: float | None = None   # Last fitted slope (arcsec/s)


@dataclass(frozen=True, slots=True)
class RunResult:
    """
    Complete results from a simulated guiding run.

    Attributes:
        metrics: Run-level metadata and error statistics.
        samples: Per-cycle records.
        settings: Guider settings summary at the end of the run.
    """
    metrics: RunMetrics
    samples: list[CycleSample]
    settings: str = ""
