"""
Closed-loop guiding simulation.

The GuidingKernel plays the part of the guiding application for one axis:
it exposes, measures, asks the guider for a correction and applies it to
the mount, cycle after cycle. Time is simulated with a ManualClock that is
shared with the guider, so the guider's timestamps follow the simulated
exposures instead of the wall clock.

Architecture:
```
    GuidingKernel (Time Authority)
        |
        +-- ManualClock (advanced by each exposure)
        |
        +-- MountAxisPlant
        |   |-- drift trajectory f(t) + noise
        |   |-- accumulated corrections
        |
        +-- GuideAlgorithm
        |   |-- LinearRegressionGuider or IdentityGuider
        |
        v
    RunResult:
        |-- RunMetrics (timing, error statistics)
        |-- CycleSample[] (per-cycle record)
```

Example usage:
    >>> from driftguide.config import DriftParams, SimConfig
    >>> from driftguide.control import LinearRegressionGuider, ManualClock
    >>> from driftguide.sim.kernel import GuidingKernel
    >>> from driftguide.sim.plant import MountAxisPlant
    >>> from driftguide.sim.schedules import constant_exposure
    >>>
    >>> config = SimConfig.from_args(name="example", cycles=100, seed=42, out_dir=None)
    >>> clock = ManualClock()
    >>> kernel = GuidingKernel(
    ...     config,
    ...     plant=MountAxisPlant(DriftParams(drift_rate=0.01), seed=config.seed),
    ...     guider=LinearRegressionGuider(clock=clock),
    ...     schedule=constant_exposure(2.0),
    ...     clock=clock,
    ... )
    >>> result = kernel.run()
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Collection

from ..config import SimConfig
from ..control.interfaces import GuideAlgorithm
from ..control.timing import ManualClock
from .interfaces import CycleSample, RunMetrics, RunResult
from .plant import MountAxisPlant
from .schedules import Schedule

LOGGER = logging.getLogger(__name__)


def rms(values: list[float]) -> float:
    """Root mean square (0.0 for an empty list)."""
    if not values:
        return 0.0
    return math.sqrt(sum(v * v for v in values) / len(values))


class GuidingKernel:
    """
    Guiding loop driver for one simulated axis.

    Each cycle:
    1. Advance the clock by the exposure for this cycle
    2. Measure the error on the plant
    3. Ask the guider for a correction (step, or apply_prediction if the star
       was lost this cycle)
    4. Apply the correction to the plant
    5. Record a CycleSample

    Attributes:
        _cfg: Run configuration (name, cycles, seed).
        _plant: Simulated mount axis.
        _guider: Guide algorithm under test.
        _schedule: Exposure duration per cycle.
        _clock: Time source shared with the guider.
        _star_lost_cycles: Cycles without a usable measurement.
    """

    def __init__(
        self,
        config: SimConfig,
        plant: MountAxisPlant,
        guider: GuideAlgorithm,
        schedule: Schedule,
        clock: ManualClock,
        star_lost_cycles: Collection[int] = (),
    ) -> None:
        self._cfg = config
        self._plant = plant
        self._guider = guider
        self._schedule = schedule
        self._clock = clock
        self._star_lost_cycles = frozenset(star_lost_cycles)

    def run(self) -> RunResult:
        """
        Run the simulation.

        The guider and plant are reset first, so a kernel may be run
        repeatedly with identical results.

        Returns:
            RunResult with metrics and per-cycle samples
        """
        start_time = datetime.now(timezone.utc).isoformat()

        self._guider.reset()
        self._plant.reset()

        samples: list[CycleSample] = []
        t0 = self._clock.now_s

        for cycle in range(self._cfg.cycles):
            exposure_s = self._schedule(cycle)
            self._clock.advance(exposure_s)
            t_s = self._clock.now_s - t0

            next_interval_s = self._schedule(cycle + 1)
            residual = self._plant.residual(t_s)
            star_lost = cycle in self._star_lost_cycles

            if star_lost:
                raw_error = None
                control = self._guider.apply_prediction(next_interval_s)
            else:
                raw_error = self._plant.measure(t_s)
                control = self._guider.step(raw_error, next_interval_s)

            self._plant.apply(control)

            samples.append(
                CycleSample(
                    cycle=cycle,
                    time_s=t_s,
                    exposure_s=exposure_s,
                    drift=self._plant.drift(t_s),
                    residual=residual,
                    raw_error=raw_error,
                    control=control,
                    prediction_active=self._guider.inference_active,
                    star_lost=star_lost,
                )
            )

        finish_time = datetime.now(timezone.utc).isoformat()

        last_fit = self._guider.last_fit
        metrics = RunMetrics(
            total_cycles=self._cfg.cycles,
            scenario_name=self._cfg.name,
            algorithm=self._guider.algorithm.value,
            start_time=start_time,
            finish_time=finish_time,
            rms_raw_error=rms([s.raw_error for s in samples if s.raw_error is not None]),
            rms_residual=rms([s.residual for s in samples]),
            drift_rate_estimate=last_fit.slope if last_fit is not None else None,
        )

        # Validate that metrics are serializable (fail-fast check)
        _ = asdict(metrics)

        LOGGER.info(
            "%s: %d cycles, rms raw=%.4f residual=%.4f",
            metrics.scenario_name,
            metrics.total_cycles,
            metrics.rms_raw_error,
            metrics.rms_residual,
        )

        return RunResult(
            metrics=metrics,
            samples=samples,
            settings=self._guider.settings_summary(),
        )
