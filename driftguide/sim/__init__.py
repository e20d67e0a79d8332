from __future__ import annotations

from driftguide.sim.interfaces import CycleSample, RunMetrics, RunResult
from driftguide.sim.kernel import GuidingKernel, rms
from driftguide.sim.plant import MountAxisPlant
from driftguide.sim.schedules import constant_exposure, jittered_exposure, step_exposure

__all__ = [
    "CycleSample",
    "RunMetrics",
    "RunResult",
    "GuidingKernel",
    "MountAxisPlant",
    "rms",
    "constant_exposure",
    "jittered_exposure",
    "step_exposure",
]
