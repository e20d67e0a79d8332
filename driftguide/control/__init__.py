from __future__ import annotations

from driftguide.control.history import HISTORY_CAPACITY, Sample, SampleHistory
from driftguide.control.identity import IdentityGuider
from driftguide.control.interfaces import GuideAlgorithm, GuideAlgorithmKind, ParameterSpec
from driftguide.control.linear_regression import (
    DEFAULT_CONTROL_GAIN,
    DEFAULT_MIN_SAMPLES_FOR_INFERENCE,
    LinearRegressionGuider,
    LinearRegressionParams,
)
from driftguide.control.regression import LinearFit, fit_linear_trend
from driftguide.control.timing import ManualClock, Stopwatch

__all__ = [
    "GuideAlgorithm",
    "GuideAlgorithmKind",
    "ParameterSpec",
    "IdentityGuider",
    "LinearRegressionGuider",
    "LinearRegressionParams",
    "DEFAULT_CONTROL_GAIN",
    "DEFAULT_MIN_SAMPLES_FOR_INFERENCE",
    "HISTORY_CAPACITY",
    "Sample",
    "SampleHistory",
    "LinearFit",
    "fit_linear_trend",
    "ManualClock",
    "Stopwatch",
]
