from __future__ import annotations

from driftguide.control.interfaces import GuideAlgorithmKind
from driftguide.control.regression import LinearFit


class IdentityGuider:
    """
    Baseline guider: the correction is the measured error.

    Stateless. Without a measurement it issues no correction.
    """

    algorithm = GuideAlgorithmKind.IDENTITY

    @property
    def inference_active(self) -> bool:
        return False

    @property
    def last_fit(self) -> LinearFit | None:
        return None

    def reset(self) -> None:
        """Nothing to reset."""

    def step(self, raw_measurement: float, next_interval_s: float) -> float:
        return raw_measurement

    def predict_only(self, next_interval_s: float) -> float:
        return 0.0

    def apply_prediction(self, next_interval_s: float) -> float:
        return 0.0

    def settings_summary(self) -> str:
        return ""
