from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from driftguide.control.regression import LinearFit


class GuideAlgorithmKind(str, Enum):
    """Guide algorithms available for a mount axis."""
    IDENTITY = "identity"
    LINEAR_REGRESSION = "linear_regression"


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """
    Description of a tunable guider parameter.

    Presentation layers build their settings widgets from these; the guider
    itself remains the authority on validation.
    """
    name: str                # Attribute name on the guider
    label: str               # Short human-readable label
    description: str         # Tooltip / help text
    minimum: float
    maximum: float | None    # None = unbounded
    default: float
    increment: float = 1.0


class GuideAlgorithm(Protocol):
    """
    Protocol for per-axis guide algorithms.

    A guide algorithm turns the measured position error of one axis into a
    correction for the mount. It is called once per guiding cycle and knows
    nothing about cameras, mounts or exposure scheduling: the next exposure
    length is passed in by the caller.
    """

    @property
    def algorithm(self) -> GuideAlgorithmKind:
        ...

    def reset(self) -> None:
        """Forget all guiding history."""
        ...

    def step(self, raw_measurement: float, next_interval_s: float) -> float:
        """
        Consume one measurement and return the correction to apply.

        Args:
            raw_measurement: Position error reported for this cycle
            next_interval_s: Duration of the next guiding interval (seconds)

        Returns:
            Correction to apply to the mount
        """
        ...

    def predict_only(self, next_interval_s: float) -> float:
        """Correction the algorithm would issue without a measurement."""
        ...

    def apply_prediction(self, next_interval_s: float) -> float:
        """
        Correction to send to the mount for a cycle without a measurement.

        Unlike predict_only(), the algorithm accounts for the returned value
        as a correction it has issued.
        """
        ...

    @property
    def inference_active(self) -> bool:
        """True while corrections include a predicted component."""
        ...

    @property
    def last_fit(self) -> LinearFit | None:
        """Drift trend behind the latest correction, if any."""
        ...

    def settings_summary(self) -> str:
        ...
