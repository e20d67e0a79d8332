from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, replace

from driftguide.control.history import HISTORY_CAPACITY, Sample, SampleHistory
from driftguide.control.interfaces import GuideAlgorithmKind, ParameterSpec
from driftguide.control.regression import LinearFit, fit_linear_trend
from driftguide.control.timing import Stopwatch, TimeSource

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTROL_GAIN = 1.0
DEFAULT_MIN_SAMPLES_FOR_INFERENCE = 25

PARAMETER_SPECS: tuple[ParameterSpec, ...] = (
    ParameterSpec(
        name="gain",
        label="Control Gain",
        description=(
            "The control gain defines how aggressive the controller is. It is "
            "the amount of pointing error that is fed back to the system. "
            f"Default = {DEFAULT_CONTROL_GAIN}"
        ),
        minimum=0.0,
        maximum=1.0,
        default=DEFAULT_CONTROL_GAIN,
        increment=0.05,
    ),
    ParameterSpec(
        name="min_samples_for_inference",
        label="Min data points (inference)",
        description=(
            "Minimal number of measurements to start using the linear "
            "regression. With too few data points the drift estimate may be "
            f"poor. 0 disables the prediction. Default = {DEFAULT_MIN_SAMPLES_FOR_INFERENCE}"
        ),
        minimum=0,
        maximum=100,
        default=DEFAULT_MIN_SAMPLES_FOR_INFERENCE,
    ),
)


@dataclass
class LinearRegressionParams:
    """
    Parameters for the linear regression guider.
    """
    gain: float = DEFAULT_CONTROL_GAIN                                   # Proportional gain [0, 1]
    min_samples_for_inference: int = DEFAULT_MIN_SAMPLES_FOR_INFERENCE  # 0 = proportional only


class LinearRegressionGuider:
    """
    Drift-compensating guider for one mount axis.

    Control law:
        u = gain * e + T_next * w1

    Where e is the measured error, T_next the duration of the next guiding
    interval and w1 the drift rate of a line fitted to the recent history.

    The fit is not done on the raw errors, which are the residual of an
    already closed loop, but on de-controlled measurements: the error
    trajectory reconstructed as if no correction had ever been applied,

        m[i] = e[i] + u[i-1] - e[i-1] + m[i-1],   m[0] = e[0]

    Each sample is timestamped at the midpoint of the interval that ended
    with it, since a guide error is accumulated over the exposure.

    Features:
    - Sliding window of the last 200 cycles, refitted on every step
    - Ridge-regularized normal equations (always a finite solution)
    - Prediction disabled until more than min_samples_for_inference samples
    - Validated setters falling back to defaults on invalid input
    """

    algorithm = GuideAlgorithmKind.LINEAR_REGRESSION

    def __init__(
        self,
        params: LinearRegressionParams | None = None,
        clock: TimeSource | None = None,
        capacity: int = HISTORY_CAPACITY,
    ):
        """
        Initialize the guider.

        Args:
            params: Initial parameters (uses defaults if None). Invalid values
                    fall back to the defaults, as with the setters.
            clock: Time source in seconds (time.monotonic if None)
            capacity: Number of cycles kept in the regression window
        """
        requested = params or LinearRegressionParams()
        self._params = LinearRegressionParams()
        self.set_gain(requested.gain)
        self.set_min_samples_for_inference(requested.min_samples_for_inference)

        self._history = SampleHistory(capacity)
        self._stopwatch = Stopwatch(clock)
        self._last_timestamp_ms: float = 0.0
        self._control_signal: float = 0.0
        self._last_fit: LinearFit | None = None

    @staticmethod
    def parameter_specs() -> tuple[ParameterSpec, ...]:
        return PARAMETER_SPECS

    # Configuration

    @property
    def gain(self) -> float:
        return self._params.gain

    @property
    def min_samples_for_inference(self) -> int:
        return self._params.min_samples_for_inference

    def set_gain(self, gain: float) -> bool:
        """
        Set the proportional gain.

        Args:
            gain: New gain, must lie in [0, 1]

        Returns:
            True if accepted. If rejected, the gain is reset to
            DEFAULT_CONTROL_GAIN and False is returned.
        """
        if isinstance(gain, numbers.Real) and not isinstance(gain, bool) and 0.0 <= gain <= 1.0:
            self._params.gain = float(gain)
            return True

        LOGGER.warning(
            "InvalidParameter: control gain %r not in [0, 1], using default %.3f",
            gain,
            DEFAULT_CONTROL_GAIN,
        )
        self._params.gain = DEFAULT_CONTROL_GAIN
        return False

    def set_min_samples_for_inference(self, count: int) -> bool:
        """
        Set the number of samples required before the drift is predicted.

        Args:
            count: Non-negative integer; 0 disables the prediction

        Returns:
            True if accepted. If rejected, the threshold is reset to
            DEFAULT_MIN_SAMPLES_FOR_INFERENCE and False is returned.
        """
        if isinstance(count, numbers.Integral) and not isinstance(count, bool) and count >= 0:
            self._params.min_samples_for_inference = int(count)
            return True

        LOGGER.warning(
            "InvalidParameter: min samples for inference %r must be an integer >= 0, "
            "using default %d",
            count,
            DEFAULT_MIN_SAMPLES_FOR_INFERENCE,
        )
        self._params.min_samples_for_inference = DEFAULT_MIN_SAMPLES_FOR_INFERENCE
        return False

    def settings_summary(self) -> str:
        return (
            f"Control Gain = {self.gain:.3f}\n"
            f"Min data points (inference) = {self.min_samples_for_inference}\n"
        )

    # State inspection

    @property
    def sample_count(self) -> int:
        return len(self._history)

    @property
    def last_control(self) -> float:
        return self._control_signal

    @property
    def last_timestamp_ms(self) -> float:
        return self._last_timestamp_ms

    @property
    def last_fit(self) -> LinearFit | None:
        """Trend fitted by the latest step (None if the prediction was off)."""
        return self._last_fit

    @property
    def inference_active(self) -> bool:
        threshold = self._params.min_samples_for_inference
        return threshold > 0 and len(self._history) > threshold

    def samples(self) -> list[Sample]:
        """Copies of the buffered samples, oldest first."""
        return [replace(s) for s in self._history.oldest_first()]

    # Guiding

    def reset(self) -> None:
        """Clear history and timing state, keeping the configuration."""
        self._history.clear()
        self._stopwatch.stop()
        self._last_timestamp_ms = 0.0
        self._control_signal = 0.0
        self._last_fit = None
        LOGGER.debug("linear regression guider reset")

    def step(self, raw_measurement: float, next_interval_s: float) -> float:
        """
        Record a measurement and compute the correction.

        A non-finite measurement (a failed centroid) is not buffered, since
        it would poison every later reconstructed value. The cycle is then
        handled like a lost star, see apply_prediction().

        Args:
            raw_measurement: Position error reported for this cycle
            next_interval_s: Duration of the next guiding interval (seconds)

        Returns:
            Correction to apply (gain * error, plus predicted drift once
            enough samples are buffered)
        """
        if not math.isfinite(raw_measurement):
            LOGGER.warning(
                "non-finite measurement %r ignored, issuing predicted drift only",
                raw_measurement,
            )
            return self.apply_prediction(next_interval_s)

        sample = self._add_sample(raw_measurement)
        self._reconstruct_measurement(sample)

        control = self._params.gain * raw_measurement

        self._last_fit = self.fit_trend()
        if self._last_fit is not None:
            if len(self._history) == self._params.min_samples_for_inference + 1:
                LOGGER.debug(
                    "drift prediction active after %d samples", len(self._history)
                )
            control += next_interval_s * self._last_fit.slope

        sample.control_output = control
        self._control_signal = control
        return control

    def predict_only(self, next_interval_s: float) -> float:
        """
        Predicted drift correction without a new measurement.

        Leaves history, timing and the recorded controls untouched, so
        repeated calls with the same argument return the same value.

        Returns:
            next_interval_s * drift rate, or 0.0 while the prediction is off
        """
        fit = self.fit_trend()
        if fit is None:
            return 0.0
        return next_interval_s * fit.slope

    def apply_prediction(self, next_interval_s: float) -> float:
        """
        Predicted drift correction for a cycle without a measurement, to be
        sent to the mount.

        The prediction is added to the control recorded on the newest sample,
        so the next reconstruction removes it along with the correction issued
        by the last step. Successive calls accumulate.

        Returns:
            Same value as predict_only()
        """
        prediction = self.predict_only(next_interval_s)
        if prediction != 0.0:
            self._history.front.control_output += prediction
            self._control_signal = prediction
        return prediction

    def fit_trend(self) -> LinearFit | None:
        """
        Fit the de-controlled measurements over the buffered window.

        Returns:
            LinearFit, or None when fewer samples than required are buffered
        """
        if not self.inference_active:
            return None

        samples = self._history.oldest_first()
        return fit_linear_trend(
            [s.timestamp for s in samples],
            [s.corrected_measurement for s in samples],
        )

    def _add_sample(self, raw_measurement: float) -> Sample:
        # Time starts at zero with the first sample after a reset
        if len(self._history) == 0:
            self._stopwatch.start()

        sample = self._history.push_front(Sample(raw_measurement=raw_measurement))

        now_ms = self._stopwatch.time_ms()
        delta_ms = now_ms - self._last_timestamp_ms
        self._last_timestamp_ms = now_ms
        # Attribute the measurement to the middle of its interval
        sample.timestamp = (self._last_timestamp_ms - delta_ms / 2) / 1000

        return sample

    def _reconstruct_measurement(self, sample: Sample) -> None:
        if len(self._history) <= 1:
            sample.corrected_measurement = sample.raw_measurement
            return

        previous = self._history[1]
        sample.corrected_measurement = (
            sample.raw_measurement
            + previous.control_output       # undo the correction already issued
            - previous.raw_measurement      # offset already realized last cycle
            + previous.corrected_measurement
        )
