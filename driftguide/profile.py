"""
Persistent per-axis guider settings.

The profile is a flat mapping of slash-separated keys to numbers, stored as
JSON. Each mount axis keeps its linear regression settings under its own
configuration path:

    /scope/GuideAlgorithm/<axis>/LinearRegression/lr_controlGain
    /scope/GuideAlgorithm/<axis>/LinearRegression/lr_nbminelementforinference

The guider never touches the profile itself: the helpers below act as its
owner, pushing stored values through the validating setters on load and
writing back whatever value is in effect after an update.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from driftguide.control.linear_regression import (
    DEFAULT_CONTROL_GAIN,
    DEFAULT_MIN_SAMPLES_FOR_INFERENCE,
    LinearRegressionGuider,
    LinearRegressionParams,
)
from driftguide.control.timing import TimeSource

LOGGER = logging.getLogger(__name__)

GAIN_KEY = "lr_controlGain"
MIN_SAMPLES_KEY = "lr_nbminelementforinference"


class ProfileError(RuntimeError):
    """Raised when a profile file cannot be read."""


class GuideAxis(str, Enum):
    RA = "ra"
    DEC = "dec"


def config_path(axis: GuideAxis) -> str:
    """Configuration path of the linear regression settings for an axis."""
    return f"/scope/GuideAlgorithm/{GuideAxis(axis).name}/LinearRegression"


class Profile:
    """
    Key/value settings store, optionally backed by a JSON file.

    With path=None the profile lives in memory only and save() is a no-op.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        self._values: dict[str, float | int] = {}
        if self.path is not None and self.path.exists():
            self.load()

    def load(self) -> None:
        if self.path is None:
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ProfileError(f"cannot read profile {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ProfileError(f"profile {self.path} must contain a JSON object")
        self._values = dict(data)

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._values, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def get_float(self, key: str, default: float) -> float:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            LOGGER.warning("profile key %s has non-numeric value %r, using %s", key, value, default)
            return default
        return float(value)

    def get_int(self, key: str, default: int) -> int:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            LOGGER.warning("profile key %s has non-integer value %r, using %s", key, value, default)
            return default
        return value

    def set_float(self, key: str, value: float) -> None:
        self._values[key] = float(value)

    def set_int(self, key: str, value: int) -> None:
        self._values[key] = int(value)


def store_guider(profile: Profile, axis: GuideAxis, guider: LinearRegressionGuider) -> None:
    """Write the guider's settings in effect to the profile and save it."""
    path = config_path(axis)
    profile.set_float(f"{path}/{GAIN_KEY}", guider.gain)
    profile.set_int(f"{path}/{MIN_SAMPLES_KEY}", guider.min_samples_for_inference)
    profile.save()


def load_guider(
    profile: Profile,
    axis: GuideAxis,
    clock: TimeSource | None = None,
) -> LinearRegressionGuider:
    """
    Create a guider for an axis from its stored settings.

    Missing keys take the defaults (gain 1.0, 25 samples). Stored values
    that fail validation are replaced by the defaults, and the corrected
    values are written back.
    """
    path = config_path(axis)
    params = LinearRegressionParams(
        gain=profile.get_float(f"{path}/{GAIN_KEY}", DEFAULT_CONTROL_GAIN),
        min_samples_for_inference=profile.get_int(
            f"{path}/{MIN_SAMPLES_KEY}", DEFAULT_MIN_SAMPLES_FOR_INFERENCE
        ),
    )
    guider = LinearRegressionGuider(params, clock=clock)
    store_guider(profile, axis, guider)
    return guider


def apply_settings(
    profile: Profile,
    axis: GuideAxis,
    guider: LinearRegressionGuider,
    *,
    gain: float | None = None,
    min_samples_for_inference: int | None = None,
) -> bool:
    """
    Update guider settings and persist them.

    Only the settings passed are changed. Rejected values leave the guider
    on its default for that setting, which is what gets stored.

    Returns:
        True if every requested value was accepted
    """
    accepted = True
    if gain is not None:
        accepted = guider.set_gain(gain) and accepted
    if min_samples_for_inference is not None:
        accepted = guider.set_min_samples_for_inference(min_samples_for_inference) and accepted
    store_guider(profile, axis, guider)
    return accepted
