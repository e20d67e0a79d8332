from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

# Ridge term added to the diagonal of the Gram matrix
RIDGE = 1e-3


@dataclass(frozen=True, slots=True)
class LinearFit:
    """
    Affine trend y ≈ intercept + slope * t.
    """
    intercept: float
    slope: float        # Drift rate (units of y per second)


def fit_linear_trend(
    timestamps: Sequence[float],
    values: Sequence[float],
    ridge: float = RIDGE,
) -> LinearFit:
    """
    Ridge-regularized least squares fit of an offset and a drift rate.

    Solves the normal equations

        (X Xᵀ + ridge I) w = X y,   X = [1, ..., 1; t_0, ..., t_n]

    The ridge term keeps the 2x2 system positive definite, so short or
    degenerate windows (e.g. all timestamps equal) still yield a finite,
    unique solution. The solve is direct, so identical inputs always give
    identical weights.

    Args:
        timestamps: Sample times (seconds)
        values: Observed values at those times
        ridge: Non-negative diagonal regularization

    Returns:
        LinearFit with intercept w0 and slope w1

    Raises:
        ValueError: On empty or mismatched inputs, or negative ridge
    """
    t = np.asarray(timestamps, dtype=float)
    y = np.asarray(values, dtype=float)
    if t.ndim != 1 or t.shape != y.shape:
        raise ValueError(
            f"timestamps and values must be 1-D and equal length "
            f"(got {t.shape} and {y.shape})"
        )
    if t.size == 0:
        raise ValueError("cannot fit a trend to an empty series")
    if ridge < 0:
        raise ValueError("ridge must be >= 0")

    features = np.vstack((np.ones_like(t), t))
    gram = features @ features.T + ridge * np.eye(2)
    weights = np.linalg.solve(gram, features @ y)

    return LinearFit(intercept=float(weights[0]), slope=float(weights[1]))
