"""Shared result types and the estimator interface for method comparison."""

from __future__ import annotations

import abc
import math
from dataclasses import asdict, dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from labval.exceptions import InputValidationError


@dataclass(frozen=True)
class RegressionModel:
    """Coefficients of a fitted method-comparison line.

    Confidence limits are NaN when the estimator does not compute them
    itself; wrap it in a confidence-interval estimator to obtain them.
    """

    slope: float
    intercept: float
    slope_lcl: float = math.nan
    slope_ucl: float = math.nan
    intercept_lcl: float = math.nan
    intercept_ucl: float = math.nan

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ConfidenceIntervalModel(RegressionModel):
    """Regression coefficients with confidence limits and standard errors."""

    slope_se: float = math.nan
    intercept_se: float = math.nan


class RegressionEstimator(abc.ABC):
    """Capability shared by every regression variant.

    Confidence-interval estimators depend only on this interface, so any
    variant can be resampled by the jackknife or the bootstrap.
    """

    @abc.abstractmethod
    def calculate(self, x: Sequence[float], y: Sequence[float]) -> RegressionModel:
        """Fit the line ``y = intercept + slope * x``."""


def as_sample_pair(
    x: Sequence[float], y: Sequence[float], allow_negative: bool = True
) -> Tuple[np.ndarray, np.ndarray]:
    """Convert a sample pair to float arrays and validate it.

    Args:
        x (Sequence[float]): Reference-method results.
        y (Sequence[float]): Test-method results.
        allow_negative (bool, optional): Whether negative values are
            permitted. Defaults to ``True``.

    Returns:
        tuple[numpy.ndarray, numpy.ndarray]: Validated ``(x, y)`` arrays.

    Raises:
        InputValidationError: If lengths differ, are zero, or a negative
            value is present while ``allow_negative`` is ``False``.
    """
    x_arr = np.asarray(x, dtype=float).ravel()
    y_arr = np.asarray(y, dtype=float).ravel()
    if x_arr.size != y_arr.size or x_arr.size == 0:
        raise InputValidationError("Input arrays must have the same non-zero length.")
    if not allow_negative and (np.min(x_arr) < 0 or np.min(y_arr) < 0):
        raise InputValidationError(
            "Input arrays must contain only non-negative numbers."
        )
    return x_arr, y_arr


def validate_alpha(alpha: float) -> float:
    alpha = float(alpha)
    if not (0.0 < alpha < 1.0):
        raise InputValidationError(f"alpha must lie strictly between 0 and 1, got {alpha}")
    return alpha
