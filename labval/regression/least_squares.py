"""Ordinary least-squares regression used as a baseline comparator.

OLS assumes the reference method is error-free, so it is not recommended
for method comparison; it is kept for sanity checks of the shared
sum-of-squares machinery and for teaching comparisons.

References:
    Mendenhall WM, Sincich TL. Statistics for Engineering and the Sciences,
    6th ed. CRC Press; 2016. Table 10.1 and p. 503.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from scipy.stats import t as student_t

from labval.config import DEFAULT_ALPHA
from labval.exceptions import InputValidationError, NumericDomainError
from labval.regression.base import (
    ConfidenceIntervalModel,
    RegressionEstimator,
    RegressionModel,
    as_sample_pair,
    validate_alpha,
)


def _corrected_sums(x: np.ndarray, y: np.ndarray) -> Tuple[float, float, float]:
    """Return ``(SSxx, SSxy, SSyy)`` computed from raw sums."""
    n = x.size
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    ss_xx = float(np.sum(x * x)) - sum_x * sum_x / n
    ss_xy = float(np.sum(x * y)) - sum_x * sum_y / n
    ss_yy = float(np.sum(y * y)) - sum_y * sum_y / n
    return ss_xx, ss_xy, ss_yy


class LeastSquaresRegression(RegressionEstimator):
    """Ordinary least-squares line of ``y`` on ``x``."""

    def calculate(self, x: Sequence[float], y: Sequence[float]) -> RegressionModel:
        x_arr, y_arr = as_sample_pair(x, y)
        ss_xx, ss_xy, _ = _corrected_sums(x_arr, y_arr)
        if ss_xx == 0:
            raise NumericDomainError("All x values are equal; the OLS slope is undefined.")
        b1 = ss_xy / ss_xx
        b0 = (float(np.sum(y_arr)) - b1 * float(np.sum(x_arr))) / x_arr.size
        return RegressionModel(slope=b1, intercept=b0)


class LeastSquaresConfidenceInterval:
    """Closed-form Student-t confidence limits for the OLS coefficients.

    Args:
        alpha (float, optional): Two-sided significance level. Defaults to
            ``0.05``.
    """

    def __init__(self, alpha: float = DEFAULT_ALPHA):
        self.alpha = alpha

    def calculate(self, x: Sequence[float], y: Sequence[float]) -> ConfidenceIntervalModel:
        """Fit OLS and return coefficients, standard errors and limits.

        Raises:
            InputValidationError: If fewer than three points are supplied.
            NumericDomainError: If all x values are equal.
        """
        x_arr, y_arr = as_sample_pair(x, y)
        alpha = validate_alpha(self.alpha)
        n = x_arr.size
        if n <= 2:
            raise InputValidationError("Sample size must be greater than 2")

        reg = LeastSquaresRegression().calculate(x_arr, y_arr)
        ss_xx, ss_xy, ss_yy = _corrected_sums(x_arr, y_arr)

        # SSE from corrected sums limits rounding error.
        sse = ss_yy - ss_xy * reg.slope
        s = math.sqrt(max(sse, 0.0) / (n - 2))
        se_slope = s / math.sqrt(ss_xx)
        se_intercept = s * math.sqrt(1.0 / n + (float(np.mean(x_arr)) ** 2) / ss_xx)
        t_crit = float(student_t.ppf(1.0 - alpha / 2.0, n - 2))

        return ConfidenceIntervalModel(
            slope=reg.slope,
            intercept=reg.intercept,
            slope_lcl=reg.slope - t_crit * se_slope,
            slope_ucl=reg.slope + t_crit * se_slope,
            intercept_lcl=reg.intercept - t_crit * se_intercept,
            intercept_ucl=reg.intercept + t_crit * se_intercept,
            slope_se=se_slope,
            intercept_se=se_intercept,
        )
