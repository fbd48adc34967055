"""Deming and Weighted Deming regression for method-comparison studies.

Both estimators account for measurement error in the reference (x) and the
test (y) method. Ordinary Deming assumes a constant SD across the measuring
range; Weighted Deming assumes a constant CV and reweights iteratively.

References:
    Linnet K. Estimation of the linear relationship between the
    measurements of two methods with proportional errors. Stat Med.
    1990;9:1463-1473.
    mcr: Method Comparison Regression, R package (Potapov et al.).
"""

from __future__ import annotations

import logging
import math
import numbers
import warnings
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from labval.config import DEFAULT_ERROR_RATIO, DEFAULT_ITER_MAX, DEFAULT_THRESHOLD
from labval.exceptions import ConvergenceWarning, InputValidationError, NumericDomainError
from labval.regression.base import RegressionEstimator, RegressionModel, as_sample_pair
from labval.stats.descriptive import devsq, mean, sum_cross_products

logger = logging.getLogger(__name__)


def _deming_coefficients(
    u: float, q: float, p: float, x_bar: float, y_bar: float, error_ratio: float
) -> Tuple[float, float]:
    """Solve the Deming quadratic for ``(intercept, slope)``.

    ``u``, ``q`` and ``p`` are the (possibly weighted) sums of squared x
    deviations, squared y deviations and cross-products about ``x_bar`` and
    ``y_bar``.
    """
    lam = error_ratio
    if p == 0:
        raise NumericDomainError(
            "Sum of cross-products is zero; the Deming slope is undefined."
        )
    b1 = (lam * q - u + math.sqrt((u - lam * q) ** 2 + 4.0 * lam * p**2)) / (
        2.0 * lam * p
    )
    b0 = y_bar - b1 * x_bar
    return b0, b1


def _validate_error_ratio(error_ratio: float) -> float:
    if not isinstance(error_ratio, numbers.Real) or not error_ratio > 0:
        raise InputValidationError("Error ratio must be a positive number.")
    return float(error_ratio)


class DemingRegression(RegressionEstimator):
    """Ordinary Deming regression.

    Args:
        error_ratio (float, optional): Ratio of the measurement-error
            variances of the test and reference methods. Defaults to ``1``.
    """

    def __init__(self, error_ratio: float = DEFAULT_ERROR_RATIO):
        self.error_ratio = error_ratio

    def calculate(self, x: Sequence[float], y: Sequence[float]) -> RegressionModel:
        """Fit the Deming line in closed form.

        Args:
            x (Sequence[float]): Reference-method results (non-negative).
            y (Sequence[float]): Test-method results (non-negative).

        Returns:
            RegressionModel: Slope and intercept; confidence limits are NaN.

        Raises:
            InputValidationError: If lengths mismatch or are zero, the error
                ratio is not positive, or any value is negative.
            NumericDomainError: If the cross-product sum is zero.
        """
        x_arr, y_arr = as_sample_pair(x, y, allow_negative=False)
        lam = _validate_error_ratio(self.error_ratio)

        u = devsq(x_arr)
        q = devsq(y_arr)
        p = sum_cross_products(x_arr, y_arr)
        b0, b1 = _deming_coefficients(u, q, p, mean(x_arr), mean(y_arr), lam)
        return RegressionModel(slope=b1, intercept=b0)


@dataclass(frozen=True)
class IterationOutcome:
    """Result of a bounded fixed-point iteration."""

    converged: bool
    iterations: int
    value: RegressionModel


class WeightedDemingRegression(RegressionEstimator):
    """Weighted Deming regression for constant-CV measurement error.

    Args:
        error_ratio (float, optional): Ratio of measurement-error variances.
            Defaults to ``1``.
        max_iter (int, optional): Maximum number of reweighting iterations.
            Defaults to ``30``.
        threshold (float, optional): Convergence threshold applied to both
            coefficients. Defaults to ``1e-6``.
    """

    def __init__(
        self,
        error_ratio: float = DEFAULT_ERROR_RATIO,
        max_iter: int = DEFAULT_ITER_MAX,
        threshold: float = DEFAULT_THRESHOLD,
    ):
        self.error_ratio = error_ratio
        self.max_iter = max_iter
        self.threshold = threshold

    def _validate(self) -> None:
        _validate_error_ratio(self.error_ratio)
        if not isinstance(self.max_iter, numbers.Integral) or self.max_iter <= 0:
            raise InputValidationError(
                "Maximum number of iterations must be a positive integer."
            )
        if not isinstance(self.threshold, numbers.Real) or not self.threshold > 0:
            raise InputValidationError("Threshold must be a positive number.")

    def fit(self, x: Sequence[float], y: Sequence[float]) -> IterationOutcome:
        """Iterate the reweighted Deming fit and report how it terminated.

        Each pass projects every point onto the current line, weights it by
        the inverse square of its estimated true concentration, and solves
        the Deming quadratic on the weighted sums. Iteration stops when both
        coefficients move by less than ``threshold``; the estimate from
        before that final step is kept.

        Raises:
            InputValidationError: On invalid data or parameters.
            NumericDomainError: If a weight or the weighted cross-product
                sum degenerates.
        """
        x_arr, y_arr = as_sample_pair(x, y, allow_negative=False)
        self._validate()
        lam = float(self.error_ratio)

        initial = DemingRegression(lam).calculate(x_arr, y_arr)
        b0, b1 = initial.intercept, initial.slope

        for iteration in range(1, int(self.max_iter) + 1):
            d = y_arr - (b0 + b1 * x_arr)
            x_hat = x_arr + (lam * b1 * d) / (1.0 + lam * b1 * b1)
            y_hat = y_arr - d / (1.0 + lam * b1**2)
            with np.errstate(divide="ignore"):
                w = ((x_hat + lam * y_hat) / (1.0 + lam)) ** -2.0
            if not np.all(np.isfinite(w)):
                raise NumericDomainError(
                    "Weighted Deming weight is undefined for a point projected onto zero."
                )

            sum_w = float(np.sum(w))
            wx = float(np.sum(w * x_arr)) / sum_w
            wy = float(np.sum(w * y_arr)) / sum_w
            wu = float(np.sum(w * (x_arr - wx) ** 2))
            wq = float(np.sum(w * (y_arr - wy) ** 2))
            wp = float(np.sum(w * (x_arr - wx) * (y_arr - wy)))
            new_b0, new_b1 = _deming_coefficients(wu, wq, wp, wx, wy, lam)

            if abs(b1 - new_b1) < self.threshold and abs(b0 - new_b0) < self.threshold:
                logger.debug("Weighted Deming converged after %d iterations", iteration)
                return IterationOutcome(
                    converged=True,
                    iterations=iteration,
                    value=RegressionModel(slope=b1, intercept=b0),
                )
            b0, b1 = new_b0, new_b1

        message = f"No convergence after {self.max_iter} iterations."
        logger.warning(message)
        warnings.warn(message, ConvergenceWarning, stacklevel=3)
        return IterationOutcome(
            converged=False,
            iterations=int(self.max_iter),
            value=RegressionModel(slope=b1, intercept=b0),
        )

    def calculate(self, x: Sequence[float], y: Sequence[float]) -> RegressionModel:
        """Fit the weighted Deming line; confidence limits are NaN."""
        return self.fit(x, y).value
