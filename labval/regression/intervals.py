"""Resampling confidence intervals layered over any regression estimator.

Both strategies depend only on ``RegressionEstimator.calculate`` and can wrap
Deming, Weighted Deming, Passing-Bablok or least-squares regression.

References:
    Linnet K. Evaluation of regression procedures for methods comparison
    studies. Clin Chem. 1993;39:424-432.
    Efron B, Tibshirani RJ. An Introduction to the Bootstrap. Chapman &
    Hall; 1993.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Sequence, Tuple

import numpy as np
from scipy.stats import t as student_t

from labval.config import DEFAULT_ALPHA, DEFAULT_BOOTSTRAP_N
from labval.exceptions import InputValidationError, NumericDomainError
from labval.regression.base import (
    ConfidenceIntervalModel,
    RegressionEstimator,
    as_sample_pair,
    validate_alpha,
)
from labval.stats.descriptive import quantile, sample_sd

logger = logging.getLogger(__name__)


def linnet_se(b_jack: Sequence[float], b_global: float) -> float:
    """Jackknife standard error from leave-one-out estimates.

    Args:
        b_jack (Sequence[float]): Coefficient estimated with each point left
            out in turn.
        b_global (float): Coefficient estimated from all points.

    Returns:
        float: ``sd(d) / sqrt(n)`` where ``d_i = n * b_global - (n - 1) *
        b_jack[i]`` are the jackknife pseudo-values.
    """
    b = np.asarray(b_jack, dtype=float)
    n = b.size
    pseudo = n * float(b_global) - (n - 1) * b
    return sample_sd(pseudo) / math.sqrt(n)


class JackknifeConfidenceInterval:
    """Leave-one-out confidence interval for a regression estimator.

    Args:
        x (Sequence[float]): Reference-method results.
        y (Sequence[float]): Test-method results.
        estimator (RegressionEstimator): Any regression variant.
        alpha (float, optional): Two-sided significance level. Defaults to
            ``0.05``.
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        estimator: RegressionEstimator,
        alpha: float = DEFAULT_ALPHA,
    ):
        self.x = x
        self.y = y
        self.estimator = estimator
        self.alpha = alpha

    def calculate(self) -> ConfidenceIntervalModel:
        """Compute jackknife standard errors and Student-t limits.

        Returns:
            ConfidenceIntervalModel: Global coefficients with Linnet standard
            errors and limits ``b ∓ t(1 - alpha/2, n - 2) * SE``.

        Raises:
            InputValidationError: If ``n <= 2`` or the inputs are invalid.
        """
        x_arr, y_arr = as_sample_pair(self.x, self.y)
        alpha = validate_alpha(self.alpha)
        n = x_arr.size
        if n <= 2:
            raise InputValidationError("Sample size must be greater than 2")

        reg = self.estimator.calculate(x_arr, y_arr)
        b1, b0 = reg.slope, reg.intercept

        b1_jack = np.empty(n, dtype=float)
        b0_jack = np.empty(n, dtype=float)
        for i in range(n):
            loo = self.estimator.calculate(np.delete(x_arr, i), np.delete(y_arr, i))
            b1_jack[i] = loo.slope
            b0_jack[i] = loo.intercept

        se_b1 = linnet_se(b1_jack, b1)
        se_b0 = linnet_se(b0_jack, b0)
        t_crit = float(student_t.ppf(1.0 - alpha / 2.0, n - 2))

        return ConfidenceIntervalModel(
            slope=b1,
            intercept=b0,
            slope_lcl=b1 - t_crit * se_b1,
            slope_ucl=b1 + t_crit * se_b1,
            intercept_lcl=b0 - t_crit * se_b0,
            intercept_ucl=b0 + t_crit * se_b0,
            slope_se=se_b1,
            intercept_se=se_b0,
        )


class BootstrapConfidenceInterval:
    """Percentile bootstrap confidence interval for a regression estimator.

    Args:
        x (Sequence[float]): Reference-method results.
        y (Sequence[float]): Test-method results.
        estimator (RegressionEstimator): Any regression variant.
        bootstrap_n (int, optional): Number of resamples. Defaults to
            ``10000``; interactive callers commonly use ``1000``.
        alpha (float, optional): Two-sided significance level. Defaults to
            ``0.05``.
        rng (numpy.random.Generator | int | None, optional): Random source.
            An integer seeds a fresh ``numpy.random.default_rng``; ``None``
            draws fresh OS entropy.
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        estimator: RegressionEstimator,
        bootstrap_n: int = DEFAULT_BOOTSTRAP_N,
        alpha: float = DEFAULT_ALPHA,
        rng: np.random.Generator | int | None = None,
    ):
        self.x = x
        self.y = y
        self.estimator = estimator
        self.bootstrap_n = bootstrap_n
        self.alpha = alpha
        self.rng = rng

    def _generator(self) -> np.random.Generator:
        if isinstance(self.rng, np.random.Generator):
            return self.rng
        return np.random.default_rng(self.rng)

    def resample_indices(self, n: int, rng: np.random.Generator) -> np.ndarray:
        """Draw ``bootstrap_n`` index vectors of size ``n`` with replacement."""
        return rng.integers(0, n, size=(int(self.bootstrap_n), n))

    def bootstrap_coefficients(
        self, x: np.ndarray, y: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Fit every resample and return sorted slopes and intercepts.

        Resamples on which the estimator is numerically undefined (for
        example every drawn x identical) are dropped and counted in the log,
        whether the estimator raises or returns a non-finite coefficient.

        Raises:
            NumericDomainError: If no resample could be fitted.
        """
        indices = self.resample_indices(x.size, self._generator())
        slopes = []
        intercepts = []
        n_degenerate = 0
        for idx in indices:
            try:
                reg = self.estimator.calculate(x[idx], y[idx])
            except NumericDomainError:
                n_degenerate += 1
                continue
            if not (math.isfinite(reg.slope) and math.isfinite(reg.intercept)):
                n_degenerate += 1
                continue
            slopes.append(reg.slope)
            intercepts.append(reg.intercept)

        if n_degenerate:
            logger.warning(
                "Dropped %d of %d degenerate bootstrap resamples",
                n_degenerate,
                len(indices),
            )
        if not slopes:
            raise NumericDomainError("No bootstrap resample produced a valid fit.")
        return np.sort(np.asarray(slopes)), np.sort(np.asarray(intercepts))

    def calculate(self) -> ConfidenceIntervalModel:
        """Compute percentile bootstrap limits around the global estimate.

        Returns:
            ConfidenceIntervalModel: Global coefficients with the empirical
            ``alpha/2`` and ``1 - alpha/2`` quantiles of the bootstrap
            distribution; standard errors are NaN.

        Raises:
            InputValidationError: If the inputs, ``alpha`` or
                ``bootstrap_n`` are invalid.
        """
        x_arr, y_arr = as_sample_pair(self.x, self.y)
        alpha = validate_alpha(self.alpha)
        if not isinstance(self.bootstrap_n, numbers.Integral) or self.bootstrap_n <= 0:
            raise InputValidationError("Number of bootstrap samples must be a positive integer.")

        reg = self.estimator.calculate(x_arr, y_arr)
        slopes, intercepts = self.bootstrap_coefficients(x_arr, y_arr)

        probs = [alpha / 2.0, 1.0 - alpha / 2.0]
        slope_ci = quantile(slopes, probs)
        intercept_ci = quantile(intercepts, probs)
        logger.debug(
            "Bootstrap with %d resamples: slope CI %s, intercept CI %s",
            self.bootstrap_n,
            slope_ci,
            intercept_ci,
        )

        return ConfidenceIntervalModel(
            slope=reg.slope,
            intercept=reg.intercept,
            slope_lcl=slope_ci[0],
            slope_ucl=slope_ci[1],
            intercept_lcl=intercept_ci[0],
            intercept_ucl=intercept_ci[1],
        )
