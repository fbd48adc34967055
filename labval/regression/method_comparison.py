"""Select a regression estimator and confidence-interval strategy by name.

This is the entry point used by the command line and by callers that pick
the analysis from a settings form rather than constructing estimators.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from labval.config import (
    CI_METHOD_BOOTSTRAP,
    CI_METHOD_DEFAULT,
    CI_METHOD_JACKKNIFE,
    CI_METHODS,
    DEFAULT_ALPHA,
    DEFAULT_BOOTSTRAP_N,
    DEFAULT_ERROR_RATIO,
    DEFAULT_ITER_MAX,
    DEFAULT_THRESHOLD,
    REG_METHOD_DEMING,
    REG_METHOD_PABA,
    REG_METHOD_WDEMING,
    REG_METHODS,
)
from labval.exceptions import InputValidationError
from labval.regression.base import ConfidenceIntervalModel, RegressionEstimator
from labval.regression.deming import DemingRegression, WeightedDemingRegression
from labval.regression.intervals import (
    BootstrapConfidenceInterval,
    JackknifeConfidenceInterval,
)
from labval.regression.passing_bablok import PassingBablokRegression

logger = logging.getLogger(__name__)

CI_LABELS = {
    (REG_METHOD_DEMING, CI_METHOD_DEFAULT): "Jackknife CI",
    (REG_METHOD_DEMING, CI_METHOD_JACKKNIFE): "Jackknife CI",
    (REG_METHOD_WDEMING, CI_METHOD_DEFAULT): "Jackknife CI",
    (REG_METHOD_WDEMING, CI_METHOD_JACKKNIFE): "Jackknife CI",
    (REG_METHOD_PABA, CI_METHOD_DEFAULT): "Non-parametric CI",
}


class MethodCompRegression:
    """Method-comparison regression chosen by method and CI names.

    Args:
        method (str): ``"Deming"``, ``"WDeming"`` or ``"PaBa"``.
        error_ratio (float, optional): Error-variance ratio for the Deming
            family. Defaults to ``1``.
        max_iter (int, optional): Weighted Deming iteration cap.
        threshold (float, optional): Weighted Deming convergence threshold.
        alpha (float, optional): Two-sided significance level.
        ci_method (str, optional): ``"default"``, ``"jackknife"`` or
            ``"bootstrap"``. The default is the jackknife for the Deming
            family and the rank-based interval for Passing-Bablok.
        bootstrap_n (int, optional): Number of bootstrap resamples.
        rng (numpy.random.Generator | int | None, optional): Bootstrap random
            source.

    Raises:
        InputValidationError: If ``method`` or ``ci_method`` is unknown, or
            the jackknife is requested for Passing-Bablok.
    """

    def __init__(
        self,
        method: str,
        error_ratio: float = DEFAULT_ERROR_RATIO,
        max_iter: int = DEFAULT_ITER_MAX,
        threshold: float = DEFAULT_THRESHOLD,
        alpha: float = DEFAULT_ALPHA,
        ci_method: str = CI_METHOD_DEFAULT,
        bootstrap_n: int = DEFAULT_BOOTSTRAP_N,
        rng: np.random.Generator | int | None = None,
    ):
        if method not in REG_METHODS:
            raise InputValidationError(f"Unknown regression method: {method}")
        if ci_method not in CI_METHODS:
            raise InputValidationError(f"Unknown confidence interval method: {ci_method}")
        if method == REG_METHOD_PABA and ci_method == CI_METHOD_JACKKNIFE:
            raise InputValidationError(
                "Passing-Bablok supports the default or bootstrap interval only."
            )
        self.method = method
        self.error_ratio = error_ratio
        self.max_iter = max_iter
        self.threshold = threshold
        self.alpha = alpha
        self.ci_method = ci_method
        self.bootstrap_n = bootstrap_n
        self.rng = rng

    @property
    def ci_label(self) -> str:
        """Human-readable name of the interval that ``calculate`` reports."""
        return CI_LABELS.get((self.method, self.ci_method), "Bootstrap CI")

    def estimator(self) -> RegressionEstimator:
        if self.method == REG_METHOD_DEMING:
            return DemingRegression(self.error_ratio)
        if self.method == REG_METHOD_WDEMING:
            return WeightedDemingRegression(self.error_ratio, self.max_iter, self.threshold)
        return PassingBablokRegression(self.alpha)

    def calculate(self, x: Sequence[float], y: Sequence[float]) -> ConfidenceIntervalModel:
        """Fit the chosen estimator and attach the chosen interval."""
        regression = self.estimator()
        logger.info(
            "Running %s regression on %d pairs with %s",
            self.method,
            len(x),
            self.ci_label,
        )

        if self.ci_method == CI_METHOD_BOOTSTRAP:
            return BootstrapConfidenceInterval(
                x, y, regression, self.bootstrap_n, self.alpha, rng=self.rng
            ).calculate()

        if self.method == REG_METHOD_PABA:
            reg = regression.calculate(x, y)
            return ConfidenceIntervalModel(
                slope=reg.slope,
                intercept=reg.intercept,
                slope_lcl=reg.slope_lcl,
                slope_ucl=reg.slope_ucl,
                intercept_lcl=reg.intercept_lcl,
                intercept_ucl=reg.intercept_ucl,
            )

        return JackknifeConfidenceInterval(x, y, regression, self.alpha).calculate()
