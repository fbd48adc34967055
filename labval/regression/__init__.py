"""
Method-comparison regression.

This subpackage fits the line relating a test method (y) to a reference
method (x) and attaches confidence limits to its slope and intercept.

Modules:
    base:
        ``RegressionModel`` and ``ConfidenceIntervalModel`` result types,
        the ``RegressionEstimator`` interface, and sample-pair validation.

    deming:
        Closed-form Deming regression and iteratively reweighted (constant
        CV) Weighted Deming regression.

    passing_bablok:
        Rank-based Passing-Bablok regression with its own non-parametric
        confidence limits.

    least_squares:
        Ordinary least squares and its Student-t interval, kept as a
        baseline.

    intervals:
        Jackknife (Linnet) and percentile bootstrap intervals that wrap any
        estimator.

    method_comparison:
        Name-based selection of estimator and interval.

Design Principle:
    Interval estimators take any ``RegressionEstimator`` and never inspect
    its concrete type.
"""

from .base import ConfidenceIntervalModel, RegressionEstimator, RegressionModel
from .deming import DemingRegression, IterationOutcome, WeightedDemingRegression
from .intervals import BootstrapConfidenceInterval, JackknifeConfidenceInterval, linnet_se
from .least_squares import LeastSquaresConfidenceInterval, LeastSquaresRegression
from .method_comparison import MethodCompRegression
from .passing_bablok import AngleMatrix, PassingBablokRegression, tolerant_diff

__all__ = [
    "AngleMatrix",
    "BootstrapConfidenceInterval",
    "ConfidenceIntervalModel",
    "DemingRegression",
    "IterationOutcome",
    "JackknifeConfidenceInterval",
    "LeastSquaresConfidenceInterval",
    "LeastSquaresRegression",
    "MethodCompRegression",
    "PassingBablokRegression",
    "RegressionEstimator",
    "RegressionModel",
    "WeightedDemingRegression",
    "linnet_se",
    "tolerant_diff",
]
