"""
Numeric primitives for method-validation statistics.

This subpackage provides the small set of descriptive routines used by both
the regression and the precision engines. All functions operate on arrays
and primitive types; no study-design logic is included.

Modules:
    descriptive:
        Mean, sample standard deviation, sum of squared deviations, sum of
        cross-products, median, and linearly interpolated empirical
        quantiles.

Design Principle:
    This subpackage has no dependencies on regression/ or precision/. It
    provides pure numerical utilities that can be independently tested.
"""

from .descriptive import devsq, mean, median, quantile, sample_sd, sum_cross_products

__all__ = [
    "devsq",
    "mean",
    "median",
    "quantile",
    "sample_sd",
    "sum_cross_products",
]
