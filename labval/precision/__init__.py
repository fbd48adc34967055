"""Precision-study ANOVA and variance-component analysis."""

from labval.precision.anova import (
    OneFactorAnova,
    OneFactorAnovaTable,
    TwoFactorAnova,
    TwoFactorAnovaTable,
    TwoFactorNestedAnova,
    TwoFactorNestedAnovaTable,
)
from labval.precision.grouping import FactorGrouping, NestedGrouping, level_key
from labval.precision.variance import (
    OneFactorVariance,
    OneFactorVarianceAnalysis,
    TwoFactorVariance,
    TwoFactorVarianceAnalysis,
    lower_confidence_limit,
    upper_confidence_limit,
)

__all__ = [
    "FactorGrouping",
    "NestedGrouping",
    "level_key",
    "OneFactorAnova",
    "OneFactorAnovaTable",
    "TwoFactorAnova",
    "TwoFactorAnovaTable",
    "TwoFactorNestedAnova",
    "TwoFactorNestedAnovaTable",
    "OneFactorVariance",
    "OneFactorVarianceAnalysis",
    "TwoFactorVariance",
    "TwoFactorVarianceAnalysis",
    "lower_confidence_limit",
    "upper_confidence_limit",
]
