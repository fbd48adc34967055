"""
A Python package for clinical laboratory method-validation statistics.

Compares measurement methods by errors-in-variables regression and estimates
imprecision from replicated day/run designs.

Modules:
    - regression: Deming, Weighted Deming, Passing-Bablok and least-squares
      regression with jackknife, bootstrap and closed-form intervals.
    - precision: One-factor, nested and crossed ANOVA and variance components.
    - data_processing: Loads study tables and extracts paired or grouped data.
    - reporting: Builds labelled result DataFrames.
    - output: Writes result tables to CSV.
"""

__version__ = "1.0.0"

from .data_processing import extract_pairs, extract_precision_design, load_table
from .exceptions import (
    ConvergenceWarning,
    InputValidationError,
    LabvalError,
    NumericDomainError,
    UnbalancedDesignError,
)
from .output import save_results_to_csv
from .precision import (
    OneFactorAnova,
    OneFactorVarianceAnalysis,
    TwoFactorAnova,
    TwoFactorNestedAnova,
    TwoFactorVarianceAnalysis,
)
from .regression import (
    BootstrapConfidenceInterval,
    DemingRegression,
    JackknifeConfidenceInterval,
    LeastSquaresConfidenceInterval,
    LeastSquaresRegression,
    MethodCompRegression,
    PassingBablokRegression,
    WeightedDemingRegression,
)
from .reporting import precision_results_frame, regression_results_frame

__all__ = [
    # Errors
    "LabvalError",
    "InputValidationError",
    "UnbalancedDesignError",
    "NumericDomainError",
    "ConvergenceWarning",
    # Regression
    "DemingRegression",
    "WeightedDemingRegression",
    "PassingBablokRegression",
    "LeastSquaresRegression",
    "LeastSquaresConfidenceInterval",
    "JackknifeConfidenceInterval",
    "BootstrapConfidenceInterval",
    "MethodCompRegression",
    # Precision
    "OneFactorAnova",
    "TwoFactorNestedAnova",
    "TwoFactorAnova",
    "OneFactorVarianceAnalysis",
    "TwoFactorVarianceAnalysis",
    # Data and reporting
    "load_table",
    "extract_pairs",
    "extract_precision_design",
    "regression_results_frame",
    "precision_results_frame",
    "save_results_to_csv",
]
