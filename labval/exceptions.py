"""Exception and warning types raised by the estimation engine."""

from __future__ import annotations


class LabvalError(Exception):
    """Base class for errors raised by labval."""


class InputValidationError(LabvalError, ValueError):
    """Raised when inputs fail entry validation.

    Covers mismatched or empty sample pairs, negative values passed to the
    Deming family, non-positive error ratios or iteration parameters, and
    unknown method names.
    """


class UnbalancedDesignError(LabvalError, ValueError):
    """Raised when a nested day/run design does not multiply out to N."""


class NumericDomainError(LabvalError, ArithmeticError):
    """Raised when degenerate input would force a division by zero."""


class ConvergenceWarning(UserWarning):
    """Issued when an iterative estimator exhausts its iteration budget."""
