"""Least-squares reference values from Mendenhall & Sincich, Table 10.1."""

import pytest

from labval.exceptions import InputValidationError, NumericDomainError
from labval.regression.least_squares import (
    LeastSquaresConfidenceInterval,
    LeastSquaresRegression,
)

X = [1, 2, 3, 4, 5]
Y = [1, 1, 2, 2, 4]


def test_least_squares_coefficients():
    reg = LeastSquaresRegression().calculate(X, Y)
    assert reg.slope == pytest.approx(0.7)
    assert reg.intercept == pytest.approx(-0.1)


def test_least_squares_confidence_interval():
    ci = LeastSquaresConfidenceInterval().calculate(X, Y)
    assert ci.slope == pytest.approx(0.7)
    assert ci.intercept == pytest.approx(-0.1)
    assert ci.slope_se == pytest.approx(0.191485, abs=5e-6)
    assert ci.intercept_se == pytest.approx(0.635085, abs=5e-6)
    assert ci.slope_lcl == pytest.approx(0.0906079, abs=5e-6)
    assert ci.slope_ucl == pytest.approx(1.30939207, abs=5e-6)
    assert ci.intercept_lcl == pytest.approx(-2.12112485, abs=5e-6)
    assert ci.intercept_ucl == pytest.approx(1.92112485, abs=5e-6)


def test_least_squares_constant_x_is_a_domain_error():
    with pytest.raises(NumericDomainError, match="OLS slope"):
        LeastSquaresRegression().calculate([2, 2, 2], [1, 2, 3])


def test_least_squares_interval_needs_three_points():
    with pytest.raises(InputValidationError, match="greater than 2"):
        LeastSquaresConfidenceInterval().calculate([1, 2], [1, 3])
