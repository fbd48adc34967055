import math

import numpy as np
import pytest

from labval.config import ANGLE_SENTINEL
from labval.exceptions import InputValidationError
from labval.regression.passing_bablok import PassingBablokRegression, tolerant_diff


def test_passing_bablok_matches_mcr_reference(comparison_data):
    x, y = comparison_data
    reg = PassingBablokRegression().calculate(x, y)

    assert reg.slope == pytest.approx(0.9987917, abs=5e-5)
    assert reg.intercept == pytest.approx(57.2280851, abs=5e-4)
    assert reg.slope_lcl == pytest.approx(0.9710559, abs=5e-5)
    assert reg.slope_ucl == pytest.approx(1.027696, abs=5e-5)
    assert reg.intercept_lcl == pytest.approx(-8.774619, abs=5e-4)
    assert reg.intercept_ucl == pytest.approx(125.435582, abs=5e-4)


def test_passing_bablok_exact_line():
    x = np.arange(1.0, 11.0)
    y = 3.0 + 2.0 * x
    reg = PassingBablokRegression().calculate(x, y)
    assert np.isclose(reg.slope, 2.0)
    assert np.isclose(reg.intercept, 3.0)


def test_passing_bablok_accepts_negative_values():
    x = [-3.0, -1.0, 0.5, 2.0, 4.0, 6.5, 8.0]
    y = [-2.9, -1.2, 0.7, 1.8, 4.3, 6.4, 8.2]
    reg = PassingBablokRegression().calculate(x, y)
    assert np.isfinite(reg.slope)
    assert reg.slope == pytest.approx(1.0, abs=0.1)


def test_angle_matrix_counts_and_sentinels():
    x = [1.0, 1.0, 2.0]
    y = [1.0, 1.0, 4.0]
    matrix = PassingBablokRegression().angle_matrix(x, y)
    # 3 diagonal entries plus the coincident pair (0, 1)
    assert int(np.sum(matrix.angles == ANGLE_SENTINEL)) == 4
    assert matrix.n_all_items == 2
    assert matrix.n_pos == 2
    assert matrix.n_pos2 == 2
    assert matrix.n_neg == 0


def test_vertical_pairs_follow_correlation_sign():
    x = [1.0, 1.0]
    y = [1.0, 2.0]
    pos = PassingBablokRegression(positive_correlated=True).angle_matrix(x, y)
    neg = PassingBablokRegression(positive_correlated=False).angle_matrix(x, y)
    real_pos = pos.angles[pos.angles < ANGLE_SENTINEL]
    real_neg = neg.angles[neg.angles < ANGLE_SENTINEL]
    assert np.allclose(real_pos, [math.pi / 2])
    assert np.allclose(real_neg, [-math.pi / 2])


def test_confidence_limits_outside_rank_range_are_nan():
    reg = PassingBablokRegression().calculate([1.0, 2.0, 3.0], [1.1, 2.0, 3.2])
    assert np.isfinite(reg.slope)
    assert math.isnan(reg.slope_lcl)
    assert math.isnan(reg.slope_ucl)


def test_tolerant_diff_treats_tiny_relative_deltas_as_zero():
    assert tolerant_diff(1.0, 1.0 + 1e-15) == 0.0
    assert tolerant_diff(3.0, 1.0) == pytest.approx(2.0)
    out = tolerant_diff(np.array([1.0, 5.0]), np.array([1.0 + 1e-14, 2.0]))
    assert np.allclose(out, [0.0, 3.0])


def test_passing_bablok_rejects_bad_alpha():
    with pytest.raises(InputValidationError, match="alpha"):
        PassingBablokRegression(alpha=1.5).calculate([1, 2, 3], [1, 2, 3])


def test_negatively_correlated_exact_line():
    x = np.arange(1.0, 11.0)
    y = 10.0 - 2.0 * x
    reg = PassingBablokRegression(positive_correlated=False).calculate(x, y)
    for value in (reg.slope, reg.slope_lcl, reg.slope_ucl):
        assert value == pytest.approx(-2.0)
    assert reg.intercept == pytest.approx(10.0)

    # Shifting the other way runs the slope rank off the end of the matrix.
    assert math.isnan(PassingBablokRegression().calculate(x, y).slope)


def test_negatively_correlated_fit_mirrors_positive_fit(comparison_data):
    x, y = comparison_data
    reg = PassingBablokRegression(positive_correlated=False).calculate(x, -np.asarray(y))

    assert reg.slope == pytest.approx(-0.9987917, abs=5e-5)
    assert reg.intercept == pytest.approx(-57.2280851, abs=5e-4)
    assert reg.slope_lcl == pytest.approx(-1.027696, abs=5e-5)
    assert reg.slope_ucl == pytest.approx(-0.9710559, abs=5e-5)
    assert reg.intercept_lcl == pytest.approx(-125.435582, abs=5e-4)
    assert reg.intercept_ucl == pytest.approx(8.774619, abs=5e-4)
