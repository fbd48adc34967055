import math

import numpy as np
import pytest
from scipy.stats import chi2

from labval.exceptions import InputValidationError, NumericDomainError, UnbalancedDesignError
from labval.precision.variance import (
    OneFactorVarianceAnalysis,
    TwoFactorVarianceAnalysis,
    lower_confidence_limit,
    upper_confidence_limit,
)

RUNS = [r for r in range(1, 6) for _ in range(5)]
RUN_VALUES = [
    140, 141, 139, 140, 142,
    138, 140, 139, 141, 140,
    142, 143, 141, 142, 144,
    139, 138, 140, 139, 138,
    141, 140, 142, 141, 140,
]


def test_two_factor_components_match_reference(precision_design):
    days, runs, values = precision_design
    res = TwoFactorVarianceAnalysis(days, runs, values, 0.05).calculate()

    assert res.v_t == pytest.approx(14.2689, abs=5e-5)
    assert res.v_a == pytest.approx(0.0, abs=5e-5)
    assert res.v_b == pytest.approx(4.2539, abs=5e-5)
    assert res.v_e == pytest.approx(10.0150, abs=5e-5)
    assert (res.anova.df_a, res.anova.df_b, res.anova.df_e) == (19, 20, 40)


def test_ep05_table_a1(ep05_design):
    days, runs, values = ep05_design
    res = TwoFactorVarianceAnalysis(days, runs, values, 0.05).calculate()

    assert res.v_t == pytest.approx(12.934, abs=5e-4)
    assert res.v_a == pytest.approx(1.959, abs=5e-4)
    assert res.v_b == pytest.approx(3.075, abs=5e-4)
    assert res.v_e == pytest.approx(7.90, abs=5e-3)
    assert round(res.df_wl, 1) == pytest.approx(64.8)


def test_two_factor_sd_cv_and_limits_are_consistent(ep05_design):
    days, runs, values = ep05_design
    res = TwoFactorVarianceAnalysis(days, runs, values).calculate()

    assert res.s_wl == pytest.approx(math.sqrt(res.v_t))
    assert res.cv_e == pytest.approx(res.s_e / res.anova.mean)
    assert res.s_wl_lcl < res.s_wl < res.s_wl_ucl
    assert res.s_e_lcl < res.s_e < res.s_e_ucl
    assert res.cv_wl_ucl == pytest.approx(res.s_wl_ucl / res.anova.mean)
    assert res.s_e_ucl == pytest.approx(
        res.s_e * math.sqrt(res.anova.df_e / chi2.ppf(0.025, res.anova.df_e))
    )


def test_two_factor_rejects_unbalanced_design(unbalanced_design):
    days, runs, values = unbalanced_design
    with pytest.raises(UnbalancedDesignError):
        TwoFactorVarianceAnalysis(days, runs, values).calculate()


def test_components_are_non_negative_when_ms_effect_is_small(precision_design):
    days, runs, values = precision_design
    res = TwoFactorVarianceAnalysis(days, runs, values).calculate()
    # Between-day mean square is below the between-run mean square here.
    assert res.anova.msa < res.anova.msb
    assert res.v_a == 0.0
    assert min(res.v_a, res.v_b, res.v_e) >= 0.0


def test_chi_square_limits_bracket_the_sd():
    assert lower_confidence_limit(2.0, 10) < 2.0 < upper_confidence_limit(2.0, 10)


def test_one_factor_components():
    res = OneFactorVarianceAnalysis(RUNS, RUN_VALUES, num_levels=1).calculate()
    anova = res.anova

    n0 = (25 - 125 / 25) / 4
    assert n0 == 5
    assert res.v_e == pytest.approx(anova.ms_error)
    assert res.v_b == pytest.approx(max(0.0, (anova.ms_between - anova.ms_error) / n0))
    assert res.s_wl == pytest.approx(math.sqrt(res.v_e + res.v_b))
    assert res.cv_wl == pytest.approx(res.s_wl / anova.mean)

    a1 = 1 / n0
    a2 = 1 - a1
    df_wl = (a1 * anova.ms_between + a2 * anova.ms_error) ** 2 / (
        (a1 * anova.ms_between) ** 2 / 4 + (a2 * anova.ms_error) ** 2 / 20
    )
    assert res.df_wl == pytest.approx(df_wl)
    assert res.f_repeatability == pytest.approx(math.sqrt(chi2.ppf(0.95, 20) / 20))
    assert res.f_wl == pytest.approx(math.sqrt(chi2.ppf(0.95, df_wl) / df_wl))


def test_upper_verification_limits_scale_the_claim():
    analysis = OneFactorVarianceAnalysis(RUNS, RUN_VALUES, num_levels=2, alpha=0.05)
    uvl_e = analysis.uvl_repeatability(1.5)
    uvl_wl = analysis.uvl_within_lab(2.0)

    assert uvl_e == pytest.approx(1.5 * math.sqrt(chi2.ppf(0.975, 20) / 20))
    assert uvl_wl == pytest.approx(2.0 * analysis.calculate().f_wl)
    assert uvl_e > 1.5


def test_one_factor_is_repeatable():
    analysis = OneFactorVarianceAnalysis(RUNS, RUN_VALUES, num_levels=1)
    assert analysis.calculate() == analysis.calculate()


def test_bad_alpha_is_rejected(precision_design):
    days, runs, values = precision_design
    with pytest.raises(InputValidationError, match="alpha"):
        TwoFactorVarianceAnalysis(days, runs, values, alpha=0).calculate()
    assert np.isfinite(TwoFactorVarianceAnalysis(days, runs, values, alpha=0.1).calculate().df_wl)


def test_one_factor_identical_values_have_no_within_lab_df():
    with pytest.raises(NumericDomainError, match="degrees of freedom"):
        OneFactorVarianceAnalysis(RUNS, [5.0] * len(RUNS), num_levels=1).calculate()


def test_two_factor_identical_values_have_no_within_lab_df(precision_design):
    days, runs, values = precision_design
    with pytest.raises(NumericDomainError, match="degrees of freedom"):
        TwoFactorVarianceAnalysis(days, runs, [5.0] * len(values)).calculate()


@pytest.mark.parametrize("num_levels", [0, -1, 1.5, True])
def test_num_levels_must_be_positive_integer(num_levels):
    with pytest.raises(InputValidationError, match="Number of levels"):
        OneFactorVarianceAnalysis(RUNS, RUN_VALUES, num_levels=num_levels)
