import math

import numpy as np
import pandas as pd
import pytest

from labval.precision.variance import OneFactorVarianceAnalysis, TwoFactorVarianceAnalysis
from labval.regression.base import ConfidenceIntervalModel, RegressionModel
from labval.reporting import (
    add_formatted_ci_column,
    format_estimate_with_ci,
    precision_results_frame,
    regression_results_frame,
)
from labval.schema import PRECISION_COLUMNS, REGRESSION_COLUMNS


def test_regression_results_frame_rows_and_labels():
    model = ConfidenceIntervalModel(
        slope=1.01,
        intercept=-0.5,
        slope_lcl=0.98,
        slope_ucl=1.04,
        intercept_lcl=-1.2,
        intercept_ucl=0.2,
        slope_se=0.015,
        intercept_se=0.35,
    )
    df = regression_results_frame(model, "WDeming", "Jackknife CI", n=40)

    assert list(df[REGRESSION_COLUMNS.term]) == ["Slope", "Intercept"]
    assert df[REGRESSION_COLUMNS.method].unique().tolist() == ["Weighted Deming Regression"]
    assert df[REGRESSION_COLUMNS.ci].iloc[0] == "Jackknife CI"
    assert df[REGRESSION_COLUMNS.se].tolist() == [0.015, 0.35]
    assert df[REGRESSION_COLUMNS.n].iloc[1] == 40


def test_regression_results_frame_without_standard_errors():
    model = RegressionModel(slope=1.0, intercept=0.0)
    df = regression_results_frame(model, "PaBa", "Non-parametric CI")
    assert df[REGRESSION_COLUMNS.se].isna().all()
    assert REGRESSION_COLUMNS.n not in df.columns
    assert df[REGRESSION_COLUMNS.method].iloc[0] == "Passing-Bablok Regression"


def test_two_factor_precision_frame(ep05_design):
    days, runs, values = ep05_design
    res = TwoFactorVarianceAnalysis(days, runs, values).calculate()
    df = precision_results_frame(res)

    assert len(df) == 1
    assert df[PRECISION_COLUMNS.var_e].iloc[0] == pytest.approx(res.v_e)
    assert df[PRECISION_COLUMNS.sd_wl_ucl].iloc[0] == pytest.approx(res.s_wl_ucl)
    assert df[PRECISION_COLUMNS.df_a].iloc[0] == 19


def test_one_factor_precision_frame_with_claim():
    runs = [r for r in range(1, 4) for _ in range(3)]
    values = [10.1, 10.3, 9.9, 10.4, 10.6, 10.2, 9.8, 10.0, 10.1]
    res = OneFactorVarianceAnalysis(runs, values, num_levels=1).calculate()
    df = precision_results_frame(res, cv_claim=2.0)

    assert df[PRECISION_COLUMNS.uvl_e].iloc[0] == pytest.approx(2.0 * res.f_repeatability)
    assert df[PRECISION_COLUMNS.sd_wl].iloc[0] == pytest.approx(res.s_wl)
    assert df[PRECISION_COLUMNS.p].iloc[0] == 3


def test_precision_frame_rejects_other_types():
    with pytest.raises(TypeError, match="Unsupported"):
        precision_results_frame(RegressionModel(slope=1.0, intercept=0.0))


def test_format_estimate_with_ci():
    assert format_estimate_with_ci(0.99879, 0.97106, 1.02770) == "0.9988 (0.9711 to 1.0277)"
    assert format_estimate_with_ci(1.0, math.nan, 1.2, decimals=1) == "1.0 (NA to 1.2)"
    assert format_estimate_with_ci(np.nan, 0.0, 1.0) == ""


def test_add_formatted_ci_column_keeps_numeric_columns():
    df = pd.DataFrame(
        {
            REGRESSION_COLUMNS.coefficient: [1.0, 2.0],
            REGRESSION_COLUMNS.lcl: [0.5, 1.5],
            REGRESSION_COLUMNS.ucl: [1.5, 2.5],
        }
    )
    out = add_formatted_ci_column(df, decimals=1)
    assert out[f"{REGRESSION_COLUMNS.coefficient} (reported)"].tolist() == [
        "1.0 (0.5 to 1.5)",
        "2.0 (1.5 to 2.5)",
    ]
    assert out[REGRESSION_COLUMNS.coefficient].tolist() == [1.0, 2.0]
    assert f"{REGRESSION_COLUMNS.coefficient} (reported)" not in df.columns


def test_add_formatted_ci_column_requires_columns():
    with pytest.raises(KeyError, match="Missing column"):
        add_formatted_ci_column(pd.DataFrame({REGRESSION_COLUMNS.coefficient: [1.0]}))


def test_between_group_and_total_labels_stay_distinct(ep05_design):
    runs = [r for r in range(1, 4) for _ in range(3)]
    values = [10.1, 10.3, 9.9, 10.4, 10.6, 10.2, 9.8, 10.0, 10.1]
    one = OneFactorVarianceAnalysis(runs, values, num_levels=1).calculate()
    one_df = precision_results_frame(one)
    assert one_df[PRECISION_COLUMNS.ss_between].iloc[0] == pytest.approx(one.anova.ss_between)
    assert one_df[PRECISION_COLUMNS.df_between].iloc[0] == 2
    assert PRECISION_COLUMNS.sst not in one_df.columns
    assert PRECISION_COLUMNS.df_treatment not in one_df.columns

    days, day_runs, day_values = ep05_design
    two = TwoFactorVarianceAnalysis(days, day_runs, day_values).calculate()
    two_df = precision_results_frame(two)
    assert two_df[PRECISION_COLUMNS.sst].iloc[0] == pytest.approx(two.anova.sst)
    assert two_df[PRECISION_COLUMNS.df_treatment].iloc[0] == 79
    assert PRECISION_COLUMNS.ss_between not in two_df.columns
