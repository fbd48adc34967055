"""Build labelled result tables for method-comparison and precision studies.

This module is used after numerical analysis to present estimator outputs
as pandas DataFrames with consistent column labels, ready for export.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from .config import REG_METHOD_DEMING, REG_METHOD_PABA, REG_METHOD_WDEMING
from .precision.variance import OneFactorVariance, TwoFactorVariance
from .regression.base import ConfidenceIntervalModel, RegressionModel
from .schema import PRECISION_COLUMNS, REGRESSION_COLUMNS

REGRESSION_METHOD_LABELS: Dict[str, str] = {
    REG_METHOD_DEMING: "Deming Regression",
    REG_METHOD_WDEMING: "Weighted Deming Regression",
    REG_METHOD_PABA: "Passing-Bablok Regression",
}

_ONE_FACTOR_FIELDS = [
    ("mean", PRECISION_COLUMNS.mean),
    ("ss_total", PRECISION_COLUMNS.ss_total),
    ("ss_between", PRECISION_COLUMNS.ss_between),
    ("ss_error", PRECISION_COLUMNS.sse),
    ("df_total", PRECISION_COLUMNS.df_total),
    ("df_error", PRECISION_COLUMNS.df_error),
    ("df_between", PRECISION_COLUMNS.df_between),
    ("ms_between", PRECISION_COLUMNS.ms_between),
    ("ms_error", PRECISION_COLUMNS.mse),
    ("f", PRECISION_COLUMNS.f),
    ("n", PRECISION_COLUMNS.n),
    ("p", PRECISION_COLUMNS.p),
    ("v_e", PRECISION_COLUMNS.var_e),
    ("v_b", PRECISION_COLUMNS.var_b),
    ("s_e", PRECISION_COLUMNS.sd_e),
    ("cv_e", PRECISION_COLUMNS.cv_e),
    ("s_b", PRECISION_COLUMNS.sd_b),
    ("cv_b", PRECISION_COLUMNS.cv_b),
    ("s_wl", PRECISION_COLUMNS.sd_wl),
    ("cv_wl", PRECISION_COLUMNS.cv_wl),
    ("df_wl", PRECISION_COLUMNS.df_wl),
    ("chisq_repeatability", PRECISION_COLUMNS.chisq_e),
    ("chisq_wl", PRECISION_COLUMNS.chisq_wl),
    ("f_repeatability", PRECISION_COLUMNS.f_error),
    ("f_wl", PRECISION_COLUMNS.f_wl),
]

_TWO_FACTOR_FIELDS = [
    ("mean", PRECISION_COLUMNS.mean),
    ("sst", PRECISION_COLUMNS.sst),
    ("ssa", PRECISION_COLUMNS.ssa),
    ("ssb", PRECISION_COLUMNS.ssb),
    ("sse", PRECISION_COLUMNS.sse),
    ("df_t", PRECISION_COLUMNS.df_treatment),
    ("df_a", PRECISION_COLUMNS.df_a),
    ("df_b", PRECISION_COLUMNS.df_b),
    ("df_e", PRECISION_COLUMNS.df_e),
    ("msa", PRECISION_COLUMNS.msa),
    ("msb", PRECISION_COLUMNS.msb),
    ("mse", PRECISION_COLUMNS.mse),
    ("f_a", PRECISION_COLUMNS.f_a),
    ("f_b", PRECISION_COLUMNS.f_b),
    ("n", PRECISION_COLUMNS.n),
    ("n_a", PRECISION_COLUMNS.num_a),
    ("n_b", PRECISION_COLUMNS.num_b),
    ("n_e", PRECISION_COLUMNS.num_e),
    ("v_t", PRECISION_COLUMNS.var_t),
    ("v_a", PRECISION_COLUMNS.var_a),
    ("v_b", PRECISION_COLUMNS.var_b),
    ("v_e", PRECISION_COLUMNS.var_e),
    ("s_wl", PRECISION_COLUMNS.sd_wl),
    ("s_a", PRECISION_COLUMNS.sd_a),
    ("s_b", PRECISION_COLUMNS.sd_b),
    ("s_e", PRECISION_COLUMNS.sd_e),
    ("cv_wl", PRECISION_COLUMNS.cv_wl),
    ("cv_a", PRECISION_COLUMNS.cv_a),
    ("cv_b", PRECISION_COLUMNS.cv_b),
    ("cv_e", PRECISION_COLUMNS.cv_e),
    ("df_wl", PRECISION_COLUMNS.df_wl),
    ("s_wl_lcl", PRECISION_COLUMNS.sd_wl_lcl),
    ("s_wl_ucl", PRECISION_COLUMNS.sd_wl_ucl),
    ("s_e_lcl", PRECISION_COLUMNS.sd_e_lcl),
    ("s_e_ucl", PRECISION_COLUMNS.sd_e_ucl),
    ("cv_wl_lcl", PRECISION_COLUMNS.cv_wl_lcl),
    ("cv_wl_ucl", PRECISION_COLUMNS.cv_wl_ucl),
    ("cv_e_lcl", PRECISION_COLUMNS.cv_e_lcl),
    ("cv_e_ucl", PRECISION_COLUMNS.cv_e_ucl),
]


def _safe_float(value, default: float = np.nan) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    return out if np.isfinite(out) else default


def regression_results_frame(
    model: RegressionModel,
    method: str,
    ci_label: str,
    n: Optional[int] = None,
) -> pd.DataFrame:
    """Tabulate a fitted regression as Slope and Intercept rows.

    Args:
        model (RegressionModel): Fitted coefficients; a
            ``ConfidenceIntervalModel`` also supplies standard errors.
        method (str): Method name as accepted by ``MethodCompRegression``
            (``"Deming"``, ``"WDeming"``, ``"PaBa"``) or a free-text label.
        ci_label (str): Interval label, e.g. ``"Jackknife CI"``.
        n (int, optional): Number of sample pairs, recorded when given.

    Returns:
        pandas.DataFrame: Two rows with term, coefficient, limits and SE
        columns plus the method and interval labels.
    """
    cols = REGRESSION_COLUMNS
    if isinstance(model, ConfidenceIntervalModel):
        slope_se, intercept_se = model.slope_se, model.intercept_se
    else:
        slope_se = intercept_se = np.nan

    rows = [
        {
            cols.term: "Slope",
            cols.coefficient: model.slope,
            cols.lcl: model.slope_lcl,
            cols.ucl: model.slope_ucl,
            cols.se: slope_se,
        },
        {
            cols.term: "Intercept",
            cols.coefficient: model.intercept,
            cols.lcl: model.intercept_lcl,
            cols.ucl: model.intercept_ucl,
            cols.se: intercept_se,
        },
    ]
    df = pd.DataFrame(rows)
    df[cols.method] = REGRESSION_METHOD_LABELS.get(method, method)
    df[cols.ci] = ci_label
    if n is not None:
        df[cols.n] = int(n)
    return df


def precision_results_frame(
    result: OneFactorVariance | TwoFactorVariance,
    cv_claim: Optional[float] = None,
) -> pd.DataFrame:
    """Tabulate a variance-component result as a single labelled row.

    Args:
        result (OneFactorVariance | TwoFactorVariance): Output of a variance
            analysis ``calculate`` call.
        cv_claim (float, optional): Claimed CV; for one-factor results adds
            upper verification limit columns ``cv_claim * f``.

    Returns:
        pandas.DataFrame: One row with the columns in
        ``labval.schema.PrecisionColumns`` that apply to the design.

    Raises:
        TypeError: If ``result`` is not a variance-analysis result.
    """
    if isinstance(result, OneFactorVariance):
        fields = _ONE_FACTOR_FIELDS
    elif isinstance(result, TwoFactorVariance):
        fields = _TWO_FACTOR_FIELDS
    else:
        raise TypeError(f"Unsupported precision result type: {type(result).__name__}")

    flat = result.as_dict()
    row = {label: flat[name] for name, label in fields}
    if cv_claim is not None and isinstance(result, OneFactorVariance):
        row[PRECISION_COLUMNS.uvl_e] = cv_claim * result.f_repeatability
        row[PRECISION_COLUMNS.uvl_wl] = cv_claim * result.f_wl
    return pd.DataFrame([row])


def format_estimate_with_ci(value: float, lcl: float, ucl: float, decimals: int = 4) -> str:
    """Format an estimate as ``"value (lcl to ucl)"``.

    Missing or non-finite limits are shown as ``NA``; a non-finite estimate
    gives an empty string.
    """
    v = _safe_float(value)
    if not np.isfinite(v):
        return ""

    def _fmt(x: float) -> str:
        x = _safe_float(x)
        return f"{x:.{decimals}f}" if np.isfinite(x) else "NA"

    return f"{v:.{decimals}f} ({_fmt(lcl)} to {_fmt(ucl)})"


def add_formatted_ci_column(
    df: pd.DataFrame,
    interval_columns: Iterable[tuple[str, str, str]] = (
        (REGRESSION_COLUMNS.coefficient, REGRESSION_COLUMNS.lcl, REGRESSION_COLUMNS.ucl),
    ),
    suffix: str = " (reported)",
    decimals: int = 4,
) -> pd.DataFrame:
    """Add reporting-ready ``"value (lcl to ucl)"`` string columns.

    Args:
        df (pandas.DataFrame): Input numeric table.
        interval_columns (Iterable[tuple[str, str, str]]): Sequence of
            ``(value_column, lcl_column, ucl_column)`` triples.
        suffix (str, optional): Suffix appended to the value column name for
            the generated column. Defaults to ``" (reported)"``.
        decimals (int, optional): Decimal places. Defaults to ``4``.

    Returns:
        pandas.DataFrame: Copy of ``df`` with the formatted columns added;
        numeric columns are preserved.

    Raises:
        KeyError: If any named column is missing.
    """
    out = df.copy()
    for value_col, lcl_col, ucl_col in interval_columns:
        for col in (value_col, lcl_col, ucl_col):
            if col not in out.columns:
                raise KeyError(f"Missing column '{col}' for interval formatting.")
        out[f"{value_col}{suffix}"] = [
            format_estimate_with_ci(v, lo, hi, decimals)
            for v, lo, hi in zip(out[value_col], out[lcl_col], out[ucl_col])
        ]
    return out
