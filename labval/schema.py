"""Define standardized column names for result DataFrames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RegressionColumns:
    """Column labels for method-comparison result tables.

    Attributes:
        term: Row label column, ``"Slope"`` or ``"Intercept"``.
        coefficient: Point estimate of the term.
        lcl, ucl: Lower and upper confidence limits at ``1 - alpha``.
        se: Standard error; empty for Passing-Bablok and bootstrap intervals.
        method: Regression method name, e.g. ``"Weighted Deming Regression"``.
        ci: Interval label, e.g. ``"Jackknife CI"``.
        n: Number of sample pairs used.
    """

    term: str = "Term"
    coefficient: str = "Coefficients"
    lcl: str = "LCL"
    ucl: str = "UCL"
    se: str = "SE"
    method: str = "Method"
    ci: str = "CI Type"
    n: str = "N"


@dataclass(frozen=True)
class PrecisionColumns:
    """Column labels for precision-study result tables.

    ``A`` is the between-day factor, ``B`` the between-run factor nested in
    it, ``E`` repeatability (within-run error) and ``WL`` within-laboratory
    imprecision.
    """

    mean: str = "Mean"
    ss_total: str = "SS Total"
    ss_between: str = "SS Between"
    sst: str = "SST"
    ssa: str = "SSA"
    ssb: str = "SSB"
    sse: str = "SSE"
    df_total: str = "DF Total"
    df_error: str = "DF Error"
    df_between: str = "DF Between"
    df_treatment: str = "DF T"
    df_a: str = "DF A"
    df_b: str = "DF B"
    df_e: str = "DF E"
    ms_between: str = "MS Between"
    msa: str = "MSA"
    msb: str = "MSB"
    mse: str = "MSE"
    f: str = "F"
    f_a: str = "F A"
    f_b: str = "F B"
    n: str = "N"
    p: str = "P"
    num_a: str = "Num A"
    num_b: str = "Num B"
    num_e: str = "Num E"
    var_t: str = "Var T"
    var_a: str = "Var A"
    var_b: str = "Var B"
    var_e: str = "Var E"
    sd_wl: str = "SD WL"
    sd_a: str = "SD A"
    sd_b: str = "SD B"
    sd_e: str = "SD E"
    cv_wl: str = "CV WL"
    cv_a: str = "CV A"
    cv_b: str = "CV B"
    cv_e: str = "CV E"
    df_wl: str = "DF WL"
    sd_wl_lcl: str = "SD WL LCL"
    sd_wl_ucl: str = "SD WL UCL"
    sd_e_lcl: str = "SD E LCL"
    sd_e_ucl: str = "SD E UCL"
    cv_wl_lcl: str = "CV WL LCL"
    cv_wl_ucl: str = "CV WL UCL"
    cv_e_lcl: str = "CV E LCL"
    cv_e_ucl: str = "CV E UCL"
    chisq_e: str = "ChiSq E"
    chisq_wl: str = "ChiSq WL"
    f_error: str = "F Error"
    f_wl: str = "F WL"
    uvl_e: str = "UVL E"
    uvl_wl: str = "UVL WL"


REGRESSION_COLUMNS = RegressionColumns()
PRECISION_COLUMNS = PrecisionColumns()
