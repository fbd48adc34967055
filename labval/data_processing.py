"""Load study data from CSV and extract the arrays the estimators consume.

The engine itself performs no data cleansing; coercion of text cells and
removal of incomplete rows happen here, before any estimator is called.
"""

# Method-comparison tables hold one column per method, or two replicate
# columns per method. Replicates are averaged before regression and their
# within-pair spread is used to estimate the error-variance ratio.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import REG_METHOD_WDEMING
from .exceptions import InputValidationError

logger = logging.getLogger(__name__)

ColumnSpec = Union[str, Sequence[str]]


@dataclass(frozen=True)
class ReplicateSummary:
    """Per-sample means for one method plus the replicate imprecision.

    Attributes:
        means: Mean of the replicates for each sample (the value itself for
            single measurements).
        sd: Pooled within-sample SD of duplicate measurements, ``NaN`` when
            only one column was given.
        cv: ``sd`` divided by the grand mean.
        mean: Grand mean of ``means``.
    """

    means: np.ndarray
    sd: float
    cv: float
    mean: float

    @property
    def size(self) -> int:
        return int(self.means.size)


def load_table(path: str) -> pd.DataFrame:
    """Load a study table from a CSV file.

    Args:
        path (str): Path to the CSV file.

    Returns:
        pd.DataFrame: Loaded DataFrame.
    """
    return pd.read_csv(path)


def _as_column_list(spec: ColumnSpec) -> List[str]:
    cols = [spec] if isinstance(spec, str) else list(spec)
    if not 1 <= len(cols) <= 2:
        raise InputValidationError(
            f"Expected one column or two replicate columns per method, got {len(cols)}."
        )
    return cols


def _numeric_frame(df: pd.DataFrame, cols: Sequence[str]) -> pd.DataFrame:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"Missing column(s) {missing} in input table.")
    return df[list(cols)].apply(pd.to_numeric, errors="coerce")


def summarize_replicates(values: pd.DataFrame) -> ReplicateSummary:
    """Average one or two replicate columns row by row.

    With duplicates the pooled SD is ``sqrt(Σ d_i / n)`` where ``d_i`` is
    the sum of squared deviations of the pair about its mean.
    """
    arr = values.to_numpy(dtype=float)
    means = arr.mean(axis=1)
    grand_mean = float(np.mean(means)) if means.size else math.nan
    if arr.shape[1] == 2 and means.size:
        devsq = np.sum((arr - means[:, None]) ** 2, axis=1)
        sd = math.sqrt(float(np.sum(devsq)) / means.size)
        cv = sd / grand_mean if grand_mean != 0 else math.nan
    else:
        sd = cv = math.nan
    return ReplicateSummary(means=means, sd=sd, cv=cv, mean=grand_mean)


def extract_method_data(
    df: pd.DataFrame, x_col: ColumnSpec, y_col: ColumnSpec
) -> Tuple[ReplicateSummary, ReplicateSummary]:
    """Extract reference (x) and test (y) method data from a table.

    Each method is given as a single column name or a pair of replicate
    column names. Cells are coerced to numbers; a row is kept only if every
    selected cell is numeric, so x and y stay paired.

    Raises:
        KeyError: If a named column is missing.
        InputValidationError: If more than two columns are given for a
            method or no complete rows remain.
    """
    x_cols = _as_column_list(x_col)
    y_cols = _as_column_list(y_col)
    numeric = _numeric_frame(df, x_cols + y_cols)

    complete = numeric.notna().all(axis=1)
    n_dropped = int((~complete).sum())
    if n_dropped:
        logger.warning("Dropped %d of %d rows with non-numeric values", n_dropped, len(df))
    numeric = numeric[complete]
    if numeric.empty:
        raise InputValidationError("No rows with numeric values for both methods.")

    return summarize_replicates(numeric[x_cols]), summarize_replicates(numeric[y_cols])


def extract_pairs(
    df: pd.DataFrame, x_col: ColumnSpec, y_col: ColumnSpec
) -> Tuple[np.ndarray, np.ndarray]:
    """Return paired ``(x, y)`` arrays, averaging replicate columns."""
    x_data, y_data = extract_method_data(df, x_col, y_col)
    return x_data.means, y_data.means


def estimate_error_ratio(
    x_data: ReplicateSummary, y_data: ReplicateSummary, method: str
) -> float:
    """Estimate the error-variance ratio from duplicate measurements.

    Uses ``cv_y / cv_x`` for Weighted Deming (constant CV error) and
    ``sd_y / sd_x`` otherwise.

    Raises:
        InputValidationError: If either method lacks duplicates or its
            imprecision is zero.
    """
    if method == REG_METHOD_WDEMING:
        num, den, label = y_data.cv, x_data.cv, "Coefficient of variation"
    else:
        num, den, label = y_data.sd, x_data.sd, "Standard deviation"
    if not (np.isfinite(num) and np.isfinite(den)):
        raise InputValidationError(
            "Estimating the error ratio needs duplicate columns for both methods."
        )
    if num == 0 or den == 0:
        raise InputValidationError(f"{label} cannot be zero")
    ratio = float(num / den)
    logger.info("Estimated error ratio %.4f from duplicates", ratio)
    return ratio


def extract_precision_design(
    df: pd.DataFrame,
    value_col: str,
    day_col: str,
    run_col: str | None = None,
) -> Tuple[list, list | None, np.ndarray]:
    """Extract day, run and value columns for a precision study.

    Rows whose value is not numeric, or whose day or run label is missing,
    are dropped and counted in the log. ``run_col`` may be omitted for a
    one-factor design, in which case ``None`` is returned for the runs.

    Returns:
        tuple: ``(days, runs, values)`` with labels kept as given.

    Raises:
        KeyError: If a named column is missing.
        InputValidationError: If no usable rows remain.
    """
    label_cols = [day_col] + ([run_col] if run_col is not None else [])
    missing = [c for c in label_cols + [value_col] if c not in df.columns]
    if missing:
        raise KeyError(f"Missing column(s) {missing} in input table.")

    values = pd.to_numeric(df[value_col], errors="coerce")
    keep = values.notna() & df[label_cols].notna().all(axis=1)
    n_dropped = int((~keep).sum())
    if n_dropped:
        logger.warning("Dropped %d of %d rows with missing labels or values", n_dropped, len(df))
    if not keep.any():
        raise InputValidationError(f"No numeric values found in column '{value_col}'.")

    days = df.loc[keep, day_col].tolist()
    runs = df.loc[keep, run_col].tolist() if run_col is not None else None
    return days, runs, values[keep].to_numpy(dtype=float)
