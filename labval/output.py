"""Write analysis result tables to reproducible CSV files.

This module is the output boundary between in-memory results and tabular
artifacts on disk.
"""

from __future__ import annotations

import logging
import os

import pandas as pd

from .reporting import add_formatted_ci_column
from .schema import REGRESSION_COLUMNS

logger = logging.getLogger(__name__)


def save_results_to_csv(df: pd.DataFrame, path: str) -> str:
    """Save a result table to ``path``, creating parent directories.

    Regression tables (those carrying coefficient and limit columns) also get
    a ``"value (lcl to ucl)"`` reporting column; numeric columns are written
    unchanged.

    Args:
        df (pandas.DataFrame): Output of ``regression_results_frame`` or
            ``precision_results_frame``.
        path (str): Destination CSV path.

    Returns:
        str: The path written.
    """
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    cols = REGRESSION_COLUMNS
    if {cols.coefficient, cols.lcl, cols.ucl}.issubset(df.columns):
        df = add_formatted_ci_column(df)

    df.to_csv(path, index=False)
    logger.info("Saved %d result rows to %s", len(df), path)
    return path
