"""Command-line entry point for method-comparison and precision analyses."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

import pandas as pd

from .config import (
    CI_METHODS,
    CI_METHOD_DEFAULT,
    DEFAULT_ALPHA,
    DEFAULT_BOOTSTRAP_N,
    DEFAULT_ERROR_RATIO,
    DEFAULT_ITER_MAX,
    DEFAULT_THRESHOLD,
    LOG_FORMAT,
    REG_METHODS,
    REG_METHOD_DEMING,
    AnalysisConfig,
)
from .data_processing import (
    estimate_error_ratio,
    extract_method_data,
    extract_precision_design,
    load_table,
)
from .exceptions import LabvalError
from .output import save_results_to_csv
from .precision.variance import OneFactorVarianceAnalysis, TwoFactorVarianceAnalysis
from .regression.method_comparison import MethodCompRegression
from .reporting import precision_results_frame, regression_results_frame

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", required=True, help="Path to input CSV file.")
    parser.add_argument(
        "--output",
        default=None,
        help="Path of the results CSV. Printed to stdout when omitted.",
    )
    parser.add_argument(
        "--alpha",
        type=float,
        default=DEFAULT_ALPHA,
        help="Two-sided significance level for confidence limits.",
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for module execution."""
    parser = argparse.ArgumentParser(
        prog="labval",
        description="Method-comparison regression and precision (variance component) analysis.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")
    sub = parser.add_subparsers(dest="command", required=True)

    reg = sub.add_parser("regression", help="Compare two measurement methods.")
    _add_common_arguments(reg)
    reg.add_argument(
        "--x-col",
        nargs="+",
        required=True,
        help="Reference method column, or two replicate columns.",
    )
    reg.add_argument(
        "--y-col",
        nargs="+",
        required=True,
        help="Test method column, or two replicate columns.",
    )
    reg.add_argument("--method", choices=REG_METHODS, default=REG_METHOD_DEMING)
    reg.add_argument("--ci-method", choices=CI_METHODS, default=CI_METHOD_DEFAULT)
    reg.add_argument(
        "--error-ratio",
        type=float,
        default=DEFAULT_ERROR_RATIO,
        help="Error-variance ratio for the Deming family.",
    )
    reg.add_argument(
        "--estimate-error-ratio",
        action="store_true",
        help="Estimate the error ratio from duplicate columns.",
    )
    reg.add_argument("--max-iter", type=int, default=DEFAULT_ITER_MAX)
    reg.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD)
    reg.add_argument("--bootstrap-n", type=int, default=DEFAULT_BOOTSTRAP_N)
    reg.add_argument("--seed", type=int, default=None, help="Bootstrap random seed.")

    prec = sub.add_parser("precision", help="Estimate precision from a day/run design.")
    _add_common_arguments(prec)
    prec.add_argument("--value-col", required=True)
    prec.add_argument("--day-col", required=True)
    prec.add_argument(
        "--run-col",
        default=None,
        help="Run column nested in day. Omit for a one-factor design.",
    )
    prec.add_argument(
        "--num-levels",
        type=int,
        default=1,
        help="Concentration levels tested (one-factor verification only).",
    )
    prec.add_argument(
        "--cv-claim",
        type=float,
        default=None,
        help="Claimed CV used for upper verification limits (one-factor only).",
    )
    return parser


def run_regression(args: argparse.Namespace, config: AnalysisConfig) -> pd.DataFrame:
    df = load_table(args.input)
    x_data, y_data = extract_method_data(df, args.x_col, args.y_col)
    error_ratio = config.error_ratio
    if args.estimate_error_ratio:
        error_ratio = estimate_error_ratio(x_data, y_data, args.method)

    regression = MethodCompRegression(
        args.method,
        error_ratio=error_ratio,
        max_iter=config.max_iter,
        threshold=config.threshold,
        alpha=config.alpha,
        ci_method=args.ci_method,
        bootstrap_n=config.bootstrap_n,
        rng=config.seed,
    )
    model = regression.calculate(x_data.means, y_data.means)
    return regression_results_frame(model, args.method, regression.ci_label, n=x_data.size)


def run_precision(args: argparse.Namespace, config: AnalysisConfig) -> pd.DataFrame:
    df = load_table(args.input)
    days, runs, values = extract_precision_design(df, args.value_col, args.day_col, args.run_col)
    if runs is None:
        result = OneFactorVarianceAnalysis(days, values, config.num_levels, config.alpha).calculate()
        return precision_results_frame(result, cv_claim=args.cv_claim)
    result = TwoFactorVarianceAnalysis(days, runs, values, config.alpha).calculate()
    return precision_results_frame(result)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns a process exit code."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    config = AnalysisConfig(
        alpha=args.alpha,
        error_ratio=getattr(args, "error_ratio", DEFAULT_ERROR_RATIO),
        max_iter=getattr(args, "max_iter", DEFAULT_ITER_MAX),
        threshold=getattr(args, "threshold", DEFAULT_THRESHOLD),
        bootstrap_n=getattr(args, "bootstrap_n", DEFAULT_BOOTSTRAP_N),
        seed=getattr(args, "seed", None),
        num_levels=getattr(args, "num_levels", 1),
    )

    start_time = time.time()
    logger.info("Running %s analysis on %s", args.command, args.input)
    try:
        if args.command == "regression":
            results_df = run_regression(args, config)
        else:
            results_df = run_precision(args, config)
    except (LabvalError, KeyError, OSError) as exc:
        logger.error("Analysis failed: %s", exc)
        return 1

    if args.output:
        path = save_results_to_csv(results_df, os.path.abspath(args.output))
        logger.info("Results written to %s", path)
    else:
        results_df.to_csv(sys.stdout, index=False)

    logger.info("Total execution time: %.2f seconds", time.time() - start_time)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
