"""End-to-end tests for the command line and CSV export."""

import pandas as pd
import pytest

from conftest import COMPARISON_X, COMPARISON_Y, EP05_A1_VALUES, PRECISION_DAYS, PRECISION_RUNS
from labval.cli import main
from labval.output import save_results_to_csv
from labval.regression.base import RegressionModel
from labval.reporting import regression_results_frame
from labval.schema import PRECISION_COLUMNS, REGRESSION_COLUMNS


@pytest.fixture
def comparison_csv(tmp_path):
    path = tmp_path / "comparison.csv"
    pd.DataFrame({"Reference": COMPARISON_X, "Test": COMPARISON_Y}).to_csv(path, index=False)
    return path


@pytest.fixture
def ep05_csv(tmp_path):
    path = tmp_path / "ep05.csv"
    pd.DataFrame(
        {"Day": PRECISION_DAYS, "Run": PRECISION_RUNS, "Value": EP05_A1_VALUES}
    ).to_csv(path, index=False)
    return path


def test_save_results_to_csv_creates_directory(tmp_path):
    df = regression_results_frame(
        RegressionModel(slope=1.0, intercept=0.5, slope_lcl=0.9, slope_ucl=1.1),
        "Deming",
        "Jackknife CI",
    )
    path = save_results_to_csv(df, str(tmp_path / "nested" / "out.csv"))
    written = pd.read_csv(path)
    assert written[REGRESSION_COLUMNS.term].tolist() == ["Slope", "Intercept"]
    assert written[f"{REGRESSION_COLUMNS.coefficient} (reported)"].iloc[0] == "1.0000 (0.9000 to 1.1000)"


def test_regression_command_writes_results(comparison_csv, tmp_path):
    out = tmp_path / "results" / "paba.csv"
    code = main(
        [
            "regression",
            "--input",
            str(comparison_csv),
            "--x-col",
            "Reference",
            "--y-col",
            "Test",
            "--method",
            "PaBa",
            "--output",
            str(out),
        ]
    )
    assert code == 0
    df = pd.read_csv(out)
    slope = df.loc[df[REGRESSION_COLUMNS.term] == "Slope", REGRESSION_COLUMNS.coefficient].iloc[0]
    assert slope == pytest.approx(0.9987917, abs=5e-5)
    assert df[REGRESSION_COLUMNS.ci].iloc[0] == "Non-parametric CI"
    assert df[REGRESSION_COLUMNS.n].iloc[0] == 40


def test_precision_command_prints_results(ep05_csv, capsys):
    code = main(
        [
            "precision",
            "--input",
            str(ep05_csv),
            "--value-col",
            "Value",
            "--day-col",
            "Day",
            "--run-col",
            "Run",
        ]
    )
    assert code == 0
    printed = capsys.readouterr().out
    assert PRECISION_COLUMNS.sd_wl_ucl in printed.splitlines()[0]


def test_unbalanced_design_returns_error_code(tmp_path, caplog):
    path = tmp_path / "bad.csv"
    pd.DataFrame(
        {"Day": PRECISION_DAYS[:-1], "Run": PRECISION_RUNS[:-1], "Value": EP05_A1_VALUES[:-1]}
    ).to_csv(path, index=False)
    code = main(
        [
            "precision",
            "--input",
            str(path),
            "--value-col",
            "Value",
            "--day-col",
            "Day",
            "--run-col",
            "Run",
        ]
    )
    assert code == 1
    assert "balanced" in caplog.text


def test_unknown_method_is_rejected_by_parser(comparison_csv):
    with pytest.raises(SystemExit):
        main(["regression", "--input", str(comparison_csv), "--x-col", "A", "--y-col", "B", "--method", "OLS"])


def test_constant_precision_values_return_error_code(tmp_path, caplog):
    path = tmp_path / "flat.csv"
    pd.DataFrame({"Run": [r for r in range(1, 6) for _ in range(5)], "Value": [5.0] * 25}).to_csv(
        path, index=False
    )
    code = main(["precision", "--input", str(path), "--value-col", "Value", "--day-col", "Run"])
    assert code == 1
    assert "degrees of freedom" in caplog.text
