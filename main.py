#!/usr/bin/env python3
"""
Main script for running method-validation analyses.
"""

# Pipeline overview:
# 1) Load a CSV study table and coerce the selected columns to numbers,
#    dropping incomplete rows.
# 2) regression: average replicate columns, optionally estimate the error
#    ratio from duplicates, fit Deming, Weighted Deming or Passing-Bablok and
#    attach a jackknife, bootstrap or rank-based confidence interval.
# 3) precision: run a one-factor or nested day/run ANOVA and derive variance
#    components, within-laboratory SD/CV and their confidence limits.
# 4) Export the labelled results table to CSV or print it.
#
# Example:
#   python main.py precision --input ep05.csv --value-col Value \
#       --day-col Day --run-col Run --output output/precision.csv

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from labval.cli import main

if __name__ == "__main__":
    sys.exit(main())
