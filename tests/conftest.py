"""Pytest configuration for repository-relative imports and shared study data."""

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


# Method comparison of 40 patient samples; expected results from the R mcr
# package version 1.3.3.1.
COMPARISON_X = [
    10377.5, 4056, 2654, 4747, 1459.5, 5880, 3871, 2461, 1802, 1607.5,
    4329, 7911.5, 1798.5, 6504, 9506.5, 4781, 2122, 17859, 7064, 963.5,
    408.5, 5623, 4923.5, 2745, 1738.5, 7057, 3001.5, 895.5, 12155.5, 1290.5,
    943, 11312.5, 2700, 3561, 1711, 1006, 1180.5, 9007, 4438, 3606,
]
COMPARISON_Y = [
    10741.5, 3848.5, 2655.5, 5190.5, 1554.5, 6025, 3861.5, 2533.5, 1858, 1636,
    4341.5, 8185, 1753.5, 6793, 9056, 4724.5, 2133.5, 16576.5, 7106.5, 986.5,
    481, 5603, 5046, 2799.5, 1721.5, 7547.5, 3009.5, 986.5, 11712, 1416,
    998.5, 11698.5, 2829, 3776.5, 1899, 1042, 1616, 9380.5, 4332.5, 3308.5,
]

# 20 days x 2 runs x 2 replicates
PRECISION_DAYS = [f"Day {d}" for d in range(1, 21) for _ in range(4)]
PRECISION_RUNS = ["Run 1", "Run 1", "Run 2", "Run 2"] * 20
PRECISION_VALUES = [
    105.9125495, 103.4594439, 100.3746204, 103.7659139, 101.5233903,
    101.3347999, 102.7242272, 99.32447708, 104.6393885, 94.140947,
    95.33198048, 98.00188127, 104.5948706, 98.5307138, 96.03949179,
    93.73456291, 103.8169936, 100.9089366, 95.24712655, 103.279433,
    98.57880475, 100.6577332, 104.5750405, 102.1076445, 98.11422559,
    104.7763511, 102.4655525, 99.93848875, 103.0618642, 102.9668452,
    90.75061241, 93.40087747, 100.5039457, 99.86293922, 98.93478169,
    102.1839088, 95.95539457, 108.4717926, 99.49379525, 95.7559523,
    106.643512, 98.85220955, 99.49343338, 98.63464539, 99.26235495,
    99.05364823, 106.0952489, 105.2823297, 100.6536363, 105.123515,
    94.8370386, 97.99274921, 99.00280737, 103.7450497, 103.0861776,
    104.1824404, 100.3202806, 100.6459121, 100.1346292, 93.84683307,
    99.54365554, 95.55137483, 98.56707898, 94.78143328, 102.014383,
    100.126421, 102.443221, 97.48245746, 103.3301168, 100.1661557,
    102.3016949, 96.31915012, 96.54984086, 99.87260073, 102.8303454,
    100.0121366, 106.0571248, 104.1900122, 100.0701146, 102.8510929,
]

# CLSI EP05-A3 Table A1
EP05_A1_VALUES = [
    242, 246, 245, 246, 243, 242, 238, 238, 247, 239, 241, 240, 249, 241, 250, 245, 246, 242, 243, 240,
    244, 245, 251, 247, 241, 246, 245, 247, 245, 245, 243, 245, 243, 239, 244, 245, 244, 246, 247, 239,
    252, 251, 247, 241, 249, 248, 251, 246, 242, 240, 251, 245, 246, 249, 248, 240, 247, 248, 245, 246,
    240, 238, 239, 242, 241, 244, 245, 248, 244, 244, 237, 242, 241, 239, 247, 245, 247, 240, 245, 242,
]


def _drop_rows(values):
    """Remove row 39, then rows 6 and 7, leaving an unbalanced design."""
    out = list(values)
    del out[39]
    del out[6:8]
    return out


@pytest.fixture
def comparison_data():
    return list(COMPARISON_X), list(COMPARISON_Y)


@pytest.fixture
def precision_design():
    return list(PRECISION_DAYS), list(PRECISION_RUNS), list(PRECISION_VALUES)


@pytest.fixture
def ep05_design():
    return list(PRECISION_DAYS), list(PRECISION_RUNS), list(EP05_A1_VALUES)


@pytest.fixture
def unbalanced_design():
    return (
        _drop_rows(PRECISION_DAYS),
        _drop_rows(PRECISION_RUNS),
        _drop_rows(PRECISION_VALUES),
    )
