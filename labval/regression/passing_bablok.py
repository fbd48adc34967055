"""Passing-Bablok regression for method-comparison studies.

The estimator is rank based: the slope is a shifted median of all pairwise
slopes, expressed as angles so that vertical pairs have a finite rank. It
makes no distributional assumption and is robust to outliers, so negative
results are accepted.

References:
    Passing H, Bablok W. A new biometrical procedure for testing the
    equality of measurements from two different analytical methods.
    J Clin Chem Clin Biochem. 1983;21:709-720.
    mcr: Method Comparison Regression, R package (Potapov et al.).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.stats import norm

from labval.config import ANGLE_SENTINEL, DEFAULT_ALPHA, DEFAULT_EPS
from labval.regression.base import (
    RegressionEstimator,
    RegressionModel,
    as_sample_pair,
    validate_alpha,
)
from labval.stats.descriptive import median

PI4 = math.pi / 4.0


@dataclass(frozen=True)
class AngleMatrix:
    """Pairwise angles for every pair ``(k, j)`` with ``k >= j``.

    Attributes:
        angles: Flat array of angles in radians. Diagonal entries and
            coincident points hold ``ANGLE_SENTINEL``.
        n_all_items: Number of real (non-sentinel) angles.
        n_neg: Real angles ``<= -pi/4``.
        n_neg2: Real angles ``< -pi/4``.
        n_pos: Real angles ``>= pi/4``.
        n_pos2: Real angles ``> pi/4``.
    """

    angles: np.ndarray
    n_all_items: int
    n_neg: int
    n_neg2: int
    n_pos: int
    n_pos2: int


def tolerant_diff(a, b, eps: float = DEFAULT_EPS):
    """Difference ``a - b`` that is exactly zero for tiny relative deltas.

    Works elementwise on arrays. A difference is treated as zero when
    ``|a - b| < eps * (|a| + |b|) / 2``.
    """
    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    delta = a_arr - b_arr
    tiny = np.abs(delta) < eps * ((np.abs(a_arr) + np.abs(b_arr)) / 2.0)
    out = np.where(tiny, 0.0, delta)
    return float(out) if out.ndim == 0 else out


def _ranked_angle(sorted_angles: np.ndarray, rank: int) -> float:
    """Median angle of the first ``rank`` sorted angles.

    Returns NaN when the rank falls outside the matrix.
    """
    half = (rank + 1) // 2
    if half < 1 or half > sorted_angles.size:
        return math.nan
    if rank % 2 == 0:
        if half >= sorted_angles.size:
            return math.nan
        return float((sorted_angles[half - 1] + sorted_angles[half]) / 2.0)
    return float(sorted_angles[half - 1])


class PassingBablokRegression(RegressionEstimator):
    """Passing-Bablok regression with its non-parametric confidence limits.

    Args:
        alpha (float, optional): Two-sided significance level for the slope
            and intercept limits. Defaults to ``0.05``.
        positive_correlated (bool, optional): Whether the methods are
            expected to be positively correlated; sets the sign of vertical
            pairs and the direction of the median shift. Defaults to
            ``True``.
        eps (float, optional): Relative tolerance below which differences
            are treated as zero. Defaults to ``1e-12``.
    """

    def __init__(
        self,
        alpha: float = DEFAULT_ALPHA,
        positive_correlated: bool = True,
        eps: float = DEFAULT_EPS,
    ):
        self.alpha = alpha
        self.positive_correlated = positive_correlated
        self.eps = eps

    def angle_matrix(self, x: Sequence[float], y: Sequence[float]) -> AngleMatrix:
        """Build the pairwise angle matrix and its near-vertical counts."""
        x_arr, y_arr = as_sample_pair(x, y, allow_negative=True)
        n = x_arr.size
        j_idx, k_idx = np.triu_indices(n)

        dx = tolerant_diff(x_arr[k_idx], x_arr[j_idx], self.eps)
        dy = tolerant_diff(y_arr[k_idx], y_arr[j_idx], self.eps)

        vertical = math.pi / 2.0 if self.positive_correlated else -math.pi / 2.0
        angles = np.full(dx.shape, ANGLE_SENTINEL, dtype=float)
        has_dx = dx != 0
        angles[has_dx] = np.arctan(dy[has_dx] / dx[has_dx])
        angles[~has_dx & (dy != 0)] = vertical

        real = angles[angles < ANGLE_SENTINEL]
        return AngleMatrix(
            angles=angles,
            n_all_items=int(real.size),
            n_neg=int(np.sum(real <= -PI4)),
            n_neg2=int(np.sum(real < -PI4)),
            n_pos=int(np.sum(real >= PI4)),
            n_pos2=int(np.sum(real > PI4)),
        )

    def calculate(self, x: Sequence[float], y: Sequence[float]) -> RegressionModel:
        """Fit the Passing-Bablok line.

        Args:
            x (Sequence[float]): Reference-method results.
            y (Sequence[float]): Test-method results.

        Returns:
            RegressionModel: Slope, intercept, and their ``1 - alpha``
            confidence limits. A limit whose rank falls outside the valid
            range of the angle matrix is NaN.

        Raises:
            InputValidationError: If lengths differ or are zero, or alpha is
                outside ``(0, 1)``.

        Note:
            The intercept and its limits are medians of ``y - b * x`` over
            the original points, using the slope, the upper slope limit
            (for the lower intercept limit) and the lower slope limit (for
            the upper intercept limit).
        """
        x_arr, y_arr = as_sample_pair(x, y, allow_negative=True)
        alpha = validate_alpha(self.alpha)
        n = x_arr.size

        matrix = self.angle_matrix(x_arr, y_arr)
        sorted_angles = np.sort(matrix.angles)
        n_all = matrix.n_all_items

        if self.positive_correlated:
            offset = matrix.n_neg + matrix.n_neg2
            lowest_idx = 2 * (matrix.n_neg - matrix.n_neg2) + 1
        else:
            offset = -(matrix.n_pos + matrix.n_pos2)
            lowest_idx = 2 * (matrix.n_pos - matrix.n_pos2) + 1

        slope = math.tan(_ranked_angle(sorted_angles, n_all + offset))

        z = float(norm.ppf(1.0 - alpha / 2.0))
        d_conf = math.floor(z * math.sqrt(n * (n - 1) * (2 * n + 5) / 18.0) + 0.5)

        rank_lower = n_all - d_conf + offset
        if (rank_lower + 1) // 2 >= lowest_idx:
            slope_lcl = math.tan(_ranked_angle(sorted_angles, rank_lower))
        else:
            slope_lcl = math.nan

        rank_upper = n_all + d_conf + offset
        if (rank_upper + 1) // 2 <= n_all:
            slope_ucl = math.tan(_ranked_angle(sorted_angles, rank_upper))
        else:
            slope_ucl = math.nan

        intercept = median(y_arr - slope * x_arr)
        intercept_lcl = median(y_arr - slope_ucl * x_arr)
        intercept_ucl = median(y_arr - slope_lcl * x_arr)

        return RegressionModel(
            slope=slope,
            intercept=intercept,
            slope_lcl=slope_lcl,
            slope_ucl=slope_ucl,
            intercept_lcl=intercept_lcl,
            intercept_ucl=intercept_ucl,
        )
