"""Numeric primitives shared by the regression and precision engines.

All functions accept any sequence of real numbers and return plain Python
floats so results can be compared bit-for-bit across repeated calls.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    """Return the arithmetic mean, or NaN for an empty sequence."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return math.nan
    return float(np.mean(arr))


def sample_sd(values: Sequence[float]) -> float:
    """Return the sample standard deviation (``ddof=1``).

    A single value has no sample spread, so NaN is returned for fewer than
    two observations.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size < 2:
        return math.nan
    return float(np.std(arr, ddof=1))


def devsq(values: Sequence[float]) -> float:
    """Sum of squared deviations from the mean, ``Σ(x - x̄)²``."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.sum((arr - np.mean(arr)) ** 2))


def sum_cross_products(x: Sequence[float], y: Sequence[float]) -> float:
    """Sum of cross-products of deviations, ``Σ(x - x̄)(y - ȳ)``."""
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.size == 0:
        return 0.0
    return float(np.sum((x_arr - np.mean(x_arr)) * (y_arr - np.mean(y_arr))))


def median(values: Sequence[float]) -> float:
    """Return the median, averaging the two middle values for even counts."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return math.nan
    return float(np.median(arr))


def quantile(values: Sequence[float], probs: Iterable[float]) -> list[float]:
    """Empirical quantiles with linear interpolation between order statistics.

    Args:
        values (Sequence[float]): Sample values; need not be sorted.
        probs (Iterable[float]): Probabilities in ``[0, 1]``.

    Returns:
        list[float]: One quantile per probability, in the order given. An
        empty sample yields NaN for every probability.

    Raises:
        ValueError: If any probability lies outside ``[0, 1]``.

    Note:
        The position of probability ``p`` is ``(n - 1) * p`` in the sorted
        sample (Hyndman-Fan type 7), matching ``numpy.quantile`` with
        ``method="linear"``.
    """
    probs = [float(p) for p in probs]
    for p in probs:
        if p < 0 or p > 1:
            raise ValueError(f"Quantiles must be between 0 and 1. q={p}")

    arr = np.sort(np.asarray(values, dtype=float))
    n = arr.size
    if n == 0:
        return [math.nan for _ in probs]

    out = []
    for p in probs:
        if p == 1:
            out.append(float(arr[n - 1]))
            continue
        if p == 0:
            out.append(float(arr[0]))
            continue
        index = (n - 1) * p
        lower = math.floor(index)
        upper = math.ceil(index)
        if lower == upper:
            out.append(float(arr[lower]))
        else:
            lo_val = float(arr[lower])
            hi_val = float(arr[upper])
            out.append(lo_val + (hi_val - lo_val) * (index - lower))
    return out
