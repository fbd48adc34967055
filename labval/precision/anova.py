"""Analysis-of-variance tables for precision studies.

Three designs are supported:

- one factor (for example independent runs in a verification study),
- two factors nested, days containing runs (CLSI EP05 20 x 2 x 2), and
- two factors crossed, kept for designs where the second factor is shared
  across the first.

The nested and crossed tables require balanced data; unbalanced designs
need REML-type estimators that are outside this package.

References:
    Mendenhall WM, Sincich TL. Statistics for Engineering and the Sciences,
    6th ed. CRC Press; 2016. p. 752.
    NIST/SEMATECH e-Handbook of Statistical Methods, section 3.2.3.3
    (nested designs).
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Dict, Hashable, Sequence

import numpy as np

from labval.exceptions import NumericDomainError, UnbalancedDesignError
from labval.precision.grouping import FactorGrouping, NestedGrouping

logger = logging.getLogger(__name__)


def _f_ratio(ms_effect: float, ms_error: float) -> float:
    if ms_error > 0:
        return ms_effect / ms_error
    return math.inf if ms_effect > 0 else math.nan


@dataclass(frozen=True)
class OneFactorAnovaTable:
    """One-way ANOVA table.

    ``ss_between``/``ms_between`` refer to the factor (treatments) and
    ``ss_error``/``ms_error`` to the pooled within-group variation.
    """

    mean: float
    ss_total: float
    ss_between: float
    ss_error: float
    df_total: int
    df_between: int
    df_error: int
    ms_between: float
    ms_error: float
    f: float
    n: int
    p: int
    sum_group_sizes_sq: int

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


class OneFactorAnova:
    """One-way analysis of variance.

    Args:
        levels (Sequence[Hashable]): Factor level of each observation.
        values (Sequence[float]): Observations, aligned with ``levels``.

    Raises:
        InputValidationError: If ``levels`` and ``values`` differ in length.
    """

    def __init__(self, levels: Sequence[Hashable], values: Sequence[float]):
        self.values = np.asarray(values, dtype=float)
        self.grouping = FactorGrouping.build(levels, self.values)

    def calculate(self) -> OneFactorAnovaTable:
        """Compute the one-way table from raw sums.

        Raises:
            NumericDomainError: If there are fewer than two groups or no
                within-group degrees of freedom.
        """
        n = int(self.values.size)
        p = len(self.grouping)
        if p < 2 or n <= p:
            raise NumericDomainError(
                f"One-factor ANOVA needs at least two groups and more observations "
                f"than groups; got {p} groups and {n} observations."
            )

        sizes = self.grouping.sizes
        sums = self.grouping.sums
        total = float(np.sum(self.values))
        correction = total**2 / n
        ss_total = float(np.sum(self.values**2)) - correction
        ss_between = float(np.sum(sums**2 / sizes)) - correction
        # Raw-sum cancellation can push a near-zero residual below zero
        ss_error = max(0.0, ss_total - ss_between)

        ms_between = ss_between / (p - 1)
        ms_error = ss_error / (n - p)

        return OneFactorAnovaTable(
            mean=float(np.mean(self.values)),
            ss_total=ss_total,
            ss_between=ss_between,
            ss_error=ss_error,
            df_total=n - 1,
            df_between=p - 1,
            df_error=n - p,
            ms_between=ms_between,
            ms_error=ms_error,
            f=_f_ratio(ms_between, ms_error),
            n=n,
            p=p,
            sum_group_sizes_sq=int(np.sum(sizes**2)),
        )


@dataclass(frozen=True)
class TwoFactorNestedAnovaTable:
    """Nested ANOVA table; factor B (run) is nested within factor A (day)."""

    mean: float
    sst: float
    ssa: float
    ssb: float
    sse: float
    df_t: int
    df_a: int
    df_b: int
    df_e: int
    msa: float
    msb: float
    mse: float
    f_a: float
    f_b: float
    n: int
    n_a: int
    n_b: int
    n_e: int

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def _check_balanced(n_a: int, n_b: int, n_e: int, n: int) -> None:
    if n_a * n_b * n_e != n:
        raise UnbalancedDesignError(
            "Data must be balanced (equal number of replicates per run per day) "
            f"for this ANOVA; {n_a} x {n_b} x {n_e} != {n} observations. "
            "More sophisticated statistical techniques are required to process "
            "unbalanced data."
        )


class TwoFactorNestedAnova:
    """Two-factor nested ANOVA for ``days x runs x replicates`` designs.

    Args:
        days (Sequence[Hashable]): Factor A level of each observation.
        runs (Sequence[Hashable]): Factor B level of each observation; run
            labels are interpreted within their day.
        values (Sequence[float]): Observations.

    Raises:
        InputValidationError: If the three sequences differ in length.
    """

    def __init__(
        self,
        days: Sequence[Hashable],
        runs: Sequence[Hashable],
        values: Sequence[float],
    ):
        self.values = np.asarray(values, dtype=float)
        self.grouping = NestedGrouping.build(days, runs, self.values)
        self.num_days = len(self.grouping)
        self.num_runs = self.grouping.max_inner_levels
        self.num_reps = self.grouping.max_cell_size

    def check_balanced(self) -> None:
        """Raise ``UnbalancedDesignError`` unless days x runs x reps == N."""
        _check_balanced(self.num_days, self.num_runs, self.num_reps, int(self.values.size))

    def sst(self) -> float:
        """Total sum of squared deviations from the grand mean."""
        return float(np.sum((self.values - np.mean(self.values)) ** 2))

    def ssa(self) -> float:
        """Between-day sum of squares, weighted by observations per day."""
        grand_mean = float(np.mean(self.values))
        ssa = 0.0
        for pos in range(self.num_days):
            day_values = self.grouping.outer_values(pos)
            ssa += len(day_values) * (float(np.mean(day_values)) - grand_mean) ** 2
        return ssa

    def sse(self) -> float:
        """Within-cell sum of squares about each run's own mean."""
        return float(
            sum(np.sum((np.asarray(cell) - np.mean(cell)) ** 2) for cell in self.grouping.cells())
        )

    def df_error(self) -> int:
        return int(sum(len(cell) - 1 for cell in self.grouping.cells() if len(cell) > 1))

    def df_between_runs(self) -> int:
        """Runs per day minus one, summed over days."""
        return int(sum(max(len(sub) - 1, 0) for sub in self.grouping.inner))

    def handbook_ssb(self) -> float:
        """Between-run (within-day) sum of squares from replicate means.

        Computes ``Σ_i Σ_j n_ij (ȳ_ij - ȳ_i)²``. The nested decomposition
        ``SST = SSA + SSB + SSE`` is an identity, so this agrees with
        ``SST - SSA - SSE`` up to rounding; the table reports the
        subtraction form.
        """
        ssb = 0.0
        for pos, sub in enumerate(self.grouping.inner):
            day_mean = float(np.mean(self.grouping.outer_values(pos)))
            for cell in sub.groups:
                ssb += len(cell) * (float(np.mean(cell)) - day_mean) ** 2
        return ssb

    def calculate(self) -> TwoFactorNestedAnovaTable:
        """Compute the nested ANOVA table.

        Raises:
            UnbalancedDesignError: If the design is not balanced; checked
                before any sum of squares is computed.
            NumericDomainError: If a source of variation has zero degrees
                of freedom (a single day, a single run per day, or a single
                replicate per run).
        """
        self.check_balanced()
        n = int(self.values.size)

        sst = self.sst()
        ssa = self.ssa()
        sse = self.sse()
        ssb = sst - ssa - sse

        df_t = n - 1
        df_a = self.num_days - 1
        df_b = self.df_between_runs()
        df_e = self.df_error()
        if min(df_a, df_b, df_e) <= 0:
            raise NumericDomainError(
                f"Nested ANOVA needs positive degrees of freedom; got dfA={df_a}, "
                f"dfB={df_b}, dfE={df_e}."
            )

        msa = ssa / df_a
        msb = ssb / df_b
        mse = sse / df_e
        logger.debug("Nested ANOVA: SSA=%g SSB=%g SSE=%g", ssa, ssb, sse)

        return TwoFactorNestedAnovaTable(
            mean=float(np.mean(self.values)),
            sst=sst,
            ssa=ssa,
            ssb=ssb,
            sse=sse,
            df_t=df_t,
            df_a=df_a,
            df_b=df_b,
            df_e=df_e,
            msa=msa,
            msb=msb,
            mse=mse,
            f_a=_f_ratio(msa, mse),
            f_b=_f_ratio(msb, mse),
            n=n,
            n_a=self.num_days,
            n_b=self.num_runs,
            n_e=self.num_reps,
        )


@dataclass(frozen=True)
class TwoFactorAnovaTable:
    """Crossed two-factor ANOVA table with interaction."""

    mean: float
    sst: float
    ssa: float
    ssb: float
    ssab: float
    sse: float
    df_t: int
    df_a: int
    df_b: int
    df_ab: int
    df_e: int
    msa: float
    msb: float
    msab: float
    mse: float
    f_a: float
    f_b: float
    f_ab: float
    n: int
    n_a: int
    n_b: int
    n_e: int

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


class TwoFactorAnova:
    """Two-factor crossed ANOVA with interaction for balanced data.

    Use ``TwoFactorNestedAnova`` for day/run precision designs; here the
    levels of factor B are shared across every level of factor A.
    """

    def __init__(
        self,
        factor_a: Sequence[Hashable],
        factor_b: Sequence[Hashable],
        values: Sequence[float],
    ):
        self.values = np.asarray(values, dtype=float)
        self.cells = NestedGrouping.build(factor_a, factor_b, self.values)
        self.by_a = FactorGrouping.build(factor_a, self.values)
        self.by_b = FactorGrouping.build(factor_b, self.values)

    def calculate(self) -> TwoFactorAnovaTable:
        """Compute the crossed table.

        Raises:
            UnbalancedDesignError: If the cells do not form a complete
                balanced ``a x b x reps`` layout.
            NumericDomainError: If a source has zero degrees of freedom.
        """
        n = int(self.values.size)
        n_a = len(self.by_a)
        n_b = len(self.by_b)
        n_e = self.cells.max_cell_size
        _check_balanced(n_a, n_b, n_e, n)

        grand_mean = float(np.mean(self.values))
        sst = float(np.sum((self.values - grand_mean) ** 2))
        ssa = float(np.sum(self.by_a.sizes * (self.by_a.means - grand_mean) ** 2))
        ssb = float(np.sum(self.by_b.sizes * (self.by_b.means - grand_mean) ** 2))
        sse = float(
            sum(np.sum((np.asarray(cell) - np.mean(cell)) ** 2) for cell in self.cells.cells())
        )
        ssab = sst - ssa - ssb - sse

        df_a = n_a - 1
        df_b = n_b - 1
        df_ab = df_a * df_b
        df_e = n - n_a * n_b
        if min(df_a, df_b, df_ab, df_e) <= 0:
            raise NumericDomainError(
                f"Crossed ANOVA needs positive degrees of freedom; got dfA={df_a}, "
                f"dfB={df_b}, dfAB={df_ab}, dfE={df_e}."
            )

        msa = ssa / df_a
        msb = ssb / df_b
        msab = ssab / df_ab
        mse = sse / df_e

        return TwoFactorAnovaTable(
            mean=grand_mean,
            sst=sst,
            ssa=ssa,
            ssb=ssb,
            ssab=ssab,
            sse=sse,
            df_t=n - 1,
            df_a=df_a,
            df_b=df_b,
            df_ab=df_ab,
            df_e=df_e,
            msa=msa,
            msb=msb,
            msab=msab,
            mse=mse,
            f_a=_f_ratio(msa, mse),
            f_b=_f_ratio(msb, mse),
            f_ab=_f_ratio(msab, mse),
            n=n,
            n_a=n_a,
            n_b=n_b,
            n_e=n_e,
        )
