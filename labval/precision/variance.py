"""Variance-component analysis for precision verification and evaluation.

``OneFactorVarianceAnalysis`` covers the one-factor design typically used to
verify a manufacturer's precision claim (CLSI EP15, 5 runs x 5 replicates).
``TwoFactorVarianceAnalysis`` covers the nested day/run/replicate design used
to establish precision (CLSI EP05, 20 days x 2 runs x 2 replicates).

Both return frozen dataclasses holding the underlying ANOVA table plus the
variance components, standard deviations, CVs and Satterthwaite degrees of
freedom for within-laboratory imprecision.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import asdict, dataclass
from typing import Dict, Hashable, Optional, Sequence, Tuple

from scipy.stats import chi2

from labval.config import DEFAULT_ALPHA
from labval.exceptions import InputValidationError, NumericDomainError
from labval.precision.anova import (
    OneFactorAnova,
    OneFactorAnovaTable,
    TwoFactorNestedAnova,
    TwoFactorNestedAnovaTable,
)
from labval.regression.base import validate_alpha

logger = logging.getLogger(__name__)


def _satterthwaite(terms: Sequence[Tuple[float, float, float]]) -> float:
    """Satterthwaite df for a linear combination of mean squares.

    Each term is ``(coefficient, mean_square, df)``.

    Raises:
        NumericDomainError: If every weighted mean square is zero, as when
            all observations are identical.
    """
    numerator = sum(a * ms for a, ms, _ in terms) ** 2
    denominator = sum((a * ms) ** 2 / df for a, ms, df in terms)
    if denominator == 0:
        raise NumericDomainError(
            "Within-laboratory degrees of freedom are undefined: all mean squares are zero."
        )
    return numerator / denominator


def _cv(sd: float, mean: float) -> float:
    return sd / mean if mean != 0 else math.nan


def upper_confidence_limit(sd: float, df: float, alpha: float = DEFAULT_ALPHA) -> float:
    """Upper limit of a two-sided ``1 - alpha`` interval for an SD."""
    return sd * math.sqrt(df / float(chi2.ppf(alpha / 2.0, df)))


def lower_confidence_limit(sd: float, df: float, alpha: float = DEFAULT_ALPHA) -> float:
    """Lower limit of a two-sided ``1 - alpha`` interval for an SD."""
    return sd * math.sqrt(df / float(chi2.ppf(1.0 - alpha / 2.0, df)))


@dataclass(frozen=True)
class OneFactorVariance:
    """One-factor variance components with verification factors.

    Attributes:
        anova: The one-way ANOVA table the components come from.
        v_e, v_b: Repeatability and between-group variance components.
        s_e, s_b, s_wl: Matching standard deviations; ``s_wl`` is the
            within-laboratory SD ``sqrt(v_e + v_b)``.
        df_wl: Satterthwaite degrees of freedom for ``s_wl``.
        chisq_repeatability, chisq_wl: Chi-square quantiles at
            ``1 - alpha / num_levels``.
        f_repeatability, f_wl: ``sqrt(chisq / df)``; multiply a claimed CV
            by these to get an upper verification limit.
    """

    anova: OneFactorAnovaTable
    v_e: float
    v_b: float
    s_e: float
    cv_e: float
    s_b: float
    cv_b: float
    s_wl: float
    cv_wl: float
    df_wl: float
    chisq_repeatability: float
    chisq_wl: float
    f_repeatability: float
    f_wl: float

    def as_dict(self) -> Dict[str, float]:
        data = self.anova.as_dict()
        data.update({k: v for k, v in asdict(self).items() if k != "anova"})
        return data


class OneFactorVarianceAnalysis:
    """Precision verification from a one-factor design.

    Args:
        levels (Sequence[Hashable]): Run (or day) of each observation.
        values (Sequence[float]): Observations.
        num_levels (int): Number of concentration levels tested; the
            chi-square quantile is Bonferroni-corrected by this count as in
            CLSI EP15.
        alpha (float, optional): Significance level. Defaults to ``0.05``.

    Raises:
        InputValidationError: If ``num_levels`` is not a positive integer.
    """

    def __init__(
        self,
        levels: Sequence[Hashable],
        values: Sequence[float],
        num_levels: int,
        alpha: float = DEFAULT_ALPHA,
    ):
        self.levels = levels
        self.values = values
        self.num_levels = num_levels
        self.alpha = alpha
        self._validate()
        self._result: Optional[OneFactorVariance] = None

    def _validate(self) -> None:
        if (
            isinstance(self.num_levels, bool)
            or not isinstance(self.num_levels, numbers.Integral)
            or self.num_levels <= 0
        ):
            raise InputValidationError("Number of levels must be a positive integer.")

    def calculate(self) -> OneFactorVariance:
        alpha = validate_alpha(self.alpha)
        anova = OneFactorAnova(self.levels, self.values).calculate()

        v_e = anova.ms_error
        n0 = (anova.n - anova.sum_group_sizes_sq / anova.n) / (anova.p - 1)
        v_b = max(0.0, (anova.ms_between - anova.ms_error) / n0)
        s_e = math.sqrt(v_e)
        s_b = math.sqrt(v_b)
        s_wl = math.sqrt(v_e + v_b)

        a1 = 1.0 / n0
        a2 = 1.0 - a1
        df_wl = _satterthwaite(
            [
                (a1, anova.ms_between, anova.df_between),
                (a2, anova.ms_error, anova.df_error),
            ]
        )

        # One-tailed, Bonferroni-corrected for the number of levels
        q = 1.0 - alpha / self.num_levels
        chisq_repeatability = float(chi2.ppf(q, anova.df_error))
        chisq_wl = float(chi2.ppf(q, df_wl))

        result = OneFactorVariance(
            anova=anova,
            v_e=v_e,
            v_b=v_b,
            s_e=s_e,
            cv_e=_cv(s_e, anova.mean),
            s_b=s_b,
            cv_b=_cv(s_b, anova.mean),
            s_wl=s_wl,
            cv_wl=_cv(s_wl, anova.mean),
            df_wl=df_wl,
            chisq_repeatability=chisq_repeatability,
            chisq_wl=chisq_wl,
            f_repeatability=math.sqrt(chisq_repeatability / anova.df_error),
            f_wl=math.sqrt(chisq_wl / df_wl),
        )
        self._result = result
        return result

    def _calculated(self) -> OneFactorVariance:
        if self._result is None:
            return self.calculate()
        return self._result

    def uvl_repeatability(self, cv_claim: float) -> float:
        """Upper verification limit for a claimed repeatability CV."""
        return cv_claim * self._calculated().f_repeatability

    def uvl_within_lab(self, cv_claim: float) -> float:
        """Upper verification limit for a claimed within-laboratory CV."""
        return cv_claim * self._calculated().f_wl


@dataclass(frozen=True)
class TwoFactorVariance:
    """Nested day/run variance components with chi-square limits.

    ``v_a`` is between-day, ``v_b`` between-run, ``v_e`` repeatability and
    ``v_t`` within-laboratory variance. Limits are two-sided ``1 - alpha``
    intervals on the within-laboratory and repeatability SDs and CVs.
    """

    anova: TwoFactorNestedAnovaTable
    v_t: float
    v_a: float
    v_b: float
    v_e: float
    s_wl: float
    s_a: float
    s_b: float
    s_e: float
    cv_wl: float
    cv_a: float
    cv_b: float
    cv_e: float
    df_wl: float
    s_wl_lcl: float
    s_wl_ucl: float
    s_e_lcl: float
    s_e_ucl: float
    cv_wl_lcl: float
    cv_wl_ucl: float
    cv_e_lcl: float
    cv_e_ucl: float

    def as_dict(self) -> Dict[str, float]:
        data = self.anova.as_dict()
        data.update({k: v for k, v in asdict(self).items() if k != "anova"})
        return data


class TwoFactorVarianceAnalysis:
    """Precision evaluation from a nested days x runs x replicates design.

    Args:
        days (Sequence[Hashable]): Day of each observation.
        runs (Sequence[Hashable]): Run of each observation, within its day.
        values (Sequence[float]): Observations.
        alpha (float, optional): Significance level for the SD and CV
            limits. Defaults to ``0.05``.

    Raises:
        UnbalancedDesignError: From ``calculate`` when the design is not
            balanced.
    """

    def __init__(
        self,
        days: Sequence[Hashable],
        runs: Sequence[Hashable],
        values: Sequence[float],
        alpha: float = DEFAULT_ALPHA,
    ):
        self.days = days
        self.runs = runs
        self.values = values
        self.alpha = alpha

    def satterthwaite_df(self, anova: TwoFactorNestedAnovaTable) -> float:
        """Degrees of freedom of the pooled within-laboratory variance."""
        a_a = anova.n_a / (anova.n - 1)
        a_b = (anova.n_b - 1) * anova.n_a / (anova.n - 1)
        a_e = (anova.n - anova.n_a * anova.n_b) / (anova.n - 1)
        return _satterthwaite(
            [
                (a_a, anova.msa, anova.df_a),
                (a_b, anova.msb, anova.df_b),
                (a_e, anova.mse, anova.df_e),
            ]
        )

    def calculate(self) -> TwoFactorVariance:
        alpha = validate_alpha(self.alpha)
        anova = TwoFactorNestedAnova(self.days, self.runs, self.values).calculate()

        v_a = max(0.0, (anova.msa - anova.msb) / (anova.n_b * anova.n_e))
        v_b = max(0.0, (anova.msb - anova.mse) / anova.n_e)
        v_e = anova.mse
        v_t = v_a + v_b + v_e

        s_a = math.sqrt(v_a)
        s_b = math.sqrt(v_b)
        s_e = math.sqrt(v_e)
        s_wl = math.sqrt(v_t)

        df_wl = self.satterthwaite_df(anova)
        s_wl_ucl = upper_confidence_limit(s_wl, df_wl, alpha)
        s_wl_lcl = lower_confidence_limit(s_wl, df_wl, alpha)
        s_e_ucl = upper_confidence_limit(s_e, anova.df_e, alpha)
        s_e_lcl = lower_confidence_limit(s_e, anova.df_e, alpha)
        logger.info(
            "Precision: mean %.4g, repeatability SD %.4g, within-lab SD %.4g (df %.1f)",
            anova.mean,
            s_e,
            s_wl,
            df_wl,
        )

        mean = anova.mean
        return TwoFactorVariance(
            anova=anova,
            v_t=v_t,
            v_a=v_a,
            v_b=v_b,
            v_e=v_e,
            s_wl=s_wl,
            s_a=s_a,
            s_b=s_b,
            s_e=s_e,
            cv_wl=_cv(s_wl, mean),
            cv_a=_cv(s_a, mean),
            cv_b=_cv(s_b, mean),
            cv_e=_cv(s_e, mean),
            df_wl=df_wl,
            s_wl_lcl=s_wl_lcl,
            s_wl_ucl=s_wl_ucl,
            s_e_lcl=s_e_lcl,
            s_e_ucl=s_e_ucl,
            cv_wl_lcl=_cv(s_wl_lcl, mean),
            cv_wl_ucl=_cv(s_wl_ucl, mean),
            cv_e_lcl=_cv(s_e_lcl, mean),
            cv_e_ucl=_cv(s_e_ucl, mean),
        )
