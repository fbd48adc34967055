"""Default constants and run configuration for method-validation analyses."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_ALPHA: float = 0.05
DEFAULT_ERROR_RATIO: float = 1.0
DEFAULT_ITER_MAX: int = 30
DEFAULT_THRESHOLD: float = 1e-6
DEFAULT_BOOTSTRAP_N: int = 10000
DEFAULT_EPS: float = 1e-12

# Larger than any valid angle in radians; sorts to the end of the matrix.
ANGLE_SENTINEL: float = 500.0

REG_METHOD_DEMING = "Deming"
REG_METHOD_WDEMING = "WDeming"
REG_METHOD_PABA = "PaBa"
REG_METHODS: tuple[str, ...] = (REG_METHOD_DEMING, REG_METHOD_WDEMING, REG_METHOD_PABA)

CI_METHOD_DEFAULT = "default"
CI_METHOD_JACKKNIFE = "jackknife"
CI_METHOD_BOOTSTRAP = "bootstrap"
CI_METHODS: tuple[str, ...] = (CI_METHOD_DEFAULT, CI_METHOD_JACKKNIFE, CI_METHOD_BOOTSTRAP)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings shared by a single command-line analysis run.

    Attributes:
        alpha: Two-sided significance level for confidence limits.
        error_ratio: Ratio of measurement-error variances (test / reference)
            used by the Deming family.
        max_iter: Iteration cap for Weighted Deming regression.
        threshold: Convergence threshold on both coefficients.
        bootstrap_n: Number of bootstrap resamples.
        seed: Optional seed for the bootstrap random generator.
        num_levels: Number of concentration levels in a verification study,
            used for the Bonferroni correction of the verification limit.
    """

    alpha: float = DEFAULT_ALPHA
    error_ratio: float = DEFAULT_ERROR_RATIO
    max_iter: int = DEFAULT_ITER_MAX
    threshold: float = DEFAULT_THRESHOLD
    bootstrap_n: int = DEFAULT_BOOTSTRAP_N
    seed: int | None = None
    num_levels: int = 1
