"""
Parameter payloads for expected-duration results.

Each dataclass is a frozen payload carried inside a Result[P] envelope.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class RiskSetTable:
    """Failures and risk-set size at each distinct observed time.

    ``risk_size`` is the exposure (sum of exponentiated linear predictors)
    of every row still under observation at that time.
    """

    time: NDArray                # (m,): distinct observed times, ascending
    n_failures: NDArray          # (m,): failures at each time
    risk_size: NDArray           # (m,): exposure at or after each time

    def __len__(self) -> int:
        return len(self.time)


@dataclass(frozen=True)
class BaselineFunctions:
    """Baseline cumulative hazard and survivor function on a time grid.

    ``survivor == exp(-cumulative_hazard)`` for every grid point. The
    failure distribution is derived by finite differencing the survivor
    curve with S(0) = 1.
    """

    time: NDArray                # (m,): strictly increasing
    cumulative_hazard: NDArray   # (m,): non-decreasing
    survivor: NDArray            # (m,): non-increasing, exp(-H)

    @property
    def failure_cdf(self) -> NDArray:
        """F(t) = 1 - S(t)."""
        return 1.0 - self.survivor

    @property
    def failure_pdf(self) -> NDArray:
        """Probability mass of failure in (t_{j-1}, t_j]."""
        return self._survivor_before() - self.survivor

    @property
    def hazard(self) -> NDArray:
        """Discrete hazard: P(fail at t_j | survived to t_{j-1})."""
        prev = self._survivor_before()
        with np.errstate(divide='ignore', invalid='ignore'):
            h = self.failure_pdf / prev
        return np.where(prev > 0, h, 0.0)

    def _survivor_before(self) -> NDArray:
        return np.concatenate(([1.0], self.survivor[:-1]))

    def __len__(self) -> int:
        return len(self.time)


@dataclass(frozen=True)
class GamFitTable:
    """Rank-to-duration smooth fit, one row per observation, sorted by rank."""

    rank: NDArray                # (n,): rank of expected duration (1 = highest risk)
    duration: NDArray            # (n,): observed duration
    failed: NDArray              # (n,): event indicator; only failures are fitted
    fitted: NDArray              # (n,): smooth curve at each rank
    fitted_lower: NDArray        # (n,): lower pointwise band
    fitted_upper: NDArray        # (n,): upper pointwise band


@dataclass(frozen=True)
class EngineParams:
    """Output of a single NPSF or GAM engine run."""

    exp_dur: NDArray                      # (m,): expected duration per target
    baseline: BaselineFunctions | None    # NPSF only
    risk_set: RiskSetTable | None         # NPSF only
    gam_fit: GamFitTable | None           # GAM only
    n_out_of_range: int                   # GAM newdata outside training range
    subject_ids: NDArray | None           # targets are subjects (counting process)


@dataclass(frozen=True)
class ExpDurParams:
    """Expected durations with optional bootstrap uncertainty.

    For a marginal effect, ``exp_dur`` holds the per-observation
    difference ``exp_dur2 - exp_dur1``.
    """

    exp_dur: NDArray                      # (m,)
    mean: float
    median: float
    se: NDArray | None                    # (m,) bootstrap SE
    ci: NDArray | None                    # (m, 2) bootstrap CI
    mean_se: float | None
    mean_ci: NDArray | None               # (2,)
    median_se: float | None
    median_ci: NDArray | None             # (2,)
    baseline: BaselineFunctions | None
    risk_set: RiskSetTable | None
    gam_fit: GamFitTable | None
    subject_ids: NDArray | None
    exp_dur1: NDArray | None = None       # marginal effect: prediction on newdata
    exp_dur2: NDArray | None = None       # marginal effect: prediction on newdata2
    B: int | None = None
    n_dropped: int = 0
    confidence: str | None = None
    conf_level: float | None = None
