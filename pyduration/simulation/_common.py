"""
Parameter payloads for simulated survival data.

Each dataclass is a frozen payload carried inside a Result[P] envelope.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy.typing import NDArray

from pyduration.expdur._common import BaselineFunctions


@dataclass(frozen=True)
class CounterfactualEffect:
    """True change in expected duration from moving one covariate.

    Computed from the known baseline: E_i = 1 + Σ_{t=1}^{T-1} S_i(t).
    """

    covariate: int
    low: float
    high: float
    exp_dur_low: NDArray         # (N,)
    exp_dur_high: NDArray        # (N,)
    ind_me: NDArray              # (N,) exp_dur_high - exp_dur_low
    marg_effect: float           # compare(ind_me)
    compare: str                 # "median" or "mean"


@dataclass(frozen=True)
class SimulatedParams:
    """A simulated duration dataset with its generating truth.

    Row arrays (X, y, failed, start, id, xb, exp_xb) have one entry per
    subject for types "none" and "tvbeta", and one entry per
    (start, stop] interval for type "tvc".
    """

    X: NDArray                   # (rows, p)
    y: NDArray                   # (rows,) duration, or stop time for tvc
    failed: NDArray              # (rows,) 1 = failure, 0 = censored
    start: NDArray | None        # (rows,) tvc only
    id: NDArray | None           # (rows,) tvc only
    xb: NDArray                  # (rows,) or (N, T) for tvbeta
    exp_xb: NDArray              # same shape as xb
    survivor: NDArray            # (N, T) individual survivor functions
    betas: NDArray               # (1, p) or (T, p) for tvbeta
    tvc: bool
    type: str                    # "none" | "tvc" | "tvbeta"
    baseline: BaselineFunctions
    subject_y: NDArray           # (N,) duration per subject
    subject_failed: NDArray      # (N,) event indicator per subject
    effect: CounterfactualEffect | None = None
    covariate_paths: NDArray | None = None   # (N, T, p) tvc only
    assigned_path: NDArray | None = None     # (N,) tvc only, path index per subject

    @property
    def censored(self) -> NDArray:
        return 1.0 - self.failed

    @property
    def n_subjects(self) -> int:
        return len(self.subject_y)
