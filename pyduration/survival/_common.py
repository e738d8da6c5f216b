"""
Parameter payloads for survival model results.

Each dataclass is a frozen payload carried inside a Result[P] envelope.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class CoxParams:
    """Cox proportional hazards model parameters.

    Matches the output of R's survival::coxph().
    """

    coefficients: NDArray        # (p,): log hazard ratios
    hazard_ratios: NDArray       # (p,): exp(coef)
    standard_errors: NDArray     # (p,): from observed information matrix
    z_statistics: NDArray        # (p,): coef / se
    p_values: NDArray            # (p,): two-sided Wald test
    loglik: tuple[float, float]  # (null log-lik, model log-lik)
    concordance: float           # Harrell's C-statistic
    n_events: int
    n_observations: int
    n_iter: int                  # Newton-Raphson iterations
    converged: bool
    ties: str                    # "efron" or "breslow"
