"""
Duration generation by inverting individual survivor functions.

For each subject a uniform draw U is compared with the subject's survivor
function on the grid 1..T; the duration is the first grid time t with
S_i(t) <= U, or T if the survivor curve never falls that low. Since
P(S_i(t) <= U) = 1 - S_i(t), the drawn durations have survivor function
S_i exactly.

Survivor functions by type:
    none:   S_i(t) = S0(t) ** exp(x_i β)
    tvbeta: S_i(t) = exp(-Σ_{s<=t} dH0(s) · exp(x_i β(s))),
            β_1(t) = β_1 · log(t)
    tvc:    durations from the time-1 covariates as in "none"; the
            permutation algorithm then attaches covariate paths.

References:
    Harden, J. J. and Kropko, J. (2019). Simulating duration data for
        the Cox model. Political Science Research and Methods, 7(4),
        921-928.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyduration.expdur._common import BaselineFunctions
from pyduration.simulation._permalgo import CountingProcessRows, permutation_algorithm
from pyduration.simulation.design import SimulationDesign

# Per-period probability that a time-varying covariate takes a new value
TVC_CHANGE_PROB = 0.1

# Standard deviation of randomly drawn coefficients
BETA_SD = 0.1


def draw_covariates(design: SimulationDesign, rng: np.random.Generator) -> NDArray:
    """Covariates (N, p) drawn N(mu, sd) column-wise."""
    return rng.normal(design.mu, design.sd, size=(design.N, design.p))


def draw_beta(design: SimulationDesign, rng: np.random.Generator) -> NDArray:
    if design.beta is not None:
        return design.beta
    return rng.normal(0.0, BETA_SD, size=design.p)


def draw_tvc_paths(design: SimulationDesign, rng: np.random.Generator) -> NDArray:
    """Step-process covariate paths (N, T, p).

    Each covariate starts at a N(mu, sd) draw and at every later period
    is redrawn with probability TVC_CHANGE_PROB.
    """
    N, T, p = design.N, design.T, design.p
    draws = rng.normal(design.mu, design.sd, size=(N, T, p))
    change = rng.uniform(size=(N, T, p)) < TVC_CHANGE_PROB
    change[:, 0, :] = True

    # Index of the most recent change at or before each period
    idx = np.where(change, np.arange(T)[None, :, None], 0)
    idx = np.maximum.accumulate(idx, axis=1)
    return np.take_along_axis(draws, idx, axis=1)


def tvbeta_coefficients(beta: NDArray, T: int) -> NDArray:
    """Coefficient matrix (T, p) with the first coefficient scaled by log(t)."""
    betas = np.tile(beta, (T, 1))
    betas[:, 0] = beta[0] * np.log(np.arange(1, T + 1))
    return betas


def survivor_constant(baseline: BaselineFunctions, exp_xb: NDArray) -> NDArray:
    """S_i(t) = exp(-ELP_i · H0(t)), shape (N, T)."""
    return np.exp(-np.outer(exp_xb, baseline.cumulative_hazard))


def survivor_varying(baseline: BaselineFunctions, exp_xb: NDArray) -> NDArray:
    """S_i(t) = exp(-cumsum(dH0 · ELP_i(t))) for ELP paths (N, T)."""
    dH = np.diff(baseline.cumulative_hazard, prepend=0.0)
    return np.exp(-np.cumsum(exp_xb * dH, axis=1))


def invert_survivor(
    survivor: NDArray,
    time: NDArray,
    rng: np.random.Generator,
) -> NDArray:
    """First grid time with S_i(t) <= U_i, or the last grid time."""
    u = rng.uniform(size=survivor.shape[0])
    below = survivor <= u[:, None]
    idx = np.where(below.any(axis=1), below.argmax(axis=1), len(time) - 1)
    return time[idx]


def censor_indicator(
    y: NDArray,
    censor: float,
    policy: str,
    rng: np.random.Generator,
) -> NDArray:
    """Event indicator with round(censor · N) subjects censored.

    policy "random" censors a uniform sample without replacement;
    "lowest" censors the shortest durations.
    """
    N = len(y)
    n_cens = int(round(censor * N))
    failed = np.ones(N)
    if n_cens == 0:
        return failed

    if policy == "random":
        chosen = rng.choice(N, size=n_cens, replace=False)
    elif policy == "lowest":
        chosen = np.argsort(y, kind='stable')[:n_cens]
    else:
        raise ValueError(f"Unknown censor policy: {policy!r}")

    failed[chosen] = 0.0
    return failed


def expected_durations_discrete(survivor: NDArray) -> NDArray:
    """E_i = 1 + Σ_{t=1}^{T-1} S_i(t) for durations on the grid 1..T."""
    return 1.0 + survivor[:, :-1].sum(axis=1)


def generate(design: SimulationDesign, rng: np.random.Generator) -> dict:
    """Draw one dataset. Returns the arrays of a SimulatedParams payload."""
    baseline = design.baseline
    time = baseline.time
    T = design.T
    beta = draw_beta(design, rng)

    if design.type == "tvc":
        paths = draw_tvc_paths(design, rng)
        X0 = paths[:, 0, :]
        exp_xb0 = np.exp(X0 @ beta)
        survivor = survivor_constant(baseline, exp_xb0)
        y = invert_survivor(survivor, time, rng)
        failed = censor_indicator(y, design.censor, design.censor_policy, rng)

        rows: CountingProcessRows = permutation_algorithm(y, failed, paths, beta, rng)
        xb = rows.X @ beta
        return dict(
            X=rows.X,
            y=rows.stop,
            failed=rows.failed,
            start=rows.start,
            id=rows.id,
            xb=xb,
            exp_xb=np.exp(xb),
            survivor=survivor,
            betas=beta.reshape(1, -1),
            subject_y=y.astype(np.float64),
            subject_failed=failed,
            covariate_paths=paths,
            assigned_path=rows.path,
        )

    X = design.X if design.X is not None else draw_covariates(design, rng)

    if design.type == "tvbeta":
        betas = tvbeta_coefficients(beta, T)
        xb = X @ betas.T                        # (N, T)
        exp_xb = np.exp(xb)
        survivor = survivor_varying(baseline, exp_xb)
    else:
        betas = beta.reshape(1, -1)
        xb = X @ beta
        exp_xb = np.exp(xb)
        survivor = survivor_constant(baseline, exp_xb)

    y = invert_survivor(survivor, time, rng).astype(np.float64)
    failed = censor_indicator(y, design.censor, design.censor_policy, rng)

    return dict(
        X=X,
        y=y,
        failed=failed,
        start=None,
        id=None,
        xb=xb,
        exp_xb=exp_xb,
        survivor=survivor,
        betas=betas,
        subject_y=y,
        subject_failed=failed,
    )


def counterfactual_survivor(
    baseline: BaselineFunctions,
    X: NDArray,
    betas: NDArray,
    sim_type: str,
) -> NDArray:
    """Survivor functions (N, T) of covariate rows under known coefficients."""
    if sim_type == "tvbeta":
        return survivor_varying(baseline, np.exp(X @ betas.T))
    return survivor_constant(baseline, np.exp(X @ betas[0]))
