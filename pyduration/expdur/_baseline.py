"""
Baseline cumulative hazard and survivor functions.

Two constructions share the BaselineFunctions payload:

Step-function mode (estimation, Cox and Oakes 1984, pp. 107-109):
    Ĥ0(t) = Σ_{τ_j <= t} d_j / Σ_{l ∈ R(τ_j)} ψ̂(l)

    where d_j is the number of failures at τ_j, R(τ_j) the risk set at τ_j
    and ψ̂(l) = exp(x_l β̂) the exponentiated linear predictor (ELP). The
    estimate is flat between failure times; censor-only times enlarge the
    risk set but add nothing to the hazard.

Smooth mode (simulation):
    A monotone cubic (PCHIP) curve through randomly placed control points
    of the cumulative hazard on the integer grid 1..T.

In both, Ŝ0(t) = exp(-Ĥ0(t)).

References:
    Cox, D. R. and Oakes, D. (1984). Analysis of Survival Data. Chapman & Hall.
    Fritsch, F. N. and Carlson, R. E. (1980). Monotone piecewise cubic
        interpolation. SIAM J. Numer. Anal., 17(2), 238-246.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import NDArray
from scipy.interpolate import PchipInterpolator

from pyduration.core.exceptions import InvalidHorizon, ValidationError
from pyduration.expdur._common import BaselineFunctions, RiskSetTable

# Survivor probability at the horizon T of a simulated baseline
TERMINAL_SURVIVOR = 1e-3


def risk_set_table(
    time: NDArray,
    event: NDArray,
    exp_xb: NDArray,
    start: NDArray | None = None,
) -> RiskSetTable:
    """Aggregate failures and risk-set exposure by distinct time.

    Parameters
    ----------
    time : NDArray
        (n,) observed (stop) times.
    event : NDArray
        (n,) event indicator.
    exp_xb : NDArray
        (n,) exponentiated linear predictors.
    start : NDArray or None
        (n,) entry times for counting-process rows. A row is at risk at t
        when start < t <= stop.

    Returns
    -------
    RiskSetTable
    """
    distinct, inverse = np.unique(time, return_inverse=True)
    n_failures = np.bincount(inverse, weights=event, minlength=len(distinct))
    exposure = np.bincount(inverse, weights=exp_xb, minlength=len(distinct))

    # Reverse cumulative sum: exposure of rows with stop >= t
    risk_size = np.cumsum(exposure[::-1])[::-1]

    if start is not None:
        # Remove rows that have not entered yet (start >= t)
        order = np.argsort(start, kind="stable")
        s_sorted = start[order]
        tail = np.concatenate((np.cumsum(exp_xb[order][::-1])[::-1], [0.0]))
        late = tail[np.searchsorted(s_sorted, distinct, side="left")]
        risk_size = risk_size - late

    return RiskSetTable(
        time=distinct,
        n_failures=n_failures,
        risk_size=risk_size,
    )


def step_baseline(table: RiskSetTable) -> BaselineFunctions:
    """Step-function cumulative hazard and survivor from a risk-set table."""
    with np.errstate(divide='ignore', invalid='ignore'):
        increments = np.where(
            table.n_failures > 0,
            table.n_failures / table.risk_size,
            0.0,
        )
    cbh = np.cumsum(increments)

    return BaselineFunctions(
        time=table.time.astype(np.float64),
        cumulative_hazard=cbh,
        survivor=np.exp(-cbh),
    )


def spline_baseline(
    T: int,
    knots: int,
    rng: np.random.Generator,
    spline: bool = True,
) -> BaselineFunctions:
    """Random smooth baseline on the grid 1..T.

    Knot times are drawn without replacement from the interior of the grid.
    Failure-CDF heights at the knots are sorted uniforms, converted to
    cumulative hazard control points H = -log(1 - F), pinned at H(1) = 0
    and S(T) = TERMINAL_SURVIVOR.

    Parameters
    ----------
    T : int
        Horizon (largest possible duration).
    knots : int
        Number of interior control points. Capped at T - 2.
    rng : np.random.Generator
        Random source.
    spline : bool
        Monotone cubic interpolation if True, linear if False.

    Raises
    ------
    InvalidHorizon
        If T < 2 or knots < 1.
    """
    if T < 2 or knots < 1:
        raise InvalidHorizon(
            f"baseline requires T >= 2 and knots >= 1, got T={T}, knots={knots}",
            T=T,
            knots=knots,
        )

    time = np.arange(1, T + 1, dtype=np.float64)
    n_knots = min(knots, T - 2)

    knot_times = np.sort(rng.choice(np.arange(2, T), size=n_knots, replace=False))
    heights = np.sort(rng.uniform(0.0, 1.0, size=n_knots)) * (1.0 - TERMINAL_SURVIVOR)

    ctrl_t = np.concatenate(([1.0], knot_times, [float(T)]))
    ctrl_cdf = np.concatenate(([0.0], heights, [1.0 - TERMINAL_SURVIVOR]))
    ctrl_h = -np.log1p(-ctrl_cdf)

    if spline:
        cbh = PchipInterpolator(ctrl_t, ctrl_h)(time)
    else:
        cbh = np.interp(time, ctrl_t, ctrl_h)

    cbh = np.maximum.accumulate(np.maximum(cbh, 0.0))

    return BaselineFunctions(
        time=time,
        cumulative_hazard=cbh,
        survivor=np.exp(-cbh),
    )


def hazard_baseline(
    hazard_fun: Callable[[float], float],
    T: int,
) -> BaselineFunctions:
    """Baseline from a user-supplied hazard function on the grid 1..T.

    The cumulative hazard is the running sum of hazard_fun(t).

    Raises
    ------
    InvalidHorizon
        If T < 2.
    ValidationError
        If the hazard is negative or not finite anywhere on the grid.
    """
    if T < 2:
        raise InvalidHorizon(f"baseline requires T >= 2, got T={T}", T=T)

    time = np.arange(1, T + 1, dtype=np.float64)
    hazard = np.array([hazard_fun(t) for t in time], dtype=np.float64)

    if not np.all(np.isfinite(hazard)):
        raise ValidationError("hazard_fun returned non-finite values")
    if np.any(hazard < 0):
        bad = time[hazard < 0]
        raise ValidationError(
            f"hazard_fun must be non-negative, got negative values at t={bad[:5].tolist()}"
        )

    cbh = np.cumsum(hazard)

    return BaselineFunctions(
        time=time,
        cumulative_hazard=cbh,
        survivor=np.exp(-cbh),
    )
