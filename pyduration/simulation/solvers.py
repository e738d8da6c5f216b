"""
Public API for simulating duration data with known ground truth.

    baseline_build(T, knots) → BaselineFunctions
    baseline_from_hazard(hazard_fun, T) → BaselineFunctions
    generate_lm(baseline, ...) → SimulationSolution
    sim_survdata(...) → SimulationSolution | list[SimulationSolution]

Matches R's coxed::sim.survdata() and its helpers baseline.build() and
generate.lm().
"""

from __future__ import annotations

import warnings
from typing import Callable, Literal

import numpy as np

from pyduration.core.result import Result
from pyduration.core.compute.timing import Timer
from pyduration.core.exceptions import InvalidCovariateSpec, InvalidHorizon, ValidationError
from pyduration.core.validation import check_positive_int
from pyduration.expdur._baseline import hazard_baseline, spline_baseline
from pyduration.expdur._common import BaselineFunctions
from pyduration.simulation._common import CounterfactualEffect, SimulatedParams
from pyduration.simulation._generate import (
    counterfactual_survivor,
    expected_durations_discrete,
    generate,
)
from pyduration.simulation.design import SimulationDesign
from pyduration.simulation.solution import SimulationSolution

SeedLike = int | np.random.Generator | None


def baseline_build(
    T: int = 100,
    knots: int = 8,
    spline: bool = True,
    seed: SeedLike = None,
) -> BaselineFunctions:
    """Random smooth baseline hazard on the grid 1..T.

    Parameters
    ----------
    T : int
        Horizon, the largest possible duration.
    knots : int
        Number of random interior control points.
    spline : bool
        Monotone cubic interpolation (True) or linear (False).
    seed : int, Generator or None
        Random source.

    Raises
    ------
    InvalidHorizon
        If T < 2 or knots < 1.
    """
    return spline_baseline(T, knots, np.random.default_rng(seed), spline=spline)


def baseline_from_hazard(
    hazard_fun: Callable[[float], float],
    T: int = 100,
) -> BaselineFunctions:
    """Baseline from a user-specified hazard function on the grid 1..T."""
    if not callable(hazard_fun):
        raise ValidationError(
            f"hazard_fun must be callable, got {type(hazard_fun).__name__}"
        )
    return hazard_baseline(hazard_fun, T)


def generate_lm(
    baseline: BaselineFunctions,
    X=None,
    N: int | None = None,
    type: Literal["none", "tvc", "tvbeta"] = "none",
    beta=None,
    xvars: int | None = None,
    mu=0.0,
    sd=1.0,
    censor: float = 0.1,
    censor_policy: Literal["random", "lowest"] = "random",
    rng: SeedLike = None,
) -> SimulationSolution:
    """Simulate durations from a Cox model with a known baseline.

    Parameters
    ----------
    baseline : BaselineFunctions
        Generating baseline on the grid 1..T.
    X : array-like or None
        Covariates (N, p). Drawn N(mu, sd) when None. Ignored, with a
        warning, for type "tvc".
    N : int or None
        Number of subjects; defaults to the rows of X, else 1000.
    type : str
        "none" (constant covariates and coefficients), "tvc" (time-varying
        covariates in counting-process form) or "tvbeta" (first
        coefficient scaled by log(t)).
    beta : array-like or None
        Coefficients (p,). Drawn N(0, 0.1) when None.
    xvars : int or None
        Number of covariates when X is drawn (default: the length of
        beta when given, else 3).
    mu, sd : float or array-like
        Mean and standard deviation of drawn covariates, scalar or per
        column.
    censor : float
        Proportion of subjects censored, in [0, 1).
    censor_policy : str
        "random" (default) or "lowest" (the shortest durations).
    rng : int, Generator or None
        Random source.

    Returns
    -------
    SimulationSolution

    Raises
    ------
    InvalidCovariateSpec
        Inconsistent X, beta, xvars, mu, sd, or unknown type.
    InvalidCensorProportion
        censor outside [0, 1).
    """
    design = SimulationDesign.for_generate(
        baseline, X=X, N=N, type=type, beta=beta, xvars=xvars,
        mu=mu, sd=sd, censor=censor, censor_policy=censor_policy,
    )
    solution = _simulate(design, np.random.default_rng(rng))
    for msg in solution.warnings:
        warnings.warn(msg, UserWarning, stacklevel=2)
    return solution


def sim_survdata(
    N: int | None = None,
    T: int = 100,
    type: Literal["none", "tvc", "tvbeta"] = "none",
    hazard_fun: Callable[[float], float] | None = None,
    num_data_frames: int = 1,
    fixed_hazard: bool = False,
    knots: int = 8,
    spline: bool = True,
    X=None,
    beta=None,
    xvars: int | None = None,
    mu=0.0,
    sd=1.0,
    covariate: int = 0,
    low: float = 0.0,
    high: float = 1.0,
    compare: Literal["median", "mean"] | None = None,
    censor: float = 0.1,
    censor_policy: Literal["random", "lowest"] = "random",
    seed: SeedLike = None,
) -> SimulationSolution | list[SimulationSolution]:
    """Simulate duration datasets and their true marginal effect.

    Builds a baseline (a fresh random one per data frame unless
    ``fixed_hazard`` or ``hazard_fun`` is given), draws the data with
    :func:`generate_lm`, and computes the true change in expected
    duration from setting column ``covariate`` to ``low`` versus ``high``
    for every subject, summarised by ``compare`` (median by default).

    Returns
    -------
    SimulationSolution when ``num_data_frames == 1``, else a list of them.
    The marginal effect is None for type "tvc".
    """
    check_positive_int(num_data_frames, "num_data_frames")
    if compare is None:
        compare = "median"
    if compare not in ("median", "mean"):
        raise ValidationError(f"compare must be 'median' or 'mean', got {compare!r}")
    if hazard_fun is None and (T < 2 or knots < 1):
        raise InvalidHorizon(
            f"baseline requires T >= 2 and knots >= 1, got T={T}, knots={knots}",
            T=T,
            knots=knots,
        )

    rng = np.random.default_rng(seed)

    if hazard_fun is not None:
        fixed = baseline_from_hazard(hazard_fun, T)
    elif fixed_hazard:
        fixed = spline_baseline(T, knots, rng, spline=spline)
    else:
        fixed = None

    out = []
    for frame in range(num_data_frames):
        baseline = fixed if fixed is not None else spline_baseline(T, knots, rng, spline=spline)
        design = SimulationDesign.for_generate(
            baseline, X=X, N=N, type=type, beta=beta, xvars=xvars,
            mu=mu, sd=sd, censor=censor, censor_policy=censor_policy,
        )
        valid_index = (
            isinstance(covariate, (int, np.integer))
            and not isinstance(covariate, bool)
            and 0 <= covariate < design.p
        )
        if not valid_index:
            raise InvalidCovariateSpec(
                f"covariate must be a column index in [0, {design.p}), got {covariate!r}"
            )
        out.append(
            _simulate(design, rng, effect=(covariate, float(low), float(high), compare))
        )

    for msg in out[0].warnings:
        warnings.warn(msg, UserWarning, stacklevel=2)

    return out[0] if num_data_frames == 1 else out


def _simulate(
    design: SimulationDesign,
    rng: np.random.Generator,
    effect: tuple[int, float, float, str] | None = None,
) -> SimulationSolution:
    """Draw one dataset and wrap it in a SimulationSolution."""
    timer = Timer()
    timer.start()

    with timer.section('generate'):
        arrays = generate(design, rng)

    warnings_list = []
    if design.dropped_X:
        warnings_list.append(
            "X is ignored for type='tvc'; time-varying covariates are generated "
            "internally"
        )

    counterfactual = None
    if effect is not None and design.type != "tvc":
        with timer.section('marginal_effect'):
            counterfactual = _true_effect(design, arrays, *effect)

    timer.stop()

    params = SimulatedParams(
        tvc=design.type == "tvc",
        type=design.type,
        baseline=design.baseline,
        effect=counterfactual,
        **arrays,
    )

    result = Result(
        params=params,
        info={
            'type': design.type,
            'N': design.N,
            'T': design.T,
            'n_rows': len(params.y),
            'n_censored': int(round(design.censor * design.N)),
            'censor_policy': design.censor_policy,
        },
        timing=timer.result(),
        backend_name='cpu_simulation',
        warnings=tuple(warnings_list),
    )
    return SimulationSolution(_result=result, _design=design)


def _true_effect(
    design: SimulationDesign,
    arrays: dict,
    covariate: int,
    low: float,
    high: float,
    compare: str,
) -> CounterfactualEffect:
    """Known-baseline change in expected duration, low to high."""
    X_low = arrays['X'].copy()
    X_high = arrays['X'].copy()
    X_low[:, covariate] = low
    X_high[:, covariate] = high

    betas = arrays['betas']
    e_low = expected_durations_discrete(
        counterfactual_survivor(design.baseline, X_low, betas, design.type)
    )
    e_high = expected_durations_discrete(
        counterfactual_survivor(design.baseline, X_high, betas, design.type)
    )
    ind_me = e_high - e_low
    summary = np.median(ind_me) if compare == "median" else np.mean(ind_me)

    return CounterfactualEffect(
        covariate=covariate,
        low=low,
        high=high,
        exp_dur_low=e_low,
        exp_dur_high=e_high,
        ind_me=ind_me,
        marg_effect=float(summary),
        compare=compare,
    )
