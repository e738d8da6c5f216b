"""
Public API for expected durations from a fitted Cox model.

    expected_durations(model) → ExpDurSolution
    marginal_effect(model, newdata, newdata2) → MarginalEffectSolution

Matches R's coxed() with method = "npsf" or "gam". The engine backend is
selected once here; the bootstrap driver reruns the same backend on
resampled data.
"""

from __future__ import annotations

import warnings
from typing import Literal

import numpy as np

from pyduration.core.result import Result
from pyduration.core.compute.timing import Timer
from pyduration.core.exceptions import (
    DimensionError,
    MissingIdError,
    OutOfRangeWarning,
    ValidationError,
)
from pyduration.core.validation import check_conf_level, check_positive_int
from pyduration.expdur._common import ExpDurParams
from pyduration.expdur.backends.cpu import CPUGAMBackend, CPUNPSFBackend
from pyduration.expdur.design import ExpDurDesign
from pyduration.expdur.solution import ExpDurSolution, MarginalEffectSolution


def expected_durations(
    model,
    *,
    method: Literal["npsf", "gam"] = "npsf",
    newdata=None,
    bootstrap: bool = False,
    B: int = 200,
    confidence: Literal["studentized", "empirical"] = "studentized",
    level: float = 0.95,
    id=None,
    k: int = 10,
    seed: int | None = None,
    n_jobs: int = 1,
) -> ExpDurSolution:
    """Expected durations implied by a Cox proportional hazards model.

    Parameters
    ----------
    model : FittedModel
        Fitted Cox model, e.g. the output of ``pyduration.survival.coxph``.
    method : str
        "npsf" (nonparametric step function baseline, default) or "gam"
        (smooth regression of duration on risk rank).
    newdata : array-like or None
        Covariate rows (m, p) to predict for. None predicts for the
        estimation sample.
    bootstrap : bool
        Compute bootstrap standard errors and intervals.
    B : int
        Number of bootstrap replicates.
    confidence : str
        "studentized" (estimate ± z·se) or "empirical" (percentile).
    level : float
        Confidence level for bootstrap intervals and the GAM band.
    id : array-like or None
        Subject id of each estimation row. Required for counting-process
        models when predicting for newdata or bootstrapping.
    k : int
        GAM basis dimension.
    seed : int or None
        Bootstrap random seed.
    n_jobs : int
        joblib workers for the bootstrap.

    Returns
    -------
    ExpDurSolution

    Raises
    ------
    ValidationError
        On invalid options (raised before any computation).
    MissingIdError
        Counting-process model without ``id`` where one is required.
    DegenerateFitError
        GAM with fewer than 5 distinct failure ranks.
    """
    if bootstrap:
        _check_bootstrap_options(model, B, confidence, level, id)

    design = ExpDurDesign.for_expdur(
        model, method=method, newdata=newdata, id=id, k=k, level=level,
        context="newdata",
    )
    backend = _get_backend(method)

    timer = Timer()
    timer.start()

    with timer.section('point_estimate'):
        point = backend.solve(design)

    exp_dur = point.params.exp_dur
    warnings_list = list(point.warnings)
    for msg in point.warnings:
        warnings.warn(msg, OutOfRangeWarning, stacklevel=2)

    info = dict(point.info)
    info['bootstrap'] = bootstrap
    boot = None
    if bootstrap:
        from pyduration.montecarlo.solvers import boot_expdur

        with timer.section('bootstrap'):
            boot = boot_expdur(
                design, backend, _with_summaries(exp_dur),
                B=B, confidence=confidence, level=level,
                seed=seed, n_jobs=n_jobs,
            )
        warnings_list.extend(boot.warnings)
        info['n_dropped'] = boot.n_dropped

    timer.stop()

    params = _build_params(exp_dur, point.params, boot, confidence, level)

    result = Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name=backend.name,
        warnings=tuple(warnings_list),
    )
    return ExpDurSolution(_result=result, _design=design)


def marginal_effect(
    model,
    newdata,
    newdata2,
    *,
    method: Literal["npsf", "gam"] = "npsf",
    bootstrap: bool = False,
    B: int = 200,
    confidence: Literal["studentized", "empirical"] = "studentized",
    level: float = 0.95,
    id=None,
    k: int = 10,
    seed: int | None = None,
    n_jobs: int = 1,
) -> MarginalEffectSolution:
    """Change in expected duration from newdata to newdata2.

    Both matrices are evaluated under the same fitted model and the
    elementwise difference exp_dur(newdata2) - exp_dur(newdata) is
    reported. Options are as for :func:`expected_durations`.

    Returns
    -------
    MarginalEffectSolution

    Raises
    ------
    DimensionError
        If newdata and newdata2 differ in shape.
    MissingIdError
        Counting-process model without ``id``.
    """
    if newdata is None or newdata2 is None:
        raise ValidationError("marginal_effect requires both newdata and newdata2")

    if bootstrap:
        _check_bootstrap_options(model, B, confidence, level, id)

    design1 = ExpDurDesign.for_expdur(
        model, method=method, newdata=newdata, id=id, k=k, level=level,
        context="marginal_effect",
    )
    design2 = ExpDurDesign.for_expdur(
        model, method=method, newdata=newdata2, id=id, k=k, level=level,
        context="marginal_effect",
    )
    if design1.newdata.shape != design2.newdata.shape:
        raise DimensionError(
            f"newdata and newdata2 must have the same shape, got "
            f"{design1.newdata.shape} and {design2.newdata.shape}"
        )
    backend = _get_backend(method)

    timer = Timer()
    timer.start()

    with timer.section('point_estimate'):
        point1 = backend.solve(design1)
        point2 = backend.solve(design2)

    exp_dur1 = point1.params.exp_dur
    exp_dur2 = point2.params.exp_dur
    difference = exp_dur2 - exp_dur1

    warnings_list = list(point1.warnings) + list(point2.warnings)
    for msg in warnings_list:
        warnings.warn(msg, OutOfRangeWarning, stacklevel=2)

    info = dict(point1.info)
    info['n_out_of_range'] = (
        point1.params.n_out_of_range + point2.params.n_out_of_range
    )
    info['bootstrap'] = bootstrap
    boot = None
    if bootstrap:
        from pyduration.montecarlo.solvers import boot_expdur

        with timer.section('bootstrap'):
            boot = boot_expdur(
                design1, backend, _with_summaries(difference),
                B=B, confidence=confidence, level=level,
                newdata2=design2.newdata, seed=seed, n_jobs=n_jobs,
            )
        warnings_list.extend(boot.warnings)
        info['n_dropped'] = boot.n_dropped

    timer.stop()

    params = _build_params(
        difference, point1.params, boot, confidence, level,
        exp_dur1=exp_dur1, exp_dur2=exp_dur2,
    )

    result = Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name=backend.name,
        warnings=tuple(warnings_list),
    )
    return MarginalEffectSolution(_result=result, _design=design1)


def _get_backend(method: str):
    """Select the engine backend for a method."""
    if method == "npsf":
        return CPUNPSFBackend()
    if method == "gam":
        return CPUGAMBackend()
    raise ValidationError(f"method must be 'npsf' or 'gam', got {method!r}")


def _check_bootstrap_options(model, B, confidence, level, id) -> None:
    check_positive_int(B, "B")
    check_conf_level(level)
    if confidence not in ("studentized", "empirical"):
        raise ValidationError(
            f"confidence must be 'studentized' or 'empirical', got {confidence!r}"
        )
    if getattr(model, 'start', None) is not None and id is None:
        raise MissingIdError(
            "bootstrap on a counting-process model requires an id vector "
            "so that whole subjects are resampled",
            context="bootstrap",
        )


def _with_summaries(exp_dur: np.ndarray) -> np.ndarray:
    """Expected-duration vector followed by its mean and median."""
    return np.concatenate((exp_dur, [np.mean(exp_dur), np.median(exp_dur)]))


def _build_params(
    exp_dur,
    engine,
    boot,
    confidence: str,
    level: float,
    exp_dur1=None,
    exp_dur2=None,
) -> ExpDurParams:
    common = dict(
        exp_dur=exp_dur,
        mean=float(np.mean(exp_dur)),
        median=float(np.median(exp_dur)),
        baseline=engine.baseline,
        risk_set=engine.risk_set,
        gam_fit=engine.gam_fit,
        subject_ids=engine.subject_ids,
        exp_dur1=exp_dur1,
        exp_dur2=exp_dur2,
    )

    if boot is None:
        return ExpDurParams(
            se=None, ci=None,
            mean_se=None, mean_ci=None,
            median_se=None, median_ci=None,
            **common,
        )

    return ExpDurParams(
        se=boot.exp_dur_se,
        ci=boot.exp_dur_ci,
        mean_se=boot.mean_se,
        mean_ci=boot.mean_ci,
        median_se=boot.median_se,
        median_ci=boot.median_ci,
        B=boot.B,
        n_dropped=boot.n_dropped,
        confidence=confidence,
        conf_level=level,
        **common,
    )
