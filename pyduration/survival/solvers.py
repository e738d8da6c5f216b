"""
Public API for Cox model fitting.

    coxph(time, event, X) → CoxSolution

The fitted CoxSolution is the model handle consumed by
pyduration.expdur.expected_durations() and by the bootstrap driver.
"""

from __future__ import annotations

import warnings
from typing import Literal

from pyduration.core.result import Result
from pyduration.core.compute.timing import Timer
from pyduration.survival.design import SurvivalDesign
from pyduration.survival._cox import cox_fit
from pyduration.survival.solution import CoxSolution


def coxph(
    time,
    event,
    X,
    *,
    start=None,
    ties: Literal["efron", "breslow"] = "efron",
    tol: float = 1e-9,
    max_iter: int = 20,
) -> CoxSolution:
    """Cox proportional hazards model.

    CPU only. Matches R's survival::coxph(), including counting-process
    Surv(start, stop, event) data.

    Parameters
    ----------
    time : array-like
        Time to event or censoring (stop time for counting-process rows).
    event : array-like
        Event indicator (1=event, 0=censored).
    X : array-like
        Covariate matrix (n, p). No intercept: Cox model has no intercept.
    start : array-like or None
        Entry times for time-varying covariate data in (start, stop] form.
    ties : str
        Method for handling tied event times: "efron" (default) or "breslow".
    tol : float
        Convergence tolerance for Newton-Raphson.
    max_iter : int
        Maximum Newton-Raphson iterations.

    Returns
    -------
    CoxSolution
    """
    design = SurvivalDesign.for_survival(time, event, X, start=start)

    if ties not in ("efron", "breslow"):
        raise ValueError(
            f"ties must be 'efron' or 'breslow', got '{ties}'"
        )

    timer = Timer()
    timer.start()

    with timer.section('newton_raphson'):
        params = cox_fit(
            design.time, design.event, design.X,
            start=design.start,
            ties=ties,
            tol=tol,
            max_iter=max_iter,
        )

    timer.stop()

    warnings_list = []
    if not params.converged:
        msg = f"Newton-Raphson did not converge in {max_iter} iterations"
        warnings_list.append(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    result = Result(
        params=params,
        info={
            "method": "Cox PH",
            "ties": ties,
            "n_iter": params.n_iter,
            "counting_process": design.is_counting_process,
        },
        timing=timer.result(),
        backend_name="cpu_cox",
        warnings=tuple(warnings_list),
    )

    return CoxSolution(_result=result, _design=design)
