"""
CPU backend for bootstrapping expected durations.

CPUBootstrapBackend: resamples rows (or whole subjects), refits the Cox
model on each resample and reruns the expected-duration engine with the
refitted coefficients. Replicates are independent joblib tasks.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np
from joblib import Parallel, delayed
from numpy.typing import NDArray

from pyduration.core.exceptions import NumericalError, PyDurationError
from pyduration.core.result import Result
from pyduration.core.compute.timing import Timer
from pyduration.expdur.design import ExpDurDesign
from pyduration.montecarlo._ci import bootstrap_se, compute_ci
from pyduration.montecarlo._common import BootParams
from pyduration.montecarlo.design import BootstrapDesign
from pyduration.survival._cox import cox_fit

# Failures of a single replicate that drop it instead of aborting the run
REPLICATE_ERRORS = (PyDurationError, np.linalg.LinAlgError, FloatingPointError)


class CPUBootstrapBackend:
    """
    CPU backend for expected-duration bootstrap.

    All index draws are made up front from one seeded generator, so the
    replicates are identical for a given seed whatever ``n_jobs`` is.
    """

    @property
    def name(self) -> str:
        return 'cpu_bootstrap'

    def solve(self, design: BootstrapDesign) -> Result[BootParams]:
        """Run the bootstrap and return Result[BootParams]."""
        timer = Timer()
        timer.start()

        rng = np.random.default_rng(design.seed)
        expdur = design.expdur

        with timer.section('index_draws'):
            if expdur.id is not None:
                draws = [
                    _cluster_sample(expdur.id, rng) for _ in range(design.B)
                ]
            else:
                draws = [
                    (rng.choice(expdur.n, size=expdur.n, replace=True), None)
                    for _ in range(design.B)
                ]

        with timer.section('bootstrap_replicates'):
            replicates = Parallel(n_jobs=design.n_jobs)(
                delayed(_replicate)(expdur, design.backend, design.newdata2, b_ind, b_id)
                for b_ind, b_id in draws
            )

        kept = [r for r in replicates if r is not None]
        n_dropped = design.B - len(kept)
        if not kept:
            raise NumericalError(
                f"all {design.B} bootstrap replicates failed"
            )

        with timer.section('summary_statistics'):
            t = np.vstack(kept)
            se = bootstrap_se(t)
            ci = compute_ci(design.t0, t, se, design.confidence, design.level)

        timer.stop()

        warnings_list: list[str] = []
        if n_dropped:
            warnings_list.append(
                f"{n_dropped} of {design.B} bootstrap replicates failed and "
                f"were dropped"
            )
        if len(kept) < 2:
            warnings_list.append(
                "fewer than 2 successful replicates; standard errors are undefined"
            )

        params = BootParams(
            t0=design.t0,
            t=t,
            B=design.B,
            n_dropped=n_dropped,
            se=se,
            ci=ci,
            confidence=design.confidence,
            conf_level=design.level,
        )

        return Result(
            params=params,
            info={
                'B': design.B,
                'n_dropped': n_dropped,
                'cluster': expdur.id is not None,
                'n_jobs': design.n_jobs,
                'engine': design.backend.name,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def _cluster_sample(
    ids: NDArray,
    rng: np.random.Generator,
) -> tuple[NDArray, NDArray]:
    """Resample whole subjects with replacement.

    Returns the row indices of the drawn subjects and a fresh label per
    draw, so a subject drawn twice counts as two subjects.
    """
    unique_ids, inverse = np.unique(ids, return_inverse=True)
    n_subj = len(unique_ids)
    order = np.argsort(inverse, kind='stable')
    bounds = np.searchsorted(inverse[order], np.arange(n_subj + 1))

    chosen = rng.choice(n_subj, size=n_subj, replace=True)
    rows = [order[bounds[s]:bounds[s + 1]] for s in chosen]

    b_ind = np.concatenate(rows)
    b_id = np.repeat(np.arange(n_subj), [len(r) for r in rows])
    return b_ind, b_id


def _replicate(
    expdur: ExpDurDesign,
    backend,
    newdata2: NDArray | None,
    b_ind: NDArray,
    b_id: NDArray | None,
) -> NDArray | None:
    """One bootstrap replicate: refit, rerun, summarise.

    Returns the expected-duration vector followed by its mean and median,
    or None if the replicate failed.
    """
    model = expdur.model
    start = None if model.start is None else model.start[b_ind]

    try:
        fit = cox_fit(
            model.time[b_ind], model.event[b_ind], model.X[b_ind],
            start=start,
            ties=getattr(model, 'ties', 'efron'),
        )
        draw = replace(expdur, coef=fit.coefficients, b_ind=b_ind, b_id=b_id)
        exp_dur = backend.solve(draw).params.exp_dur
        if newdata2 is not None:
            exp_dur = backend.solve(replace(draw, newdata=newdata2)).params.exp_dur - exp_dur
    except REPLICATE_ERRORS:
        return None

    if not np.all(np.isfinite(exp_dur)):
        return None

    return np.concatenate((exp_dur, [np.mean(exp_dur), np.median(exp_dur)]))
