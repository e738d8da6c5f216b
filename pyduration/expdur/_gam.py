"""
GAM expected durations: smooth regression of duration on risk rank.

The training observations are ranked by their linear predictor, highest
risk first, so rank 1 is the observation expected to fail soonest. A
penalized cubic spline of observed duration on rank is fit to the
uncensored observations, and each target's expected duration is the
curve evaluated at its rank. Targets outside the training sample get a
rank by interpolating their linear predictor against the training
(linear predictor, rank) pairs.

References:
    Kropko, J. and Harden, J. J. (2020). Beyond the hazard ratio:
        generating expected durations from the Cox proportional hazards
        model. British Journal of Political Science, 50(1), 303-320.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pyduration.core.exceptions import DegenerateFitError
from pyduration.expdur._common import EngineParams, GamFitTable
from pyduration.expdur._pspline import fit_pspline
from pyduration.expdur._tvc import collapse_subjects
from pyduration.expdur.design import ExpDurDesign

MIN_DISTINCT_RANKS = 5


def gam_fit(design: ExpDurDesign) -> EngineParams:
    """Run the GAM engine on a design.

    The curve is fit on the training rows (the bootstrap resample when
    ``b_ind`` is set). Targets are ``newdata`` when given, otherwise the
    full estimation sample under ``coef``.
    """
    model = design.model
    coef = design.coef
    rows = design.training_rows()

    lp = model.linear_predictor(coef=coef)

    if design.by_subject:
        train = collapse_subjects(
            design.training_ids(), model.start[rows], model.time[rows],
            model.event[rows], lp[rows],
        )
        train_lp, duration, failed = train.lp, train.duration, train.failed
    else:
        train_lp = lp[rows]
        duration = model.time[rows].astype(np.float64)
        failed = model.event[rows].astype(np.float64)

    rank = stats.rankdata(-train_lp, method='ordinal').astype(np.float64)

    fit_mask = failed == 1
    n_distinct = len(np.unique(rank[fit_mask]))
    if n_distinct < MIN_DISTINCT_RANKS:
        raise DegenerateFitError(
            f"GAM needs at least {MIN_DISTINCT_RANKS} distinct ranks among "
            f"failed observations, got {n_distinct}",
            n_distinct=n_distinct,
            min_required=MIN_DISTINCT_RANKS,
        )

    spline = fit_pspline(rank[fit_mask], duration[fit_mask], min(design.k, n_distinct))

    z = stats.norm.ppf(1.0 - (1.0 - design.level) / 2.0)
    order = np.argsort(rank)
    fitted, se = spline.predict_se(rank[order])
    table = GamFitTable(
        rank=rank[order],
        duration=duration[order],
        failed=failed[order],
        fitted=fitted,
        fitted_lower=fitted - z * se,
        fitted_upper=fitted + z * se,
    )

    # Targets
    subject_ids = None
    in_sample = design.newdata is None and design.b_ind is None
    target_lp = lp if design.newdata is None else model.linear_predictor(design.newdata, coef=coef)

    if design.by_subject:
        target = collapse_subjects(
            design.id, model.start, model.time, model.event, target_lp,
        )
        subject_ids, target_lp = target.ids, target.lp

    n_out_of_range = 0
    if in_sample:
        target_rank = rank
    else:
        target_rank, n_out_of_range = rank_from_lp(train_lp, rank, target_lp)

    return EngineParams(
        exp_dur=spline.predict(target_rank),
        baseline=None,
        risk_set=None,
        gam_fit=table,
        n_out_of_range=n_out_of_range,
        subject_ids=subject_ids,
    )


def rank_from_lp(
    train_lp: NDArray,
    train_rank: NDArray,
    target_lp: NDArray,
) -> tuple[NDArray, int]:
    """Map linear predictors to training ranks by linear interpolation.

    Tied training predictors collapse to their mean rank. Targets outside
    the training range take the boundary rank.

    Returns:
        (ranks, number of targets outside the training range)
    """
    uniq, inverse = np.unique(train_lp, return_inverse=True)
    mean_rank = (
        np.bincount(inverse, weights=train_rank, minlength=len(uniq))
        / np.bincount(inverse, minlength=len(uniq))
    )

    outside = (target_lp < uniq[0]) | (target_lp > uniq[-1])
    return np.interp(target_lp, uniq, mean_rank), int(np.sum(outside))
