"""
Helpers for counting-process (start, stop] data with time-varying covariates.

Rows belong to subjects through an id vector. Expected durations are
reported per subject: the NPSF engine follows each subject's
piecewise-constant ELP path over the baseline grid, and the GAM engine
collapses each subject to one (duration, failed, lp) record.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class SubjectTable:
    """One record per subject, ordered by sorted unique id."""

    ids: NDArray            # (s,): unique subject ids
    duration: NDArray       # (s,): last stop time
    failed: NDArray         # (s,): event indicator on the last row
    lp: NDArray             # (s,): exposure-weighted mean linear predictor


def collapse_subjects(
    ids: NDArray,
    start: NDArray,
    stop: NDArray,
    event: NDArray,
    lp: NDArray,
) -> SubjectTable:
    """Collapse interval rows to one record per subject.

    The subject's linear predictor is the mean of its row predictors,
    weighted by the length of each (start, stop] interval.
    """
    unique_ids, inverse = np.unique(ids, return_inverse=True)
    n_subj = len(unique_ids)

    width = stop - start
    total = np.bincount(inverse, weights=width, minlength=n_subj)
    weighted = np.bincount(inverse, weights=width * lp, minlength=n_subj)

    # Last row of each subject: largest stop
    order = np.lexsort((stop, inverse))
    bounds = np.searchsorted(inverse[order], np.arange(1, n_subj + 1))
    last = order[bounds - 1]

    return SubjectTable(
        ids=unique_ids,
        duration=stop[last].astype(np.float64),
        failed=event[last].astype(np.float64),
        lp=weighted / total,
    )


def subject_elp_paths(
    ids: NDArray,
    stop: NDArray,
    elp: NDArray,
    grid: NDArray,
) -> tuple[NDArray, NDArray]:
    """ELP of every subject at every grid time.

    At grid time t a subject carries the ELP of its first row with
    stop >= t. Beyond the subject's last stop the last row's ELP is
    carried forward.

    Returns
    -------
    ids : NDArray
        (s,) unique subject ids.
    paths : NDArray
        (s, m) ELP matrix.
    """
    unique_ids, inverse = np.unique(ids, return_inverse=True)
    paths = np.empty((len(unique_ids), len(grid)), dtype=np.float64)

    order = np.lexsort((stop, inverse))
    bounds = np.searchsorted(inverse[order], np.arange(len(unique_ids) + 1))

    for s in range(len(unique_ids)):
        rows = order[bounds[s]:bounds[s + 1]]
        pos = np.searchsorted(stop[rows], grid, side='left')
        np.minimum(pos, len(rows) - 1, out=pos)
        paths[s] = elp[rows][pos]

    return unique_ids, paths
