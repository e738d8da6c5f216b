"""
Bootstrap confidence interval computation.

Two interval types, matching R's coxed() bootstrap options:
- studentized: normal approximation centred on the point estimate,
  t0 ± z_{1-alpha/2} * se
- empirical: percentile method, [Q(alpha/2), Q(1-alpha/2)] of the
  replicates
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats


def bootstrap_se(t: NDArray) -> NDArray:
    """Replicate standard deviation per statistic (ddof=1).

    NaN when fewer than two replicates are available.
    """
    if t.shape[0] < 2:
        return np.full(t.shape[1], np.nan)
    return np.std(t, axis=0, ddof=1)


def compute_ci(
    t0: NDArray,
    t: NDArray,
    se: NDArray,
    confidence: str,
    conf_level: float,
) -> NDArray:
    """
    Compute bootstrap confidence intervals.

    Args:
        t0: Point estimates, shape (k,).
        t: Replicates, shape (B, k).
        se: Bootstrap standard errors, shape (k,).
        confidence: "studentized" or "empirical".
        conf_level: Confidence level (e.g., 0.95).

    Returns:
        NDArray of shape (k, 2), lower and upper bounds.
    """
    alpha = 1.0 - conf_level

    if confidence == "studentized":
        return _ci_studentized(t0, se, alpha)
    if confidence == "empirical":
        return _ci_percentile(t, alpha)
    raise ValueError(f"Unknown CI type: {confidence!r}")


def _ci_studentized(t0: NDArray, se: NDArray, alpha: float) -> NDArray:
    """
    Normal-theory interval around the point estimate.

    CI = [t0 - z_{1-alpha/2} * se, t0 + z_{1-alpha/2} * se]
    """
    z = sp_stats.norm.ppf(1.0 - alpha / 2.0)
    return np.column_stack((t0 - z * se, t0 + z * se))


def _ci_percentile(t: NDArray, alpha: float) -> NDArray:
    """
    Percentile bootstrap CI.

    CI = [Q(alpha/2), Q(1-alpha/2)]
    """
    q = np.quantile(t, [alpha / 2.0, 1.0 - alpha / 2.0], axis=0)
    return q.T.copy()
