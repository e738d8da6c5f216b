"""
Public API for bootstrapping expected durations.

    boot_expdur(design, backend, t0) → BootstrapSolution

Usually reached through expected_durations(..., bootstrap=True) and
marginal_effect(..., bootstrap=True), which compute the point estimates
and pass the engine design and backend along.
"""

from __future__ import annotations

import warnings
from typing import Literal

from pyduration.expdur.design import ExpDurDesign
from pyduration.montecarlo.backends.cpu import CPUBootstrapBackend
from pyduration.montecarlo.design import BootstrapDesign
from pyduration.montecarlo.solution import BootstrapSolution


def boot_expdur(
    design: ExpDurDesign,
    backend,
    t0,
    *,
    B: int = 200,
    confidence: Literal["studentized", "empirical"] = "studentized",
    level: float = 0.95,
    newdata2=None,
    seed: int | None = None,
    n_jobs: int = 1,
) -> BootstrapSolution:
    """
    Bootstrap standard errors and intervals for expected durations.

    Each replicate draws N rows with replacement (whole subjects when the
    design carries an id vector), refits the Cox model on the resample and
    reruns the engine with the refitted coefficients. Predictions are made
    for the same targets as the point estimate.

    Args:
        design: Engine design used for the point estimate.
        backend: Engine backend (CPUNPSFBackend or CPUGAMBackend).
        t0: Point estimates: expected-duration vector, then its mean and
            median.
        B: Number of replicates.
        confidence: "studentized" (t0 ± z·se) or "empirical" (percentile).
        level: Confidence level in (0, 1).
        newdata2: When given, each replicate records the difference of
            predictions on newdata2 and design.newdata.
        seed: Random seed for the index draws.
        n_jobs: joblib workers; results are identical for any value.

    Returns:
        BootstrapSolution

    Raises:
        ValidationError: If options are invalid.
        MissingIdError: Counting-process model without an id vector.
        NumericalError: If every replicate fails.
    """
    boot_design = BootstrapDesign.for_bootstrap(
        design, backend, t0,
        B=B,
        confidence=confidence,
        level=level,
        newdata2=newdata2,
        seed=seed,
        n_jobs=n_jobs,
    )

    result = CPUBootstrapBackend().solve(boot_design)

    for msg in result.warnings:
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    return BootstrapSolution(_result=result, _design=boot_design)
