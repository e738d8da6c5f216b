"""
Design class for the bootstrap driver.

BootstrapDesign encapsulates everything the bootstrap backend needs to
rerun an expected-duration engine over resampled data. Immutable,
validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

from pyduration.core.exceptions import (
    DimensionError,
    MissingIdError,
    ValidationError,
)
from pyduration.core.protocols import Backend
from pyduration.core.validation import (
    check_array,
    check_conf_level,
    check_finite,
    check_positive_int,
)
from pyduration.expdur.design import ExpDurDesign


@dataclass(frozen=True)
class BootstrapDesign:
    """
    Frozen design for bootstrap resampling of expected durations.

    Attributes:
        expdur: Design of the point-estimate engine run. Each replicate
            derives its own design from it.
        backend: Engine backend (CPUNPSFBackend or CPUGAMBackend).
        t0: Point estimates, expected-duration vector then mean and median.
        B: Number of bootstrap replicates.
        confidence: "studentized" or "empirical".
        level: Confidence level in (0, 1).
        newdata2: Second covariate matrix for marginal-effect mode, or None.
        seed: Random seed for the index draws.
        n_jobs: Parallel workers (joblib convention; -1 uses all cores).
    """
    expdur: ExpDurDesign
    backend: Backend
    t0: NDArray[np.floating[Any]]
    B: int
    confidence: str
    level: float
    newdata2: NDArray | None
    seed: int | None
    n_jobs: int

    @classmethod
    def for_bootstrap(
        cls,
        expdur: ExpDurDesign,
        backend,
        t0,
        *,
        B: int = 200,
        confidence: Literal["studentized", "empirical"] = "studentized",
        level: float = 0.95,
        newdata2=None,
        seed: int | None = None,
        n_jobs: int = 1,
    ) -> BootstrapDesign:
        """
        Create a bootstrap design with validation.

        Args:
            expdur: Validated engine design.
            backend: Engine backend exposing ``solve(design)``.
            t0: Point estimates on the original data.
            B: Number of replicates. Must be >= 1.
            confidence: Interval type.
            level: Confidence level.
            newdata2: Marginal-effect counterfactual matrix.
            seed: Random seed.
            n_jobs: Number of joblib workers.

        Returns:
            Validated BootstrapDesign.

        Raises:
            ValidationError: If options are invalid.
            MissingIdError: Counting-process model without an id vector.
        """
        if not isinstance(backend, Backend):
            raise ValidationError(
                f"backend must expose name and solve(design), "
                f"got {type(backend).__name__}"
            )

        check_positive_int(B, "B")
        check_conf_level(level)

        if confidence not in ("studentized", "empirical"):
            raise ValidationError(
                f"confidence must be 'studentized' or 'empirical', "
                f"got {confidence!r}"
            )

        if isinstance(n_jobs, bool) or not isinstance(n_jobs, (int, np.integer)) or n_jobs == 0:
            raise ValidationError(f"n_jobs must be a non-zero integer, got {n_jobs!r}")

        if expdur.is_counting_process and expdur.id is None:
            raise MissingIdError(
                "bootstrap on a counting-process model requires an id vector "
                "so that whole subjects are resampled",
                context="bootstrap",
            )

        t0_arr = np.atleast_1d(np.asarray(t0, dtype=np.float64))

        newdata2_arr = None
        if newdata2 is not None:
            newdata2_arr = check_array(newdata2, "newdata2")
            check_finite(newdata2_arr, "newdata2")
            if expdur.newdata is None or newdata2_arr.shape != expdur.newdata.shape:
                raise DimensionError(
                    "newdata2 must have the same shape as newdata"
                )

        return cls(
            expdur=expdur,
            backend=backend,
            t0=t0_arr,
            B=B,
            confidence=confidence,
            level=level,
            newdata2=newdata2_arr,
            seed=seed,
            n_jobs=int(n_jobs),
        )
