"""
SimulationDesign: immutable configuration for one simulated dataset.

All options are validated before any random number is drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from pyduration.core.exceptions import (
    InvalidCensorProportion,
    InvalidCovariateSpec,
    ValidationError,
)
from pyduration.core.validation import check_array, check_finite, check_positive_int
from pyduration.expdur._common import BaselineFunctions

SIM_TYPES = ("none", "tvc", "tvbeta")
CENSOR_POLICIES = ("random", "lowest")


@dataclass(frozen=True)
class SimulationDesign:
    """Validated simulation settings.

    Parameters
    ----------
    baseline : BaselineFunctions
        Generating baseline on the grid 1..T.
    X : NDArray or None
        User covariates (N, p); None to draw them.
    N : int
        Number of subjects.
    p : int
        Number of covariates.
    type : str
        "none", "tvc" or "tvbeta".
    beta : NDArray or None
        Coefficients (p,); None to draw them.
    mu, sd : NDArray
        Per-column mean and standard deviation of drawn covariates (p,).
    censor : float
        Proportion of censored subjects in [0, 1).
    censor_policy : str
        "random" or "lowest".
    dropped_X : bool
        A user X was discarded because type is "tvc".
    """

    baseline: BaselineFunctions
    X: NDArray | None
    N: int
    p: int
    type: str
    beta: NDArray | None
    mu: NDArray
    sd: NDArray
    censor: float
    censor_policy: str
    dropped_X: bool

    @classmethod
    def for_generate(
        cls,
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
    ) -> SimulationDesign:
        """Validate and assemble simulation settings.

        Raises
        ------
        InvalidCovariateSpec
            Bad X, beta, mu, sd, xvars or type.
        InvalidCensorProportion
            censor outside [0, 1).
        ValidationError
            Bad N, baseline or censor_policy.
        """
        if not isinstance(baseline, BaselineFunctions):
            raise ValidationError(
                f"baseline must be BaselineFunctions, got {_type_name(baseline)}"
            )
        if len(baseline) < 2:
            raise ValidationError("baseline must cover at least 2 time points")
        if not np.array_equal(baseline.time, np.arange(1, len(baseline) + 1)):
            raise ValidationError(
                "baseline must be defined on the integer grid 1..T"
            )

        if type not in SIM_TYPES:
            raise InvalidCovariateSpec(
                f"type must be one of {SIM_TYPES}, got {type!r}"
            )

        if not (0.0 <= censor < 1.0):
            raise InvalidCensorProportion(
                f"censor must be in [0, 1), got {censor}", censor=censor,
            )
        if censor_policy not in CENSOR_POLICIES:
            raise ValidationError(
                f"censor_policy must be one of {CENSOR_POLICIES}, got {censor_policy!r}"
            )

        if xvars is not None:
            check_positive_int(xvars, "xvars")

        dropped_X = False
        if X is not None and type == "tvc":
            X = None
            dropped_X = True

        X_arr = None
        if X is not None:
            try:
                X_arr = check_array(X, "X")
                check_finite(X_arr, "X")
            except ValidationError as e:
                raise InvalidCovariateSpec(str(e)) from e
            if X_arr.ndim != 2:
                raise InvalidCovariateSpec(
                    f"X must be 2-D (N, p), got {X_arr.ndim}-D with shape {X_arr.shape}"
                )
            if N is not None and X_arr.shape[0] != N:
                raise InvalidCovariateSpec(
                    f"X has {X_arr.shape[0]} rows but N={N}"
                )
            if xvars is not None and X_arr.shape[1] != xvars:
                raise InvalidCovariateSpec(
                    f"X has {X_arr.shape[1]} columns but xvars={xvars}"
                )
            N = X_arr.shape[0]
            p = X_arr.shape[1]
        elif xvars is not None:
            p = xvars
        elif beta is not None:
            p = np.atleast_1d(np.asarray(beta)).size
        else:
            p = 3

        if N is None:
            N = 1000
        check_positive_int(N, "N")

        beta_arr = None
        if beta is not None:
            beta_arr = np.atleast_1d(np.asarray(beta, dtype=np.float64)).ravel()
            if len(beta_arr) != p:
                raise InvalidCovariateSpec(
                    f"beta has {len(beta_arr)} elements but there are {p} covariates"
                )

        mu_arr = _per_column(mu, p, "mu")
        sd_arr = _per_column(sd, p, "sd")
        if np.any(sd_arr < 0):
            raise InvalidCovariateSpec(f"sd must be non-negative, got {sd_arr.tolist()}")

        return cls(
            baseline=baseline,
            X=X_arr,
            N=int(N),
            p=int(p),
            type=type,
            beta=beta_arr,
            mu=mu_arr,
            sd=sd_arr,
            censor=float(censor),
            censor_policy=censor_policy,
            dropped_X=dropped_X,
        )

    @property
    def T(self) -> int:
        return len(self.baseline)


def _per_column(value, p: int, name: str) -> NDArray:
    arr = np.atleast_1d(np.asarray(value, dtype=np.float64)).ravel()
    if len(arr) == 1:
        return np.full(p, arr[0])
    if len(arr) != p:
        raise InvalidCovariateSpec(
            f"{name} must be a scalar or have {p} elements, got {len(arr)}"
        )
    return arr


def _type_name(obj) -> str:
    return obj.__class__.__name__
