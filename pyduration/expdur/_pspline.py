"""
Penalized cubic B-spline (P-spline) smoother for a single covariate.

For a fixed smoothing parameter λ the coefficients solve

    minimize ‖y - Bα‖² + λ ‖Dα‖²

where B is a cubic B-spline basis on equally spaced knots and D the
second-order difference matrix. λ is chosen by minimising the generalized
cross-validation score

    GCV(λ) = n · RSS(λ) / (n - edf(λ))²,   edf = tr((B'B + λD'D)⁻¹ B'B)

over log10(λ) with a bounded scalar search. Pointwise standard errors use
the Bayesian posterior covariance σ² (B'B + λD'D)⁻¹ with
σ² = RSS / (n - edf).

References:
    Eilers, P. H. C. and Marx, B. D. (1996). Flexible smoothing with
        B-splines and penalties. Statistical Science, 11(2), 89-121.
    Wood, S. N. (2017). Generalized Additive Models: An Introduction
        with R, 2nd ed. Chapman & Hall/CRC. Section 6.10.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
import scipy.linalg as sla
from scipy.interpolate import BSpline
from scipy.optimize import minimize_scalar

from pyduration.core.exceptions import DegenerateFitError

DEGREE = 3
DIFF_ORDER = 2

# Search range for log10 of the smoothing parameter, relative to the
# ratio of the data and penalty traces
LOG_LAMBDA_BOUNDS = (-6.0, 6.0)


@dataclass(frozen=True)
class PSplineFit:
    """Fitted P-spline.

    Attributes:
        coef: Basis coefficients (q,).
        cov: Posterior covariance of coef (q, q).
        knots: Full knot vector of the basis.
        lam: Selected smoothing parameter.
        edf: Effective degrees of freedom.
        sigma_sq: Residual variance.
        gcv: GCV score at the selected λ.
        x_min, x_max: Range of the fitted covariate.
    """
    coef: NDArray
    cov: NDArray
    knots: NDArray
    lam: float
    edf: float
    sigma_sq: float
    gcv: float
    x_min: float
    x_max: float

    def basis(self, x: NDArray) -> NDArray:
        return _basis(self.knots, np.clip(x, self.x_min, self.x_max), len(self.coef))

    def predict(self, x: NDArray) -> NDArray:
        """Fitted curve at x (clamped to the fitted range)."""
        return self.basis(np.asarray(x, dtype=np.float64)) @ self.coef

    def predict_se(self, x: NDArray) -> tuple[NDArray, NDArray]:
        """Fitted curve and its pointwise standard error at x."""
        Bx = self.basis(np.asarray(x, dtype=np.float64))
        var = np.einsum('ij,jk,ik->i', Bx, self.cov, Bx)
        return Bx @ self.coef, np.sqrt(np.maximum(var, 0.0))


def fit_pspline(x: NDArray, y: NDArray, n_basis: int) -> PSplineFit:
    """Fit a P-spline of y on x with GCV-selected smoothing.

    Args:
        x: Covariate (n,). Needs at least two distinct values.
        y: Response (n,).
        n_basis: Number of cubic B-spline basis functions (>= 4).

    Raises:
        DegenerateFitError: If the penalized system cannot be factorized.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = len(y)

    x_min, x_max = float(x.min()), float(x.max())
    knots = _knot_vector(x_min, x_max, n_basis)
    B = _basis(knots, x, n_basis)

    D = np.diff(np.eye(n_basis), n=DIFF_ORDER, axis=0)
    P = D.T @ D
    BtB = B.T @ B
    Bty = B.T @ y
    scale = np.trace(BtB) / np.trace(P)

    def solve(log_lam: float):
        lam = scale * 10.0 ** log_lam
        factor = sla.cho_factor(BtB + lam * P)
        coef = sla.cho_solve(factor, Bty)
        edf = float(np.trace(sla.cho_solve(factor, BtB)))
        rss = float(np.sum((y - B @ coef) ** 2))
        return lam, factor, coef, edf, rss

    def gcv(log_lam: float) -> float:
        _, _, _, edf, rss = solve(log_lam)
        denom = max(n - edf, 1e-8)
        return n * rss / denom ** 2

    try:
        opt = minimize_scalar(gcv, bounds=LOG_LAMBDA_BOUNDS, method='bounded')
        lam, factor, coef, edf, rss = solve(float(opt.x))
        A_inv = sla.cho_solve(factor, np.eye(n_basis))
    except np.linalg.LinAlgError as e:
        raise DegenerateFitError(
            f"penalized spline system is not positive definite: {e}",
        ) from e

    resid_df = n - edf
    sigma_sq = rss / resid_df if resid_df > 0 else 0.0

    return PSplineFit(
        coef=coef,
        cov=sigma_sq * A_inv,
        knots=knots,
        lam=lam,
        edf=edf,
        sigma_sq=sigma_sq,
        gcv=float(opt.fun),
        x_min=x_min,
        x_max=x_max,
    )


def _knot_vector(x_min: float, x_max: float, n_basis: int) -> NDArray:
    """Equally spaced knots extending DEGREE intervals past each end."""
    n_seg = n_basis - DEGREE
    dx = (x_max - x_min) / n_seg
    return x_min + dx * np.arange(-DEGREE, n_seg + DEGREE + 1)


def _basis(knots: NDArray, x: NDArray, n_basis: int) -> NDArray:
    return BSpline(knots, np.eye(n_basis), DEGREE)(x)
