"""
Solution wrapper for Cox model results.

CoxSolution wraps a Result[CoxParams] together with the SurvivalDesign it
was fitted on, so that it satisfies the FittedModel protocol consumed by
the expected-duration engines.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyduration.core.exceptions import DimensionError
from pyduration.core.result import Result
from pyduration.survival._common import CoxParams
from pyduration.survival.design import SurvivalDesign


class CoxSolution:
    """Cox proportional hazards solution.

    Properties mirror R's coxph() output. The object is immutable:
    bootstrap code passes replacement coefficients to
    ``linear_predictor(coef=...)`` instead of overwriting them.
    """

    __slots__ = ('_result', '_design')

    def __init__(
        self,
        _result: Result[CoxParams],
        _design: SurvivalDesign,
    ) -> None:
        self._result = _result
        self._design = _design

    # -- Data the model was fitted on --

    @property
    def time(self) -> NDArray:
        """Observed (stop) times."""
        return self._design.time

    @property
    def event(self) -> NDArray:
        """Event indicator (1=failure, 0=censored)."""
        return self._design.event

    @property
    def start(self) -> NDArray | None:
        """Entry times for counting-process rows, or None."""
        return self._design.start

    @property
    def X(self) -> NDArray:
        return self._design.X

    @property
    def is_counting_process(self) -> bool:
        return self._design.is_counting_process

    # -- Properties delegating to CoxParams --

    @property
    def coefficients(self):
        return self._result.params.coefficients

    @property
    def hazard_ratios(self):
        return self._result.params.hazard_ratios

    @property
    def standard_errors(self):
        return self._result.params.standard_errors

    @property
    def z_statistics(self):
        return self._result.params.z_statistics

    @property
    def p_values(self):
        return self._result.params.p_values

    @property
    def loglik(self):
        return self._result.params.loglik

    @property
    def concordance(self) -> float:
        return self._result.params.concordance

    @property
    def n_events(self) -> int:
        return self._result.params.n_events

    @property
    def n_observations(self) -> int:
        return self._result.params.n_observations

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def ties(self) -> str:
        return self._result.params.ties

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def timing(self):
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # -- Prediction --

    def linear_predictor(
        self,
        X: ArrayLike | None = None,
        coef: ArrayLike | None = None,
    ) -> NDArray:
        """Linear predictor X @ coef (uncentered).

        Parameters
        ----------
        X : array-like or None
            Covariate rows, shape (m, p). None uses the estimation sample.
        coef : array-like or None
            Replacement coefficients, shape (p,). None uses the fitted ones.
        """
        beta = self.coefficients if coef is None else np.asarray(coef, dtype=np.float64).ravel()
        if len(beta) != self._design.p:
            raise DimensionError(
                f"coef must have {self._design.p} elements, got {len(beta)}"
            )

        if X is None:
            X_arr = self._design.X
        else:
            X_arr = np.asarray(X, dtype=np.float64)
            if X_arr.ndim == 1:
                X_arr = X_arr.reshape(1, -1) if self._design.p > 1 else X_arr.reshape(-1, 1)
            if X_arr.shape[1] != self._design.p:
                raise DimensionError(
                    f"X must have {self._design.p} columns, got {X_arr.shape[1]}"
                )
        return X_arr @ beta

    def summary(self) -> str:
        """R-style summary of Cox PH fit."""
        lines = []
        lines.append("Call: coxph()")
        lines.append("")
        lines.append(
            f"  n= {self.n_observations}, "
            f"number of events= {self.n_events}"
        )
        lines.append("")

        lines.append(
            f"  {'':>10s}  {'coef':>10s}  {'exp(coef)':>10s}  "
            f"{'se(coef)':>10s}  {'z':>10s}  {'Pr(>|z|)':>12s}"
        )
        p = len(self.coefficients)
        for i in range(p):
            name = f"x{i}"
            lines.append(
                f"  {name:>10s}  {self.coefficients[i]:10.6f}  "
                f"{self.hazard_ratios[i]:10.6f}  "
                f"{self.standard_errors[i]:10.6f}  "
                f"{self.z_statistics[i]:10.4f}  "
                f"{self.p_values[i]:12.4g}"
            )

        lines.append("")
        lines.append(
            f"  Concordance= {self.concordance:.4f}"
        )
        lr_stat = 2 * (self.loglik[1] - self.loglik[0])
        lines.append(
            f"  Likelihood ratio test= {lr_stat:.4f} on {p} df"
        )

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CoxSolution(n={self.n_observations}, "
            f"events={self.n_events}, "
            f"concordance={self.concordance:.4f})"
        )
