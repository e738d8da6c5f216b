"""
Solution wrappers for expected-duration results.

ExpDurSolution wraps Result[ExpDurParams] for expected durations on the
estimation sample or on new data. MarginalEffectSolution adds the two
counterfactual prediction vectors of a marginal-effect call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from numpy.typing import NDArray

from pyduration.core.result import Result
from pyduration.expdur._common import (
    BaselineFunctions,
    ExpDurParams,
    GamFitTable,
    RiskSetTable,
)

if TYPE_CHECKING:
    from pyduration.expdur.design import ExpDurDesign


@dataclass
class ExpDurSolution:
    """
    User-facing expected durations.

    Matches the output of R's coxed(): per-target expected durations,
    their mean and median, bootstrap SEs and intervals when requested,
    and the baseline functions (NPSF) or GAM fit table (GAM).
    """
    _result: Result[ExpDurParams]
    _design: 'ExpDurDesign'

    # --- Point estimates ---

    @property
    def exp_dur(self) -> NDArray:
        """Expected duration per target, shape (m,)."""
        return self._result.params.exp_dur

    @property
    def mean(self) -> float:
        return self._result.params.mean

    @property
    def median(self) -> float:
        return self._result.params.median

    @property
    def subject_ids(self) -> NDArray | None:
        """Subject of each entry of exp_dur for counting-process data."""
        return self._result.params.subject_ids

    # --- Bootstrap ---

    @property
    def bootstrapped(self) -> bool:
        return self._result.params.B is not None

    @property
    def se(self) -> NDArray | None:
        return self._result.params.se

    @property
    def ci(self) -> NDArray | None:
        """Interval bounds per target, shape (m, 2)."""
        return self._result.params.ci

    @property
    def ci_lower(self) -> NDArray | None:
        ci = self.ci
        return None if ci is None else ci[:, 0]

    @property
    def ci_upper(self) -> NDArray | None:
        ci = self.ci
        return None if ci is None else ci[:, 1]

    @property
    def mean_se(self) -> float | None:
        return self._result.params.mean_se

    @property
    def mean_ci(self) -> NDArray | None:
        return self._result.params.mean_ci

    @property
    def median_se(self) -> float | None:
        return self._result.params.median_se

    @property
    def median_ci(self) -> NDArray | None:
        return self._result.params.median_ci

    @property
    def B(self) -> int | None:
        return self._result.params.B

    @property
    def n_dropped(self) -> int:
        return self._result.params.n_dropped

    @property
    def confidence(self) -> str | None:
        return self._result.params.confidence

    @property
    def conf_level(self) -> float | None:
        return self._result.params.conf_level

    # --- Engine output ---

    @property
    def method(self) -> str:
        return self._design.method

    @property
    def baseline(self) -> BaselineFunctions | None:
        """Baseline functions (NPSF only)."""
        return self._result.params.baseline

    @property
    def risk_set(self) -> RiskSetTable | None:
        """Failures and ELP-weighted risk size behind the baseline (NPSF only)."""
        return self._result.params.risk_set

    @property
    def gam_fit(self) -> GamFitTable | None:
        """Rank-to-duration fit table (GAM only)."""
        return self._result.params.gam_fit

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def _title(self) -> str:
        return "Expected durations"

    def summary(self) -> str:
        """
        R-style summary of the mean and median expected duration.

        Produces (with bootstrap):
            Expected durations (method: npsf, n = 500)

                       est        se       lb       ub
            mean    12.345     0.567   11.234   13.456
            median  10.123     0.456    9.234   11.012
        """
        lines = []
        lines.append(
            f"{self._title()} (method: {self.method}, n = {len(self.exp_dur)})"
        )
        lines.append("")

        if self.bootstrapped:
            lines.append(
                f"{'':>8s} {'est':>12s} {'se':>12s} {'lb':>12s} {'ub':>12s}"
            )
            rows = (
                ("mean", self.mean, self.mean_se, self.mean_ci),
                ("median", self.median, self.median_se, self.median_ci),
            )
            for label, est, se, ci in rows:
                lines.append(
                    f"{label:>8s} {est:12.4f} {se:12.4f} "
                    f"{ci[0]:12.4f} {ci[1]:12.4f}"
                )
            lines.append("")
            lines.append(
                f"{self.conf_level * 100:g}% {self.confidence} intervals from "
                f"B = {self.B} bootstrap replicates ({self.n_dropped} dropped)"
            )
        else:
            lines.append(f"{'':>8s} {'est':>12s}")
            lines.append(f"{'mean':>8s} {self.mean:12.4f}")
            lines.append(f"{'median':>8s} {self.median:12.4f}")

        for msg in self.warnings:
            lines.append(f"Warning: {msg}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(method={self.method!r}, "
            f"n={len(self.exp_dur)}, mean={self.mean:.4g}, "
            f"median={self.median:.4g})"
        )


@dataclass(repr=False)
class MarginalEffectSolution(ExpDurSolution):
    """
    Marginal change in expected duration between two covariate profiles.

    ``exp_dur`` is the per-target difference exp_dur2 - exp_dur1; mean,
    median and the bootstrap statistics describe that difference.
    """

    @property
    def exp_dur1(self) -> NDArray:
        """Expected durations under newdata."""
        return self._result.params.exp_dur1

    @property
    def exp_dur2(self) -> NDArray:
        """Expected durations under newdata2."""
        return self._result.params.exp_dur2

    @property
    def difference(self) -> NDArray:
        return self.exp_dur

    def _title(self) -> str:
        return "Marginal change in expected duration"
