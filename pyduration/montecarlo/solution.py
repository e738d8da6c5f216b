"""
Solution wrapper for bootstrap results.

BootstrapSolution wraps Result[BootParams] and splits the statistic
vector back into the expected-duration part and its mean and median.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyduration.core.result import Result
from pyduration.montecarlo._common import BootParams

if TYPE_CHECKING:
    from pyduration.montecarlo.design import BootstrapDesign


@dataclass
class BootstrapSolution:
    """
    User-facing bootstrap results.

    Columns of ``t`` are the expected durations of each target followed
    by the mean and the median of the vector.
    """
    _result: Result[BootParams]
    _design: 'BootstrapDesign'

    # --- Core fields ---

    @property
    def t0(self) -> NDArray[np.floating[Any]]:
        """Point estimates on the original data, shape (k,)."""
        return self._result.params.t0

    @property
    def t(self) -> NDArray[np.floating[Any]]:
        """Successful replicates, shape (B - n_dropped, k)."""
        return self._result.params.t

    @property
    def B(self) -> int:
        """Number of replicates requested."""
        return self._result.params.B

    @property
    def n_dropped(self) -> int:
        return self._result.params.n_dropped

    @property
    def se(self) -> NDArray[np.floating[Any]]:
        """Bootstrap standard error: sd(t), shape (k,)."""
        return self._result.params.se

    @property
    def ci(self) -> NDArray[np.floating[Any]]:
        """Interval bounds, shape (k, 2)."""
        return self._result.params.ci

    @property
    def confidence(self) -> str:
        return self._result.params.confidence

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    # --- Split views ---

    @property
    def exp_dur_se(self) -> NDArray:
        return self.se[:-2]

    @property
    def exp_dur_ci(self) -> NDArray:
        return self.ci[:-2]

    @property
    def mean_se(self) -> float:
        return float(self.se[-2])

    @property
    def mean_ci(self) -> NDArray:
        return self.ci[-2]

    @property
    def median_se(self) -> float:
        return float(self.se[-1])

    @property
    def median_ci(self) -> NDArray:
        return self.ci[-1]

    # --- Metadata ---

    @property
    def seed(self) -> int | None:
        """Random seed used."""
        return self._design.seed

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

    def summary(self) -> str:
        """
        Bootstrap summary for the mean and median expected duration.

        Produces:
            NONPARAMETRIC BOOTSTRAP (B=200, dropped=0)

                      original    std. error
            mean       5.12345       0.56789
            median     3.45678       0.34567
        """
        lines = []
        lines.append(
            f"\nNONPARAMETRIC BOOTSTRAP (B={self.B}, dropped={self.n_dropped})\n"
        )

        conf_pct = self.conf_level * 100
        header = (
            f"{'':>8s} {'original':>14s} {'std. error':>14s} "
            f"{f'{conf_pct:g}% {self.confidence} CI':>32s}"
        )
        lines.append(header)

        for label, j in (("mean", -2), ("median", -1)):
            lo, hi = self.ci[j]
            lines.append(
                f"{label:>8s} {self.t0[j]:14.5f} {self.se[j]:14.5f} "
                f"{f'({lo:.5f}, {hi:.5f})':>32s}"
            )

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BootstrapSolution(B={self.B}, dropped={self.n_dropped}, "
            f"confidence={self.confidence!r}, backend={self.backend_name!r})"
        )
