"""
Solution wrapper for simulated survival data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyduration.core.result import Result
from pyduration.expdur._common import BaselineFunctions
from pyduration.simulation._common import CounterfactualEffect, SimulatedParams

if TYPE_CHECKING:
    from pyduration.simulation.design import SimulationDesign


@dataclass
class SimulationSolution:
    """
    A simulated duration dataset.

    Matches the output of R's sim.survdata(): the data, the generating
    coefficients and baseline, individual survivor functions and, when
    requested, the true marginal effect.
    """
    _result: Result[SimulatedParams]
    _design: 'SimulationDesign'

    # --- Data ---

    @property
    def X(self) -> NDArray:
        return self._result.params.X

    @property
    def y(self) -> NDArray:
        """Durations, or interval stop times for type "tvc"."""
        return self._result.params.y

    @property
    def failed(self) -> NDArray:
        return self._result.params.failed

    @property
    def censored(self) -> NDArray:
        return self._result.params.censored

    @property
    def start(self) -> NDArray | None:
        return self._result.params.start

    @property
    def id(self) -> NDArray | None:
        return self._result.params.id

    @property
    def columns(self) -> tuple[str, ...]:
        xs = tuple(f"X{j + 1}" for j in range(self.X.shape[1]))
        if self.tvc:
            return ("id", "start", "end", "failed") + xs
        return ("y", "failed") + xs

    @property
    def data(self) -> NDArray:
        """Dataset as one matrix with column names in ``columns``."""
        if self.tvc:
            return np.column_stack((self.id, self.start, self.y, self.failed, self.X))
        return np.column_stack((self.y, self.failed, self.X))

    # --- Generating truth ---

    @property
    def xb(self) -> NDArray:
        return self._result.params.xb

    @property
    def exp_xb(self) -> NDArray:
        return self._result.params.exp_xb

    @property
    def survivor(self) -> NDArray:
        """Individual survivor functions, shape (N, T)."""
        return self._result.params.survivor

    @property
    def betas(self) -> NDArray:
        """Coefficients, shape (1, p), or (T, p) for type "tvbeta"."""
        return self._result.params.betas

    @property
    def tvc(self) -> bool:
        return self._result.params.tvc

    @property
    def type(self) -> str:
        return self._result.params.type

    @property
    def baseline(self) -> BaselineFunctions:
        return self._result.params.baseline

    @property
    def subject_y(self) -> NDArray:
        return self._result.params.subject_y

    @property
    def subject_failed(self) -> NDArray:
        return self._result.params.subject_failed

    @property
    def covariate_paths(self) -> NDArray | None:
        """Drawn covariate paths (N, T, p) for type "tvc", else None."""
        return self._result.params.covariate_paths

    @property
    def assigned_path(self) -> NDArray | None:
        """Index into covariate_paths of the path each subject received."""
        return self._result.params.assigned_path

    @property
    def n_subjects(self) -> int:
        return self._result.params.n_subjects

    @property
    def effect(self) -> CounterfactualEffect | None:
        return self._result.params.effect

    @property
    def marg_effect(self) -> float | None:
        """True marginal effect on expected duration, or None."""
        effect = self.effect
        return None if effect is None else effect.marg_effect

    @property
    def ind_me(self) -> NDArray | None:
        """Individual true effects on expected duration, or None."""
        effect = self.effect
        return None if effect is None else effect.ind_me

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

    def summary(self) -> str:
        lines = [
            f"Simulated durations (type: {self.type})",
            "",
            f"  subjects: {self.n_subjects}   rows: {len(self.y)}   "
            f"T: {len(self.baseline)}",
            f"  censored: {int(np.sum(1 - self.subject_failed))}",
            f"  duration: min {self.subject_y.min():g}, "
            f"median {np.median(self.subject_y):g}, max {self.subject_y.max():g}",
        ]
        beta = self.betas[-1] if self.type == "tvbeta" else self.betas[0]
        lines.append(
            "  beta: " + ", ".join(f"{b:.4f}" for b in beta)
            + ("  (first coefficient at t = T)" if self.type == "tvbeta" else "")
        )
        if self.effect is not None:
            lines.append(
                f"  true marginal effect ({self.effect.compare}): "
                f"{self.effect.marg_effect:.4f}"
            )
        for msg in self.warnings:
            lines.append(f"Warning: {msg}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SimulationSolution(type={self.type!r}, N={self.n_subjects}, "
            f"rows={len(self.y)}, censored={int(np.sum(1 - self.subject_failed))})"
        )
