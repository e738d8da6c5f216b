"""
PyDuration bootstrap driver.

Refits the Cox model on resampled data and reruns an expected-duration
engine to obtain standard errors and confidence intervals.

Usage:
    from pyduration.montecarlo import boot_expdur

    boot = boot_expdur(design, backend, t0, B=200, seed=42)
    boot.mean_se, boot.mean_ci
"""

from pyduration.montecarlo._common import BootParams
from pyduration.montecarlo.design import BootstrapDesign
from pyduration.montecarlo.solution import BootstrapSolution
from pyduration.montecarlo.solvers import boot_expdur

__all__ = [
    "boot_expdur",
    "BootstrapDesign",
    "BootstrapSolution",
    "BootParams",
]
