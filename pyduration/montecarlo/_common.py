"""
Common data structures for the bootstrap driver.

BootParams is the parameter payload wrapped by Result[P] and exposed
through BootstrapSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class BootParams:
    """
    Parameter payload for bootstrap results.

    Statistics are laid out as the expected-duration vector (m entries)
    followed by its mean and median, so k = m + 2:
    - t0: point estimates on the original data, shape (k,)
    - t: successful replicates, shape (B - n_dropped, k)
    - se: sd(t) with ddof=1, shape (k,)
    - ci: interval bounds, shape (k, 2)
    """
    t0: NDArray[np.floating[Any]]              # shape (k,)
    t: NDArray[np.floating[Any]]               # shape (B_ok, k)
    B: int                                      # replicates requested
    n_dropped: int                              # failed replicates
    se: NDArray[np.floating[Any]]              # shape (k,)
    ci: NDArray[np.floating[Any]]              # shape (k, 2)
    confidence: str                             # "studentized" | "empirical"
    conf_level: float

    @property
    def n_targets(self) -> int:
        """Length of the expected-duration vector."""
        return len(self.t0) - 2
