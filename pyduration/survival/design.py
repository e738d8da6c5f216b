"""
SurvivalDesign: immutable container for time-to-event data.

Wraps stop time, event indicator, covariates, and optional entry (start)
times for counting-process rows. Validates inputs at construction time;
all downstream code trusts clean data.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pyduration.core.exceptions import DimensionError, ValidationError
from pyduration.core.validation import check_consistent_length


@dataclass(frozen=True)
class SurvivalDesign:
    """Immutable survival data container.

    Parameters
    ----------
    time : NDArray
        Time to event or censoring (stop time of the interval).
        Must be non-negative.
    event : NDArray
        Event indicator: 1 = event observed, 0 = censored.
    X : NDArray
        Covariate matrix (n, p).
    start : NDArray or None
        Entry time of each row for counting-process (start, stop] data.
        None for one row per subject.
    """

    time: NDArray
    event: NDArray
    X: NDArray
    start: NDArray | None

    @classmethod
    def for_survival(
        cls,
        time,
        event,
        X,
        *,
        start=None,
    ) -> SurvivalDesign:
        """Create and validate survival data.

        Parameters
        ----------
        time : array-like
            Time to event or censoring.
        event : array-like
            Event indicator (0/1 or bool).
        X : array-like
            Covariate matrix.
        start : array-like or None
            Optional entry times; each must be strictly less than its
            stop time.

        Returns
        -------
        SurvivalDesign

        Raises
        ------
        ValidationError
            If values are invalid.
        DimensionError
            If lengths disagree.
        """
        time = np.asarray(time, dtype=np.float64).ravel()
        event = np.asarray(event, dtype=np.float64).ravel()

        n = len(time)

        if n == 0:
            raise ValidationError("time must have at least one observation")

        check_consistent_length(time, event, names=("time", "event"))

        if not np.all(np.isfinite(time)):
            raise ValidationError("time must be finite")

        if np.any(time < 0):
            raise ValidationError("time must be non-negative")

        unique_events = np.unique(event[~np.isnan(event)])
        if np.any(np.isnan(event)) or not np.all(np.isin(unique_events, [0.0, 1.0])):
            raise ValidationError(
                f"event must contain only 0 and 1, "
                f"got unique values: {np.unique(event)}"
            )

        X_arr = np.asarray(X, dtype=np.float64)
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if X_arr.ndim != 2:
            raise DimensionError(
                f"X must be 1D or 2D, got {X_arr.ndim}D"
            )
        if X_arr.shape[0] != n:
            raise DimensionError(
                f"X must have {n} rows to match time, "
                f"got {X_arr.shape[0]}"
            )
        if not np.all(np.isfinite(X_arr)):
            raise ValidationError("X must be finite")

        start_arr = None
        if start is not None:
            start_arr = np.asarray(start, dtype=np.float64).ravel()
            if len(start_arr) != n:
                raise DimensionError(
                    f"start must have {n} elements to match time, "
                    f"got {len(start_arr)}"
                )
            if np.any(start_arr >= time):
                bad = int(np.sum(start_arr >= time))
                raise ValidationError(
                    f"start must be strictly less than time; "
                    f"{bad} rows violate this"
                )

        return cls(
            time=time,
            event=event,
            X=X_arr,
            start=start_arr,
        )

    @property
    def n(self) -> int:
        """Number of rows."""
        return len(self.time)

    @property
    def p(self) -> int:
        """Number of covariates."""
        return self.X.shape[1]

    @property
    def n_events(self) -> int:
        """Number of observed events."""
        return int(np.sum(self.event))

    @property
    def is_counting_process(self) -> bool:
        """True when rows are (start, stop] intervals."""
        return self.start is not None
