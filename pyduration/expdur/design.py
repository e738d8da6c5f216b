"""
ExpDurDesign: immutable configuration for an expected-duration engine run.

Carries the fitted model, the prediction targets and the engine options.
The bootstrap driver derives per-draw designs with dataclasses.replace(),
filling in the resample indices and the refitted coefficients; the model
itself is never modified.
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
from pyduration.core.protocols import FittedModel
from pyduration.core.validation import (
    check_array,
    check_conf_level,
    check_finite,
    check_positive_int,
)


@dataclass(frozen=True)
class ExpDurDesign:
    """
    Frozen design for the NPSF and GAM engines.

    Attributes:
        model: Fitted Cox model satisfying FittedModel.
        method: "npsf" or "gam".
        newdata: Covariate rows to predict for, shape (m, p), or None for
            the estimation sample.
        id: Subject id of each estimation row (counting-process data), or
            None.
        k: GAM basis dimension.
        level: Confidence level of the GAM pointwise band.
        coef: Coefficient override for a bootstrap draw, or None.
        b_ind: Row indices of a bootstrap resample, or None.
        b_id: Subject labels of the resampled rows. Clusters drawn more
            than once get distinct labels.
    """
    model: Any
    method: str
    newdata: NDArray | None
    id: NDArray | None
    k: int
    level: float
    coef: NDArray | None = None
    b_ind: NDArray | None = None
    b_id: NDArray | None = None

    @classmethod
    def for_expdur(
        cls,
        model,
        *,
        method: Literal["npsf", "gam"] = "npsf",
        newdata=None,
        id=None,
        k: int = 10,
        level: float = 0.95,
        context: str = "newdata",
    ) -> ExpDurDesign:
        """
        Create an expected-duration design with validation.

        Args:
            model: Fitted Cox model.
            method: Engine selector.
            newdata: Optional covariate matrix.
            id: Optional subject id per estimation row.
            k: GAM basis dimension, >= 4.
            level: Band confidence level in (0, 1).
            context: Name of the operation, used in MissingIdError.

        Returns:
            Validated ExpDurDesign.

        Raises:
            ValidationError: On an unusable model or option.
            DimensionError: On shape mismatches.
            MissingIdError: Counting-process model with newdata and no id.
        """
        if not isinstance(model, FittedModel):
            raise ValidationError(
                f"model must expose time, event, start, X, coefficients and "
                f"linear_predictor(), got {type(model).__name__}"
            )

        if method not in ("npsf", "gam"):
            raise ValidationError(
                f"method must be 'npsf' or 'gam', got {method!r}"
            )

        check_positive_int(k, "k")
        if k < 4:
            raise ValidationError(f"k must be >= 4 for a cubic basis, got {k}")
        check_conf_level(level)

        n, p = model.X.shape
        counting = model.start is not None

        id_arr = None
        if id is not None:
            id_arr = np.asarray(id).ravel()
            if len(id_arr) != n:
                raise DimensionError(
                    f"id must have one entry per estimation row ({n}), "
                    f"got {len(id_arr)}"
                )

        newdata_arr = None
        if newdata is not None:
            newdata_arr = check_array(newdata, "newdata")
            if newdata_arr.ndim == 1:
                newdata_arr = newdata_arr.reshape(1, -1) if p > 1 else newdata_arr.reshape(-1, 1)
            if newdata_arr.ndim != 2 or newdata_arr.shape[1] != p:
                raise DimensionError(
                    f"newdata must have {p} columns, got shape {newdata_arr.shape}"
                )
            check_finite(newdata_arr, "newdata")

            if counting:
                if id_arr is None:
                    raise MissingIdError(
                        f"{context} on a counting-process model requires an id "
                        f"vector mapping interval rows to subjects",
                        context=context,
                    )
                if newdata_arr.shape[0] != n:
                    raise DimensionError(
                        f"newdata for a counting-process model must align with "
                        f"the {n} estimation rows, got {newdata_arr.shape[0]}"
                    )

        return cls(
            model=model,
            method=method,
            newdata=newdata_arr,
            id=id_arr,
            k=k,
            level=level,
        )

    @property
    def n(self) -> int:
        """Rows in the estimation sample."""
        return len(self.model.time)

    @property
    def is_counting_process(self) -> bool:
        return self.model.start is not None

    @property
    def by_subject(self) -> bool:
        """Targets are subjects rather than rows."""
        return self.is_counting_process and self.id is not None

    def training_rows(self) -> NDArray:
        """Indices of the rows the baseline or GAM is fitted on."""
        if self.b_ind is None:
            return np.arange(self.n)
        return self.b_ind

    def training_ids(self) -> NDArray | None:
        """Subject labels of the training rows."""
        if self.b_id is not None:
            return self.b_id
        if self.id is None:
            return None
        return self.id[self.training_rows()]
