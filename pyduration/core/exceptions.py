"""
Exception hierarchy for PyDuration.

All exceptions inherit from PyDurationError to allow catching any
library-specific error. Domain-specific exceptions inherit from the
appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyDurationError(Exception):
    """Base exception for all PyDuration errors."""
    pass


class ValidationError(PyDurationError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class InvalidHorizon(ValidationError):
    """
    Time horizon or knot count for a baseline hazard is unusable.

    Attributes:
        T: Requested horizon
        knots: Requested number of spline knots
    """

    def __init__(
        self,
        message: str,
        T: int | None = None,
        knots: int | None = None,
    ):
        super().__init__(message)
        self.T = T
        self.knots = knots


class InvalidCovariateSpec(ValidationError):
    """
    Covariates, coefficients, or their distribution parameters conflict
    with each other or with the requested simulation type.
    """
    pass


class InvalidCensorProportion(ValidationError):
    """
    Censoring proportion outside [0, 1).

    Attributes:
        censor: The rejected proportion
    """

    def __init__(self, message: str, censor: float | None = None):
        super().__init__(message)
        self.censor = censor


class MissingIdError(ValidationError):
    """
    Counting-process (time-varying covariate) data used without an
    observation-id vector mapping interval rows to subjects.

    Attributes:
        context: Which computation required the id ('newdata',
            'marginal_effect', 'bootstrap')
    """

    def __init__(self, message: str, context: str | None = None):
        super().__init__(message)
        self.context = context


class NumericalError(PyDurationError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class DegenerateFitError(NumericalError):
    """
    Smooth rank-to-duration regression cannot be fit reliably.

    Raised when too few distinct rank values are available for the
    penalized spline basis.

    Attributes:
        n_distinct: Number of distinct rank values available
        min_required: Minimum number required
    """

    def __init__(
        self,
        message: str,
        n_distinct: int | None = None,
        min_required: int | None = None,
    ):
        super().__init__(message)
        self.n_distinct = n_distinct
        self.min_required = min_required


class OutOfRangeWarning(UserWarning):
    """
    Prediction requested outside the range of the training linear predictor.

    Non-fatal: the prediction is made at the boundary of the fitted curve.
    """
    pass
