"""
Core protocols for PyDuration.

These define structural interfaces that domain-specific implementations must
satisfy. We use Protocol (structural typing) rather than ABC (nominal typing)
so that any fitted proportional hazards model exposing the right attributes
can drive the expected-duration engines.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Immutable inputs: coefficient substitution is an argument, not a mutation
    - Type-safe: use generics to preserve type information through pipelines
"""

from typing import Protocol, TypeVar, runtime_checkable

from numpy.typing import ArrayLike, NDArray

# Type variables for generic payloads
P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class FittedModel(Protocol):
    """
    Minimal protocol for a fitted Cox proportional hazards model.

    The expected-duration engines never mutate the model. Bootstrap
    coefficients are threaded through ``linear_predictor(coef=...)``.
    """

    @property
    def time(self) -> NDArray:
        """Observed (stop) time for each row, shape (n,)."""
        ...

    @property
    def event(self) -> NDArray:
        """Event indicator for each row: 1 = failure, 0 = censored."""
        ...

    @property
    def start(self) -> NDArray | None:
        """Entry times for counting-process rows, or None."""
        ...

    @property
    def X(self) -> NDArray:
        """Covariate matrix the model was fitted on, shape (n, p)."""
        ...

    @property
    def coefficients(self) -> NDArray:
        """Estimated log hazard ratios, shape (p,)."""
        ...

    def linear_predictor(
        self,
        X: ArrayLike | None = None,
        coef: ArrayLike | None = None,
    ) -> NDArray:
        """
        Linear predictor X @ coef.

        Args:
            X: Covariate rows. None means the estimation sample.
            coef: Coefficient override. None means the fitted coefficients.
        """
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend knows how to take a domain-specific design and produce
    a domain-specific parameter payload.

    Backends are stateless: all configuration is passed via the design
    or at construction time. This makes them easy to test and swap.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_npsf', 'cpu_gam', 'cpu_bootstrap'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the statistical computation.

        Args:
            design: Domain-specific data container

        Returns:
            Result envelope containing parameter payload and metadata

        Raises:
            NumericalError: If numerical issues prevent solution
            ValidationError: If design is invalid for this backend
        """
        ...
