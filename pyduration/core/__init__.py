"""
Core infrastructure for PyDuration.

This module provides shared abstractions and utilities used by all
domain-specific submodules (survival, expdur, montecarlo, simulation).

Key components:
    protocols: FittedModel, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing utilities
"""

from pyduration.core.protocols import FittedModel, Backend
from pyduration.core.result import Result
from pyduration.core.exceptions import (
    PyDurationError,
    ValidationError,
    DimensionError,
    InvalidHorizon,
    InvalidCovariateSpec,
    InvalidCensorProportion,
    MissingIdError,
    NumericalError,
    DegenerateFitError,
    OutOfRangeWarning,
)

__all__ = [
    # Protocols
    "FittedModel",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyDurationError",
    "ValidationError",
    "DimensionError",
    "InvalidHorizon",
    "InvalidCovariateSpec",
    "InvalidCensorProportion",
    "MissingIdError",
    "NumericalError",
    "DegenerateFitError",
    "OutOfRangeWarning",
]
