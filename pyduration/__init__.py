"""
PyDuration: expected durations from Cox proportional hazards models.

Converts the linear predictor of a fitted Cox model into expected
durations and marginal duration changes, with bootstrap uncertainty, and
simulates duration data with known ground truth.

Submodules:
    survival: Cox proportional hazards fitting
    expdur: Expected durations (NPSF and GAM methods)
    montecarlo: Bootstrap driver for expected durations
    simulation: Duration data simulation
"""

__version__ = "0.1.0"

from pyduration import survival
from pyduration import expdur
from pyduration import montecarlo
from pyduration import simulation

from pyduration.survival import coxph
from pyduration.expdur import expected_durations, marginal_effect
from pyduration.simulation import (
    baseline_build,
    baseline_from_hazard,
    generate_lm,
    sim_survdata,
)

__all__ = [
    "__version__",
    "survival",
    "expdur",
    "montecarlo",
    "simulation",
    "coxph",
    "expected_durations",
    "marginal_effect",
    "baseline_build",
    "baseline_from_hazard",
    "generate_lm",
    "sim_survdata",
]
