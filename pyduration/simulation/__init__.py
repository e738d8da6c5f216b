"""
Simulation of duration data from Cox models with known ground truth.

Public API:
    baseline_build(T, knots) -> BaselineFunctions
    baseline_from_hazard(hazard_fun, T) -> BaselineFunctions
    generate_lm(baseline, ...) -> SimulationSolution
    sim_survdata(...) -> SimulationSolution
"""

from pyduration.simulation._common import CounterfactualEffect, SimulatedParams
from pyduration.simulation.design import SimulationDesign
from pyduration.simulation.solution import SimulationSolution
from pyduration.simulation.solvers import (
    baseline_build,
    baseline_from_hazard,
    generate_lm,
    sim_survdata,
)

__all__ = [
    "baseline_build",
    "baseline_from_hazard",
    "generate_lm",
    "sim_survdata",
    "SimulationSolution",
    "SimulationDesign",
    "SimulatedParams",
    "CounterfactualEffect",
]
