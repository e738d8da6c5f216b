"""
Cox proportional hazards fitting.

Public API:
    coxph(time, event, X, ...) -> CoxSolution
"""

from pyduration.survival.design import SurvivalDesign
from pyduration.survival._common import CoxParams
from pyduration.survival.solution import CoxSolution
from pyduration.survival.solvers import coxph

__all__ = [
    "coxph",
    "CoxSolution",
    "CoxParams",
    "SurvivalDesign",
]
