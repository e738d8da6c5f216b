"""
Expected durations from Cox proportional hazards models.

Public API:
    expected_durations(model, method="npsf"|"gam", ...) -> ExpDurSolution
    marginal_effect(model, newdata, newdata2, ...) -> MarginalEffectSolution
"""

from pyduration.expdur._common import (
    BaselineFunctions,
    ExpDurParams,
    GamFitTable,
    RiskSetTable,
)
from pyduration.expdur._baseline import (
    hazard_baseline,
    risk_set_table,
    spline_baseline,
    step_baseline,
)
from pyduration.expdur.design import ExpDurDesign
from pyduration.expdur.solution import ExpDurSolution, MarginalEffectSolution
from pyduration.expdur.solvers import expected_durations, marginal_effect

__all__ = [
    "expected_durations",
    "marginal_effect",
    "ExpDurSolution",
    "MarginalEffectSolution",
    "ExpDurDesign",
    "ExpDurParams",
    "BaselineFunctions",
    "RiskSetTable",
    "GamFitTable",
    "risk_set_table",
    "step_baseline",
    "spline_baseline",
    "hazard_baseline",
]
