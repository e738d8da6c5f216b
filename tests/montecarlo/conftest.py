"""
Shared fixtures for bootstrap tests.
"""

import pytest

from pyduration.expdur import ExpDurDesign
from pyduration.simulation import baseline_build, generate_lm, sim_survdata
from pyduration.survival import coxph


@pytest.fixture(scope="module")
def model():
    """Cox fit on 80 simulated durations with two covariates."""
    baseline = baseline_build(T=40, knots=5, seed=31)
    sim = generate_lm(baseline, N=80, beta=[0.5, -0.5], censor=0.1, rng=32)
    return coxph(sim.y, sim.failed, sim.X)


@pytest.fixture(scope="module")
def tvc():
    """Counting-process simulation and its Cox fit."""
    sim = sim_survdata(N=60, T=30, type="tvc", knots=4, xvars=2,
                       beta=[0.4, -0.4], seed=33)
    return sim, coxph(sim.y, sim.failed, sim.X, start=sim.start)


@pytest.fixture
def npsf_design(model):
    return ExpDurDesign.for_expdur(model, method="npsf")
