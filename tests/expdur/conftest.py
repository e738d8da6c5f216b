"""
Shared fixtures for expected-duration tests.
"""

import numpy as np
import pytest

from pyduration.simulation import baseline_build, generate_lm
from pyduration.survival import coxph


class StubModel:
    """Fitted-model stand-in with fixed coefficients."""

    def __init__(self, time, event, X, coefficients, start=None):
        self.time = np.asarray(time, dtype=np.float64)
        self.event = np.asarray(event, dtype=np.float64)
        self.X = np.asarray(X, dtype=np.float64).reshape(len(self.time), -1)
        self.coefficients = np.asarray(coefficients, dtype=np.float64)
        self.start = None if start is None else np.asarray(start, dtype=np.float64)

    def linear_predictor(self, X=None, coef=None):
        beta = self.coefficients if coef is None else np.asarray(coef, dtype=np.float64)
        X_arr = self.X if X is None else np.asarray(X, dtype=np.float64)
        return X_arr @ beta


@pytest.fixture
def stub_model():
    return StubModel


@pytest.fixture(scope="module")
def sim_data():
    """N=200 single-row durations with three covariates."""
    baseline = baseline_build(T=50, knots=5, seed=11)
    return generate_lm(
        baseline, N=200, beta=[0.6, -0.4, 0.2], censor=0.2, rng=12,
    )


@pytest.fixture(scope="module")
def cox_model(sim_data):
    return coxph(sim_data.y, sim_data.failed, sim_data.X)
