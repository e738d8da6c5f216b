"""
Tests for bootstrap standard errors and confidence intervals.

Validates the two interval types against their closed forms.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from pyduration.montecarlo._ci import bootstrap_se, compute_ci


class TestBootstrapSE:

    def test_sample_sd(self, rng):
        t = rng.normal(size=(50, 4))
        assert_allclose(bootstrap_se(t), np.std(t, axis=0, ddof=1))

    def test_single_replicate_is_nan(self):
        se = bootstrap_se(np.ones((1, 3)))
        assert se.shape == (3,)
        assert np.all(np.isnan(se))


class TestStudentizedCI:

    def test_formula(self):
        t0 = np.array([10.0, 5.0])
        se = np.array([1.0, 0.5])
        ci = compute_ci(t0, np.zeros((3, 2)), se, "studentized", 0.95)

        z = stats.norm.ppf(0.975)
        assert_allclose(ci[:, 0], t0 - z * se)
        assert_allclose(ci[:, 1], t0 + z * se)

    def test_symmetric_about_estimate(self, rng):
        t = rng.normal(size=(100, 3))
        t0 = np.array([0.1, -2.0, 3.0])
        ci = compute_ci(t0, t, bootstrap_se(t), "studentized", 0.9)
        assert_allclose(ci.mean(axis=1), t0)

    def test_higher_level_is_wider(self, rng):
        t = rng.normal(size=(100, 2))
        se = bootstrap_se(t)
        narrow = compute_ci(np.zeros(2), t, se, "studentized", 0.8)
        wide = compute_ci(np.zeros(2), t, se, "studentized", 0.99)
        assert np.all(np.diff(wide, axis=1) > np.diff(narrow, axis=1))


class TestEmpiricalCI:

    def test_percentiles(self):
        t = np.arange(1.0, 101.0).reshape(-1, 1)
        ci = compute_ci(np.array([50.0]), t, bootstrap_se(t), "empirical", 0.90)

        assert ci.shape == (1, 2)
        assert ci[0, 0] == pytest.approx(np.quantile(t[:, 0], 0.05))
        assert ci[0, 1] == pytest.approx(np.quantile(t[:, 0], 0.95))

    def test_ignores_point_estimate(self, rng):
        t = rng.normal(size=(200, 2))
        se = bootstrap_se(t)
        a = compute_ci(np.zeros(2), t, se, "empirical", 0.95)
        b = compute_ci(np.full(2, 100.0), t, se, "empirical", 0.95)
        assert_allclose(a, b)

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown CI type"):
            compute_ci(np.zeros(1), np.zeros((2, 1)), np.ones(1), "bca", 0.95)
