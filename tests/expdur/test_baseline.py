"""
Tests for baseline cumulative hazard and survivor construction.

Step mode follows Cox and Oakes (1984, pp. 107-109); smooth mode is the
random PCHIP baseline used by the simulator.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyduration.core.exceptions import InvalidHorizon, ValidationError
from pyduration.expdur import (
    BaselineFunctions,
    hazard_baseline,
    risk_set_table,
    spline_baseline,
    step_baseline,
)


# ═══════════════════════════════════════════════════════════════════════
# Risk-set table
# ═══════════════════════════════════════════════════════════════════════


class TestRiskSetTable:

    def test_single_time_three_failures(self):
        """3 failures at one time among 10 subjects at risk."""
        event = np.array([1, 1, 1, 0, 0, 0, 0, 0, 0, 0], dtype=float)
        table = risk_set_table(np.full(10, 5.0), event, np.ones(10))

        assert_allclose(table.time, [5.0])
        assert_allclose(table.n_failures, [3.0])
        assert_allclose(table.risk_size, [10.0])

    def test_ties_aggregate_into_one_row(self):
        time = np.array([1.0, 1.0, 2.0, 3.0, 3.0])
        event = np.array([1.0, 1.0, 0.0, 1.0, 0.0])
        table = risk_set_table(time, event, np.ones(5))

        assert len(table) == 3
        assert_allclose(table.n_failures, [2.0, 0.0, 1.0])
        assert_allclose(table.risk_size, [5.0, 3.0, 2.0])

    def test_risk_size_is_elp_weighted(self):
        time = np.array([1.0, 2.0, 3.0])
        event = np.ones(3)
        elp = np.array([2.0, 0.5, 1.5])
        table = risk_set_table(time, event, elp)
        assert_allclose(table.risk_size, [4.0, 2.0, 1.5])

    def test_risk_size_non_increasing(self, rng):
        time = rng.integers(1, 20, size=200).astype(float)
        event = rng.binomial(1, 0.7, size=200).astype(float)
        table = risk_set_table(time, event, np.exp(rng.normal(size=200)))
        assert np.all(np.diff(table.risk_size) <= 1e-12)

    def test_counting_process_excludes_late_entries(self):
        """Subject 0 rows (0,2] and (2,5]; subject 1 row (0,4]."""
        start = np.array([0.0, 2.0, 0.0])
        stop = np.array([2.0, 5.0, 4.0])
        event = np.array([0.0, 1.0, 1.0])
        elp = np.array([1.0, 3.0, 1.0])
        table = risk_set_table(stop, event, elp, start=start)

        assert_allclose(table.time, [2.0, 4.0, 5.0])
        # t=2: rows (0,2] and (0,4]; t=4: (2,5] and (0,4]; t=5: (2,5]
        assert_allclose(table.risk_size, [2.0, 4.0, 3.0])


# ═══════════════════════════════════════════════════════════════════════
# Step baseline
# ═══════════════════════════════════════════════════════════════════════


class TestStepBaseline:

    def test_single_event_time(self):
        """H = 3/10, S = exp(-0.3)."""
        event = np.array([1, 1, 1, 0, 0, 0, 0, 0, 0, 0], dtype=float)
        base = step_baseline(risk_set_table(np.full(10, 5.0), event, np.ones(10)))

        assert base.cumulative_hazard[0] == pytest.approx(0.3)
        assert base.survivor[0] == pytest.approx(np.exp(-0.3))

    def test_hand_computed(self):
        time = np.array([1.0, 2.0, 3.0])
        base = step_baseline(risk_set_table(time, np.ones(3), np.ones(3)))
        assert_allclose(base.cumulative_hazard, [1 / 3, 1 / 3 + 1 / 2, 1 / 3 + 1 / 2 + 1])

    def test_censor_only_time_keeps_hazard_flat(self):
        time = np.array([1.0, 2.0, 3.0, 4.0])
        event = np.array([1.0, 0.0, 1.0, 1.0])
        base = step_baseline(risk_set_table(time, event, np.ones(4)))
        assert base.cumulative_hazard[1] == base.cumulative_hazard[0]

    def test_survivor_is_exp_minus_hazard(self, rng):
        time = rng.integers(1, 30, size=100).astype(float)
        event = rng.binomial(1, 0.8, size=100).astype(float)
        base = step_baseline(risk_set_table(time, event, np.exp(rng.normal(size=100))))

        assert_allclose(base.survivor, np.exp(-base.cumulative_hazard))
        assert np.all(np.diff(base.cumulative_hazard) >= 0)
        assert np.all(np.diff(base.survivor) <= 0)
        assert np.all(np.diff(base.time) > 0)


# ═══════════════════════════════════════════════════════════════════════
# Smooth baseline
# ═══════════════════════════════════════════════════════════════════════


class TestSplineBaseline:

    @pytest.mark.parametrize("spline", [True, False])
    def test_monotone_on_grid(self, rng, spline):
        base = spline_baseline(100, 8, rng, spline=spline)

        assert_allclose(base.time, np.arange(1, 101))
        assert np.all(np.diff(base.cumulative_hazard) >= 0)
        assert_allclose(base.survivor, np.exp(-base.cumulative_hazard))

    def test_pinned_endpoints(self, rng):
        base = spline_baseline(60, 5, rng)
        assert base.survivor[0] == pytest.approx(1.0)
        assert base.survivor[-1] == pytest.approx(1e-3, rel=1e-6)

    def test_knots_capped(self, rng):
        """More knots than interior points is allowed."""
        base = spline_baseline(5, 50, rng)
        assert len(base) == 5

    def test_smallest_horizon(self, rng):
        base = spline_baseline(2, 1, rng)
        assert len(base) == 2

    @pytest.mark.parametrize("T, knots", [(1, 8), (0, 8), (100, 0)])
    def test_invalid_horizon(self, rng, T, knots):
        with pytest.raises(InvalidHorizon) as exc:
            spline_baseline(T, knots, rng)
        assert exc.value.T == T
        assert exc.value.knots == knots

    def test_reproducible(self):
        a = spline_baseline(50, 6, np.random.default_rng(3))
        b = spline_baseline(50, 6, np.random.default_rng(3))
        assert_allclose(a.cumulative_hazard, b.cumulative_hazard)


class TestHazardBaseline:

    def test_constant_hazard(self):
        base = hazard_baseline(lambda t: 0.1, 20)
        assert_allclose(base.cumulative_hazard, 0.1 * np.arange(1, 21))

    def test_negative_hazard_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            hazard_baseline(lambda t: 0.1 if t < 5 else -0.1, 20)

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError, match="non-finite"):
            hazard_baseline(lambda t: np.inf, 20)

    def test_short_horizon(self):
        with pytest.raises(InvalidHorizon):
            hazard_baseline(lambda t: 0.1, 1)


# ═══════════════════════════════════════════════════════════════════════
# Derived functions
# ═══════════════════════════════════════════════════════════════════════


class TestDerivedFunctions:

    @pytest.fixture
    def base(self):
        H = np.array([0.1, 0.3, 0.3, 0.9])
        return BaselineFunctions(
            time=np.arange(1.0, 5.0), cumulative_hazard=H, survivor=np.exp(-H),
        )

    def test_failure_cdf(self, base):
        assert_allclose(base.failure_cdf, 1 - base.survivor)

    def test_failure_pdf_sums_to_cdf(self, base):
        assert_allclose(np.cumsum(base.failure_pdf), base.failure_cdf)
        assert base.failure_pdf[0] == pytest.approx(1 - np.exp(-0.1))

    def test_pdf_zero_where_hazard_flat(self, base):
        assert base.failure_pdf[2] == pytest.approx(0.0)
        assert base.hazard[2] == pytest.approx(0.0)

    def test_discrete_hazard(self, base):
        expected = 1 - np.exp(-np.diff(base.cumulative_hazard, prepend=0.0))
        assert_allclose(base.hazard, expected)
