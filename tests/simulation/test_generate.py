"""
Tests for generate_lm() and the duration generators.

R reference:
    library(coxed)
    sim <- sim.survdata(N = 1000, T = 100, num.data.frames = 1)
    table(sim$data$failed)
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyduration.core.exceptions import (
    InvalidCensorProportion,
    InvalidCovariateSpec,
    ValidationError,
)
from pyduration.expdur import BaselineFunctions
from pyduration.simulation import (
    SimulationSolution,
    baseline_build,
    baseline_from_hazard,
    generate_lm,
)
from pyduration.simulation._generate import (
    censor_indicator,
    expected_durations_discrete,
    invert_survivor,
    tvbeta_coefficients,
)
from pyduration.simulation._permalgo import permutation_algorithm


@pytest.fixture(scope="module")
def baseline():
    return baseline_build(T=100, knots=8, seed=1)


@pytest.fixture(scope="module")
def tvc_sim(baseline):
    return generate_lm(baseline, N=200, type="tvc", beta=[0.3, -0.3, 0.1],
                       censor=0.1, rng=14)


# ═══════════════════════════════════════════════════════════════════════
# Censoring and duration range
# ═══════════════════════════════════════════════════════════════════════


class TestCensoringAndRange:
    """N=1000, censor=0.1: exactly 100 censored subjects for every type."""

    @pytest.mark.parametrize("sim_type", ["none", "tvc", "tvbeta"])
    def test_exact_censored_count(self, baseline, sim_type):
        sim = generate_lm(baseline, N=1000, type=sim_type, xvars=5,
                          censor=0.1, rng=2)

        assert isinstance(sim, SimulationSolution)
        assert sim.n_subjects == 1000
        assert int(np.sum(sim.subject_failed == 0)) == 100
        assert sim.subject_y.min() >= 1
        assert sim.subject_y.max() <= 100
        assert np.all(sim.subject_y == np.round(sim.subject_y))
        assert sim.info["n_censored"] == 100

    def test_no_censoring(self, baseline):
        sim = generate_lm(baseline, N=200, censor=0.0, rng=3)
        assert np.all(sim.failed == 1)
        assert_allclose(sim.censored, 0.0)

    def test_lowest_policy_censors_shortest(self, baseline):
        sim = generate_lm(baseline, N=300, censor=0.2,
                          censor_policy="lowest", rng=4)
        censored = sim.y[sim.failed == 0]
        failed = sim.y[sim.failed == 1]
        assert len(censored) == 60
        assert censored.max() <= failed.min()

    def test_censor_indicator_rounding(self, rng):
        failed = censor_indicator(np.arange(1.0, 8.0), 0.3, "random", rng)
        # round(0.3 * 7) = 2
        assert int(np.sum(failed == 0)) == 2


# ═══════════════════════════════════════════════════════════════════════
# Generating truth
# ═══════════════════════════════════════════════════════════════════════


class TestConstantCovariates:

    def test_user_covariates_kept(self, baseline, rng):
        X = rng.normal(size=(50, 2))
        sim = generate_lm(baseline, X=X, beta=[0.3, -0.3], rng=5)

        assert_allclose(sim.X, X)
        assert_allclose(sim.xb, X @ [0.3, -0.3])
        assert_allclose(sim.exp_xb, np.exp(sim.xb))
        assert sim.betas.shape == (1, 2)

    def test_survivor_is_baseline_power(self, baseline):
        sim = generate_lm(baseline, N=20, beta=[0.5, 0.0, -0.5], rng=6)
        expected = baseline.survivor[None, :] ** sim.exp_xb[:, None]
        assert_allclose(sim.survivor, expected, rtol=1e-10)

    def test_mean_duration_matches_truth(self, baseline):
        sim = generate_lm(baseline, N=5000, beta=[0.0, 0.0, 0.0],
                          censor=0.0, rng=7)
        truth = expected_durations_discrete(baseline.survivor[None, :])[0]
        assert np.mean(sim.y) == pytest.approx(truth, abs=1.5)

    def test_drawn_covariates(self, baseline):
        sim = generate_lm(baseline, N=4000, xvars=2, mu=[1.0, -2.0],
                          sd=[0.5, 2.0], rng=8)
        assert_allclose(sim.X.mean(axis=0), [1.0, -2.0], atol=0.1)
        assert_allclose(sim.X.std(axis=0), [0.5, 2.0], rtol=0.1)

    def test_drawn_beta_when_missing(self, baseline):
        sim = generate_lm(baseline, N=10, xvars=4, rng=9)
        assert sim.betas.shape == (1, 4)
        assert np.all(np.abs(sim.betas) < 1.0)

    def test_defaults(self, baseline):
        sim = generate_lm(baseline, rng=10)
        assert sim.X.shape == (1000, 3)

    def test_reproducible(self, baseline):
        a = generate_lm(baseline, N=100, rng=11)
        b = generate_lm(baseline, N=100, rng=11)
        assert_allclose(a.y, b.y)
        assert_allclose(a.failed, b.failed)

    def test_data_matrix(self, baseline):
        sim = generate_lm(baseline, N=30, xvars=2, rng=12)
        assert sim.columns == ("y", "failed", "X1", "X2")
        assert sim.data.shape == (30, 4)
        assert "Simulated durations" in sim.summary()
        assert "SimulationSolution" in repr(sim)
        assert sim.backend_name == "cpu_simulation"


class TestTimeVaryingCoefficient:

    def test_coefficient_path(self):
        betas = tvbeta_coefficients(np.array([0.4, -0.2]), 10)
        assert betas.shape == (10, 2)
        assert_allclose(betas[:, 0], 0.4 * np.log(np.arange(1, 11)))
        assert_allclose(betas[:, 1], -0.2)

    def test_survivor_uses_coefficient_path(self, baseline):
        sim = generate_lm(baseline, N=25, type="tvbeta", beta=[0.5, 0.2, 0.0], rng=13)

        assert sim.betas.shape == (100, 3)
        assert sim.xb.shape == (25, 100)
        dH = np.diff(baseline.cumulative_hazard, prepend=0.0)
        expected = np.exp(-np.cumsum(np.exp(sim.xb) * dH, axis=1))
        assert_allclose(sim.survivor, expected)
        assert "first coefficient" in sim.summary()


class TestTimeVaryingCovariates:

    def test_counting_process_layout(self, tvc_sim):
        assert tvc_sim.tvc
        assert len(tvc_sim.y) >= tvc_sim.n_subjects
        assert np.all(tvc_sim.start < tvc_sim.y)
        assert tvc_sim.columns[:4] == ("id", "start", "end", "failed")
        assert tvc_sim.data.shape == (len(tvc_sim.y), 7)

    def test_rows_tile_each_subject(self, tvc_sim):
        for i in range(tvc_sim.n_subjects):
            rows = np.flatnonzero(tvc_sim.id == i)
            assert tvc_sim.start[rows[0]] == 0
            assert_allclose(tvc_sim.start[rows[1:]], tvc_sim.y[rows[:-1]])
            assert tvc_sim.y[rows[-1]] == tvc_sim.subject_y[i]
            # Event only on the last row
            assert np.all(tvc_sim.failed[rows[:-1]] == 0)
            assert tvc_sim.failed[rows[-1]] == tvc_sim.subject_failed[i]

    def test_adjacent_rows_differ(self, tvc_sim):
        for i in range(tvc_sim.n_subjects):
            rows = np.flatnonzero(tvc_sim.id == i)
            if len(rows) > 1:
                assert np.all(np.any(np.diff(tvc_sim.X[rows], axis=0) != 0, axis=1))

    def test_assigned_paths_reported(self, tvc_sim):
        """Each subject's rows carry the covariates of its assigned path."""
        paths = tvc_sim.covariate_paths
        assigned = tvc_sim.assigned_path

        assert paths.shape == (200, 100, 3)
        assert sorted(assigned.tolist()) == list(range(200))
        for i in range(tvc_sim.n_subjects):
            rows = np.flatnonzero(tvc_sim.id == i)
            t = tvc_sim.start[rows].astype(int)
            assert_allclose(tvc_sim.X[rows], paths[assigned[i], t])

    def test_constant_types_have_no_paths(self, baseline):
        sim = generate_lm(baseline, N=10, rng=16)
        assert sim.covariate_paths is None
        assert sim.assigned_path is None

    def test_user_x_ignored_with_warning(self, baseline, rng):
        with pytest.warns(UserWarning, match="ignored"):
            sim = generate_lm(baseline, X=rng.normal(size=(50, 3)),
                              type="tvc", N=50, rng=15)
        assert sim.n_subjects == 50
        assert sim.warnings


class TestPermutationAlgorithm:

    def test_every_path_assigned_once(self, rng):
        N, T, p = 30, 10, 2
        paths = np.repeat(rng.normal(size=(N, 1, p)), T, axis=1)
        y = rng.integers(1, T + 1, size=N)
        failed = rng.binomial(1, 0.7, size=N).astype(float)

        rows = permutation_algorithm(y, failed, paths, np.array([0.5, -0.5]), rng)

        assert sorted(rows.path.tolist()) == list(range(N))
        # Constant paths give one row per subject
        assert len(rows.stop) == N
        assert_allclose(rows.X, paths[rows.path, 0])

    def test_high_risk_path_fails_first(self, rng):
        """A dominant risk score is almost surely taken by the first failure."""
        T = 5
        paths = np.zeros((3, T, 1))
        paths[2] = 10.0
        y = np.array([1, 3, 5])
        failed = np.array([1.0, 1.0, 0.0])

        rows = permutation_algorithm(y, failed, paths, np.array([1.0]), rng)
        assert rows.path[0] == 2

    def test_split_rows_at_changes(self, rng):
        paths = np.zeros((1, 6, 1))
        paths[0, 3:] = 1.0
        rows = permutation_algorithm(np.array([6]), np.array([1.0]),
                                     paths, np.array([0.2]), rng)

        assert_allclose(rows.start, [0.0, 3.0])
        assert_allclose(rows.stop, [3.0, 6.0])
        assert_allclose(rows.failed, [0.0, 1.0])
        assert_allclose(rows.X.ravel(), [0.0, 1.0])


class TestInvertSurvivor:

    def test_never_below_gives_horizon(self, rng):
        survivor = np.ones((5, 4))
        assert_allclose(invert_survivor(survivor, np.arange(1.0, 5.0), rng), 4.0)

    def test_first_crossing(self):
        survivor = np.array([[0.9, 0.6, 0.3, 0.1]])

        class FixedDraw:
            def uniform(self, size):
                return np.full(size, 0.5)

        assert invert_survivor(survivor, np.arange(1.0, 5.0), FixedDraw())[0] == 3.0


# ═══════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════


class TestValidation:

    @pytest.mark.parametrize("censor", [1.0, -0.1, 1.5])
    def test_censor_range(self, baseline, censor):
        with pytest.raises(InvalidCensorProportion) as exc:
            generate_lm(baseline, N=10, censor=censor)
        assert exc.value.censor == censor

    def test_unknown_type(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="type"):
            generate_lm(baseline, N=10, type="frailty")

    def test_beta_length(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="beta"):
            generate_lm(baseline, N=10, xvars=3, beta=[0.1, 0.2])

    def test_covariate_count_from_beta(self, baseline):
        """Without X or xvars, the length of beta sets the covariate count."""
        sim = generate_lm(baseline, N=40, beta=[0.5, -0.5], rng=9)
        assert sim.X.shape == (40, 2)
        assert_allclose(sim.betas[0], [0.5, -0.5])

    @pytest.mark.parametrize("type", ["tvc", "tvbeta"])
    def test_covariate_count_from_beta_varying(self, baseline, type):
        sim = generate_lm(baseline, N=30, type=type, beta=[0.2, -0.2], rng=3)
        assert sim.X.shape[1] == 2

    def test_default_three_covariates(self, baseline):
        sim = generate_lm(baseline, N=20, rng=4)
        assert sim.X.shape == (20, 3)

    def test_x_rows_vs_n(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="rows"):
            generate_lm(baseline, X=np.ones((5, 2)), N=10)

    def test_x_columns_vs_xvars(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="xvars"):
            generate_lm(baseline, X=np.ones((5, 2)), xvars=3)

    def test_x_must_be_2d(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="2-D"):
            generate_lm(baseline, X=np.ones(5))

    def test_mu_length(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="mu"):
            generate_lm(baseline, N=10, xvars=3, mu=[0.0, 1.0])

    def test_negative_sd(self, baseline):
        with pytest.raises(InvalidCovariateSpec, match="sd"):
            generate_lm(baseline, N=10, sd=-1.0)

    def test_censor_policy(self, baseline):
        with pytest.raises(ValidationError, match="censor_policy"):
            generate_lm(baseline, N=10, censor_policy="highest")

    def test_baseline_off_grid(self):
        H = np.array([0.1, 0.2, 0.4])
        odd = BaselineFunctions(time=np.array([1.0, 2.5, 4.0]),
                                cumulative_hazard=H, survivor=np.exp(-H))
        with pytest.raises(ValidationError, match="integer grid"):
            generate_lm(odd, N=10)

    def test_baseline_type(self):
        with pytest.raises(ValidationError, match="BaselineFunctions"):
            generate_lm(np.arange(10.0), N=10)


class TestBaselineBuilders:

    def test_baseline_build_defaults(self):
        base = baseline_build(seed=0)
        assert len(base) == 100
        assert base.survivor[-1] == pytest.approx(1e-3, rel=1e-6)

    def test_baseline_from_hazard(self):
        base = baseline_from_hazard(lambda t: 0.02, T=30)
        assert_allclose(base.cumulative_hazard, 0.02 * np.arange(1, 31))

    def test_hazard_must_be_callable(self):
        with pytest.raises(ValidationError, match="callable"):
            baseline_from_hazard(0.02, T=30)
