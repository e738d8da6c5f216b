"""
Tests for the GAM (rank regression) engine.

R reference:
    library(coxed)
    ed <- coxed(model, method = "gam")
    ed$gam.data
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from pyduration.core.exceptions import DegenerateFitError, OutOfRangeWarning
from pyduration.expdur import ExpDurDesign, expected_durations
from pyduration.expdur._gam import gam_fit, rank_from_lp


def _fit(model, **kwargs):
    return gam_fit(ExpDurDesign.for_expdur(model, method="gam", **kwargs))


class TestGamFit:

    def test_tracks_observed_durations(self, cox_model):
        out = _fit(cox_model)
        failed = cox_model.event == 1
        rho, _ = stats.spearmanr(out.exp_dur[failed], cox_model.time[failed])
        assert rho > 0

    def test_higher_risk_shorter_duration(self, cox_model):
        out = _fit(cox_model)
        rho, _ = stats.spearmanr(out.exp_dur, cox_model.linear_predictor())
        assert rho < 0

    def test_fit_table(self, cox_model):
        table = _fit(cox_model).gam_fit
        n = len(cox_model.time)

        assert_allclose(table.rank, np.arange(1, n + 1))
        assert np.all(table.fitted_lower <= table.fitted)
        assert np.all(table.fitted <= table.fitted_upper)
        assert set(np.unique(table.failed)) <= {0.0, 1.0}

    def test_rank_one_is_highest_risk(self, cox_model):
        table = _fit(cox_model).gam_fit
        lp = cox_model.linear_predictor()
        top = np.argmax(lp)
        assert table.duration[0] == cox_model.time[top]

    def test_wider_band_at_higher_level(self, cox_model):
        narrow = _fit(cox_model, level=0.8).gam_fit
        wide = _fit(cox_model, level=0.99).gam_fit
        assert np.all(
            wide.fitted_upper - wide.fitted_lower
            >= narrow.fitted_upper - narrow.fitted_lower - 1e-12
        )

    def test_newdata_equal_to_sample(self, cox_model):
        in_sample = _fit(cox_model)
        explicit = _fit(cox_model, newdata=cox_model.X)
        assert_allclose(explicit.exp_dur, in_sample.exp_dur, rtol=1e-8)
        assert explicit.n_out_of_range == 0

    def test_no_baseline(self, cox_model):
        out = _fit(cox_model)
        assert out.baseline is None
        assert out.risk_set is None


class TestDegenerate:

    def test_too_few_failures(self, stub_model):
        time = np.arange(1.0, 11.0)
        event = np.array([1, 1, 1, 1, 0, 0, 0, 0, 0, 0], dtype=float)
        X = np.linspace(-1, 1, 10).reshape(-1, 1)
        model = stub_model(time, event, X, [0.5])

        with pytest.raises(DegenerateFitError) as exc:
            _fit(model)
        assert exc.value.n_distinct == 4
        assert exc.value.min_required == 5

    def test_small_basis(self, stub_model):
        """Five failures is enough; the basis shrinks to fit."""
        time = np.arange(1.0, 11.0)
        event = np.array([1, 1, 1, 1, 1, 0, 0, 0, 0, 0], dtype=float)
        X = np.linspace(-1, 1, 10).reshape(-1, 1)
        out = _fit(stub_model(time, event, X, [0.5]))
        assert np.all(np.isfinite(out.exp_dur))


class TestRankFromLp:

    def test_ties_take_mean_rank(self):
        train_lp = np.array([0.0, 0.0, 1.0, 2.0])
        train_rank = stats.rankdata(-train_lp, method="ordinal").astype(float)
        ranks, n_out = rank_from_lp(train_lp, train_rank, np.array([0.0, 0.5]))

        assert_allclose(ranks, [3.5, 2.75])
        assert n_out == 0

    def test_out_of_range_clamped(self):
        train_lp = np.array([-1.0, 0.0, 1.0])
        train_rank = np.array([3.0, 2.0, 1.0])
        ranks, n_out = rank_from_lp(train_lp, train_rank, np.array([-5.0, 5.0, 0.0]))

        assert_allclose(ranks, [3.0, 1.0, 2.0])
        assert n_out == 2


class TestOutOfRangeWarning:

    def test_warning_and_count(self, cox_model):
        far = cox_model.X[:5] * 50.0
        with pytest.warns(OutOfRangeWarning, match="outside the training range"):
            result = expected_durations(cox_model, method="gam", newdata=far)

        assert result.info["n_out_of_range"] > 0
        assert result.warnings
        assert np.all(np.isfinite(result.exp_dur))

    def test_no_warning_in_range(self, cox_model, recwarn):
        expected_durations(cox_model, method="gam", newdata=cox_model.X[:5])
        assert not [w for w in recwarn if issubclass(w.category, OutOfRangeWarning)]
