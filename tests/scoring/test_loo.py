"""
Tests for PSIS smoothing, loo() and loo_compare().
"""

import warnings

import numpy as np
import pytest
from scipy import stats

from pymodelselect.core.exceptions import (
    DimensionError,
    MetricUndefinedError,
    ParetoKWarning,
    ValidationError,
)
from pymodelselect.fitting import fit
from pymodelselect.scoring import PARETO_K_BAD, PARETO_K_OK, loo, loo_compare, psis_smooth
from pymodelselect.scoring._psis import gpd_fit, tail_length
from pymodelselect.scoring.loo import pareto_k_messages


def _quiet_loo(model, data):
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', ParetoKWarning)
        return loo(model, data)


# ═══════════════════════════════════════════════════════════════════════
# Pareto smoothing
# ═══════════════════════════════════════════════════════════════════════


class TestPsis:

    def test_tail_length(self):
        assert tail_length(4000) == 190
        assert tail_length(100) == 20

    def test_weights_normalised(self, rng):
        log_ratios = rng.standard_normal((1000, 5))
        lw, k = psis_smooth(log_ratios)
        np.testing.assert_allclose(np.exp(lw).sum(axis=0), 1.0, rtol=1e-10)
        assert k.shape == (5,)

    def test_light_tail_has_small_k(self, rng):
        _, k = psis_smooth(rng.standard_normal((2000, 3)) * 0.1)
        assert np.all(k < PARETO_K_OK)

    def test_too_few_draws_gives_inf(self, rng):
        _, k = psis_smooth(rng.standard_normal((10, 2)))
        assert np.all(np.isinf(k))

    def test_rejects_non_finite(self):
        ratios = np.zeros((100, 2))
        ratios[0, 0] = np.inf
        with pytest.raises(ValidationError):
            psis_smooth(ratios)

    def test_gpd_fit_recovers_shape(self):
        x = np.sort(stats.genpareto.rvs(0.3, scale=2.0, size=4000, random_state=1))
        k, sigma = gpd_fit(x)
        assert k == pytest.approx(0.3, abs=0.08)
        assert sigma == pytest.approx(2.0, rel=0.15)


class TestParetoKMessages:

    def test_all_good(self):
        assert pareto_k_messages(np.array([0.1, 0.4])) == ()

    def test_ok_and_bad(self):
        messages = pareto_k_messages(np.array([0.1, 0.6, 0.9, 1.3]))
        assert len(messages) == 2
        assert messages[0].startswith("1 observation")
        assert messages[1].startswith("2 observation")
        assert str(PARETO_K_BAD) in messages[1]


# ═══════════════════════════════════════════════════════════════════════
# loo()
# ═══════════════════════════════════════════════════════════════════════


class TestLoo:

    @pytest.fixture
    def model(self, linear_data, fast_sampler):
        return fit('y ~ x', linear_data, engine='bayes', seed=31, sampler=fast_sampler)

    def test_fields(self, model, linear_data):
        sol = _quiet_loo(model, linear_data)
        assert sol.n_observations == 60
        assert sol.n_draws == 400
        assert sol.pointwise.shape == (60,)
        assert sol.pareto_k.shape == (60,)
        assert sol.looic == pytest.approx(-2.0 * sol.elpd_loo)
        assert sol.looic_se == pytest.approx(2.0 * sol.se)
        assert sol.elpd_loo == pytest.approx(sol.pointwise.sum())

    def test_effective_parameters(self, model, linear_data):
        # two coefficients plus sigma
        sol = _quiet_loo(model, linear_data)
        assert 1.0 < sol.p_loo < 6.0

    def test_elpd_below_in_sample(self, model, linear_data):
        sol = _quiet_loo(model, linear_data)
        lpd = float(sol._result.params.lpd_i.sum())
        assert sol.elpd_loo < lpd

    def test_pareto_k_table_counts(self, model, linear_data):
        table = _quiet_loo(model, linear_data).pareto_k_table()
        assert sum(table.values()) == 60

    def test_summary(self, model, linear_data):
        text = _quiet_loo(model, linear_data).summary()
        assert 'elpd_loo' in text
        assert 'p_loo' in text
        assert 'looic' in text
        assert 'Pareto k' in text

    def test_requires_log_likelihood(self, linear_data):
        with pytest.raises(MetricUndefinedError) as exc_info:
            loo(fit('y ~ x', linear_data), linear_data)
        assert exc_info.value.metric == 'elpd_loo'

    def test_empty_dataset(self, model, linear_data):
        with pytest.raises(ValidationError):
            loo(model, linear_data.take([]))

    def test_outlier_flagged_unreliable(self, anscombe_outlier):
        """The gross outlier at (13, -6) dominates its own importance ratios."""
        model = fit('y ~ x', anscombe_outlier, engine='bayes', seed=1)
        with pytest.warns(ParetoKWarning, match="unreliable"):
            sol = loo(model, anscombe_outlier)
        assert sol.pareto_k[-1] > PARETO_K_BAD
        assert any("unreliable" in m for m in sol.warnings)
        assert "Warning:" in sol.summary()


class TestLooCompare:

    @pytest.fixture
    def loos(self, curved_data, fast_sampler):
        quad = fit('y ~ x + square(x)', curved_data, engine='bayes', seed=41, sampler=fast_sampler)
        line = fit('y ~ x', curved_data, engine='bayes', seed=42, sampler=fast_sampler)
        return {
            'line': _quiet_loo(line, curved_data),
            'quad': _quiet_loo(quad, curved_data),
        }

    def test_best_first(self, loos):
        comp = loo_compare(loos)
        assert comp.best == 'quad'
        assert comp.names == ('quad', 'line')
        assert comp.elpd_diff[0] == 0.0
        assert comp.se_diff[0] == 0.0
        assert comp.elpd_diff[1] < 0.0
        assert comp.se_diff[1] > 0.0

    def test_diff_matches_elpd(self, loos):
        comp = loo_compare(loos)
        assert comp.elpd_diff[1] == pytest.approx(comp.elpd_loo[1] - comp.elpd_loo[0])

    def test_rows_and_summary(self, loos):
        comp = loo_compare(loos)
        assert [r['model'] for r in comp.rows()] == ['quad', 'line']
        assert 'elpd_diff' in comp.summary()

    def test_needs_two_models(self, loos):
        with pytest.raises(ValidationError):
            loo_compare({'quad': loos['quad']})

    def test_mismatched_observations(self, loos, curved_data, fast_sampler):
        half = curved_data.take(np.arange(40))
        small = fit('y ~ x', half, engine='bayes', seed=43, sampler=fast_sampler)
        with pytest.raises(DimensionError):
            loo_compare({'quad': loos['quad'], 'small': _quiet_loo(small, half)})
