"""
Tests for fit() with the least-squares engine.

Tests the complete pipeline: formula parsing, design construction,
backend selection, and model properties.
"""

import numpy as np
import pytest

from pymodelselect.core.capabilities import (
    CAPABILITY_LOG_LIKELIHOOD,
    CAPABILITY_PREDICT,
)
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import (
    InvalidParameterError,
    SingularDesignError,
    UnknownFieldError,
    ValidationError,
)
from pymodelselect.core.protocols import Backend, DistributionalModel, FittedModel
from pymodelselect.fitting import LinearModel, SamplerConfig, fit
from pymodelselect.fitting.backends.cpu import CPUQRBackend
from pymodelselect.fitting.backends.gibbs import CPUGibbsBackend
from pymodelselect.fitting.solvers import _get_backend
from pymodelselect.formula import FormulaSpec


class TestFitBasic:
    """Basic fit() functionality tests."""

    def test_returns_linear_model(self, anscombe):
        model = fit('y ~ x', anscombe)
        assert isinstance(model, LinearModel)
        assert model.column_names == ('(Intercept)', 'x')
        assert model.n_parameters == 2

    def test_anscombe_coefficients(self, anscombe):
        """The famous fit: y = 3.0001 + 0.5001 x."""
        model = fit('y ~ x', anscombe)
        np.testing.assert_allclose(model.coefficients, [3.0001, 0.5001], atol=1e-4)
        assert model.r_squared == pytest.approx(0.6665, abs=1e-4)

    def test_matches_lstsq(self, curved_data):
        model = fit('y ~ x + square(x)', curved_data)
        x, y = curved_data['x'], curved_data['y']
        X = np.column_stack([np.ones_like(x), x, x ** 2])
        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        np.testing.assert_allclose(model.coefficients, expected, rtol=1e-8)

    def test_accepts_formula_spec(self, linear_data):
        spec = FormulaSpec(response='y', terms=['x'])
        np.testing.assert_allclose(
            fit(spec, linear_data).coefficients, fit('y ~ x', linear_data).coefficients,
        )

    def test_accepts_records(self):
        records = [{'x': float(i), 'y': 2.0 * i + 1.0} for i in range(5)]
        model = fit('y ~ x', records)
        np.testing.assert_allclose(model.coefficients, [1.0, 2.0], atol=1e-10)

    def test_residuals_sum_to_zero_with_intercept(self, linear_data):
        model = fit('y ~ x', linear_data)
        assert abs(model.residuals.sum()) < 1e-9

    def test_deterministic(self, linear_data):
        a = fit('y ~ x', linear_data).coefficients
        b = fit('y ~ x', linear_data).coefficients
        np.testing.assert_array_equal(a, b)

    def test_dataset_not_modified(self, linear_data):
        before = linear_data['y'].copy()
        fit("y ~ x + square(x)", linear_data)
        np.testing.assert_array_equal(linear_data['y'], before)


class TestFitProperties:
    """Derived properties of LinearModel."""

    def test_standard_errors_positive(self, linear_data):
        se = fit('y ~ x', linear_data).standard_errors
        assert np.all(se > 0)

    def test_p_values_in_unit_interval(self, linear_data):
        pv = fit('y ~ x', linear_data).p_values
        assert np.all((pv >= 0) & (pv <= 1))

    def test_slope_significant(self, linear_data):
        assert fit('y ~ x', linear_data).p_values[1] < 1e-10

    def test_summary(self, anscombe):
        text = fit('y ~ x', anscombe).summary()
        assert 'R-squared' in text
        assert 'Pr(>|t|)' in text
        assert 'cpu_qr' in text

    def test_timing_recorded(self, anscombe):
        timing = fit('y ~ x', anscombe).timing
        assert 'qr_solve' in timing
        assert timing['total_seconds'] >= 0


class TestPredict:

    def test_predict_record(self, anscombe):
        model = fit('y ~ x', anscombe)
        pred = model.predict({'x': 10.0})
        assert pred.shape == (1,)
        assert pred[0] == pytest.approx(3.0001 + 0.5001 * 10.0, abs=1e-3)

    def test_predict_transformed_scale(self, diamonds_like):
        model = fit('log(price) ~ log(carat) + clarity', diamonds_like)
        pred = model.predict(diamonds_like)
        np.testing.assert_allclose(pred, model.fitted_values)
        np.testing.assert_allclose(
            model.observed_response(diamonds_like), np.log(diamonds_like['price'])
        )

    def test_protocols(self, anscombe):
        model = fit('y ~ x', anscombe)
        assert isinstance(model, FittedModel)
        assert not isinstance(model, DistributionalModel)
        assert model.supports(CAPABILITY_PREDICT)
        assert not model.supports(CAPABILITY_LOG_LIKELIHOOD)

    def test_unseen_level(self, diamonds_like):
        train = diamonds_like.take(np.flatnonzero(diamonds_like['clarity'] != 'VS1'))
        model = fit('log(price) ~ log(carat) + clarity', train)
        test = diamonds_like.take(np.flatnonzero(diamonds_like['clarity'] == 'VS1'))
        with pytest.raises(ValidationError):
            model.predict(test)


class TestFitErrors:

    def test_unknown_field(self, anscombe):
        with pytest.raises(UnknownFieldError) as exc_info:
            fit('y ~ x + cut', anscombe)
        assert exc_info.value.field == 'cut'

    def test_collinear_design(self, rng):
        x = rng.standard_normal(30)
        ds = Dataset.from_columns(x=x, z=2.0 * x, y=rng.standard_normal(30))
        with pytest.raises(SingularDesignError) as exc_info:
            fit('y ~ x + z', ds)
        assert exc_info.value.expected_rank == 3

    def test_too_few_rows(self):
        ds = Dataset.from_columns(x=[1.0, 2.0], z=[3.0, 1.0], y=[0.0, 1.0])
        with pytest.raises(SingularDesignError):
            fit('y ~ x + z', ds)

    def test_unknown_engine(self, anscombe):
        with pytest.raises(InvalidParameterError) as exc_info:
            fit('y ~ x', anscombe, engine='lasso')
        assert exc_info.value.parameter == 'engine'

    def test_unknown_backend(self, anscombe):
        with pytest.raises(InvalidParameterError):
            fit('y ~ x', anscombe, backend='tpu')


class TestBackendSelection:

    def test_backends_satisfy_protocol(self):
        assert isinstance(CPUQRBackend(), Backend)
        assert isinstance(_get_backend('cpu'), Backend)
        assert isinstance(CPUGibbsBackend(SamplerConfig()), Backend)

    def test_auto_matches_cpu(self, linear_data):
        cpu = fit('y ~ x', linear_data, backend='cpu')
        auto = fit('y ~ x', linear_data, backend='auto')
        np.testing.assert_allclose(cpu.coefficients, auto.coefficients, rtol=1e-5)


def _gpu_available():
    try:
        import torch
        return torch.cuda.is_available()
    except ImportError:
        return False


@pytest.mark.skipif(not _gpu_available(), reason="No CUDA GPU available")
class TestGPU:

    def test_gpu_matches_cpu(self, curved_data):
        cpu = fit('y ~ x + square(x)', curved_data, backend='cpu')
        gpu = fit('y ~ x + square(x)', curved_data, backend='gpu')
        assert gpu.backend_name == 'gpu_qr'
        np.testing.assert_allclose(gpu.coefficients, cpu.coefficients, rtol=1e-8)

    def test_gpu_singular(self, rng):
        x = rng.standard_normal(30)
        ds = Dataset.from_columns(x=x, z=2.0 * x, y=rng.standard_normal(30))
        with pytest.raises(SingularDesignError):
            fit('y ~ x + z', ds, backend='gpu')
