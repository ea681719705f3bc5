"""
Tests for the PyModelSelect exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyModelSelectError)
    - Diagnostic attributes on InvalidParameterError, UnknownFieldError,
      SingularDesignError, MetricUndefinedError, InsufficientFoldsError
    - Default attribute values
"""

import pytest

from pymodelselect.core.exceptions import (
    DimensionError,
    InsufficientFoldsError,
    InvalidParameterError,
    MetricUndefinedError,
    NumericalError,
    ParetoKWarning,
    PyModelSelectError,
    SingularDesignError,
    UnknownFieldError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyModelSelectError."""

    @pytest.mark.parametrize("exc", [
        ValidationError("x"),
        DimensionError("x"),
        InvalidParameterError("x"),
        UnknownFieldError("x"),
        NumericalError("x"),
        SingularDesignError("x"),
        MetricUndefinedError("x"),
        InsufficientFoldsError("x", n_folds=1),
    ])
    def test_catchable_as_base(self, exc):
        with pytest.raises(PyModelSelectError):
            raise exc

    def test_parameter_errors_are_validation_errors(self):
        assert issubclass(InvalidParameterError, ValidationError)
        assert issubclass(UnknownFieldError, ValidationError)
        assert issubclass(DimensionError, ValidationError)

    def test_singular_design_is_numerical(self):
        assert issubclass(SingularDesignError, NumericalError)

    def test_metric_and_folds_errors_are_not_validation_errors(self):
        assert not issubclass(MetricUndefinedError, ValidationError)
        assert not issubclass(InsufficientFoldsError, ValidationError)

    def test_pareto_k_warning_is_user_warning(self):
        assert issubclass(ParetoKWarning, UserWarning)
        assert not issubclass(ParetoKWarning, PyModelSelectError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestInvalidParameterError:

    def test_attributes(self):
        err = InvalidParameterError("v must be >= 2", parameter='v', value=1)
        assert str(err) == "v must be >= 2"
        assert err.parameter == 'v'
        assert err.value == 1

    def test_defaults_are_none(self):
        err = InvalidParameterError("bad")
        assert err.parameter is None
        assert err.value is None


class TestUnknownFieldError:

    def test_attributes(self):
        err = UnknownFieldError("no field", field='cut', available=('x', 'y'))
        assert err.field == 'cut'
        assert err.available == ('x', 'y')

    def test_defaults(self):
        err = UnknownFieldError("no field")
        assert err.field is None
        assert err.available == ()


class TestSingularDesignError:

    def test_all_attributes(self):
        err = SingularDesignError("rank deficient", matrix_name='X', rank=2, expected_rank=3)
        assert err.matrix_name == 'X'
        assert err.rank == 2
        assert err.expected_rank == 3

    def test_catchable_with_attributes(self):
        with pytest.raises(SingularDesignError) as exc_info:
            raise SingularDesignError("singular", rank=1, expected_rank=4)
        assert exc_info.value.rank == 1
        assert exc_info.value.expected_rank == 4


class TestMetricUndefinedError:

    def test_attributes(self):
        err = MetricUndefinedError("no loglik", metric='elpd', model_type='LinearModel')
        assert err.metric == 'elpd'
        assert err.model_type == 'LinearModel'

    def test_model_type_optional(self):
        assert MetricUndefinedError("unknown", metric='auc').model_type is None


class TestInsufficientFoldsError:

    def test_n_folds_required(self):
        err = InsufficientFoldsError("need 2", 1)
        assert err.n_folds == 1

    def test_zero_folds(self):
        err = InsufficientFoldsError("need 2", n_folds=0)
        assert err.n_folds == 0
