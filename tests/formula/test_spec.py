"""
Tests for Term and FormulaSpec construction and parsing.
"""

import pytest

from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import UnknownFieldError, ValidationError
from pymodelselect.formula import FormulaSpec, Term, register_transform


class TestTerm:

    def test_bare_field_is_identity(self):
        term = Term('carat')
        assert term.transform == 'identity'
        assert term.fields == ('carat',)
        assert term.label == 'carat'

    def test_transform(self):
        assert Term('log', 'carat').label == 'log(carat)'

    def test_interaction_label(self):
        assert Term('interaction', ('x', 'g')).label == 'x:g'

    def test_interaction_needs_two_fields(self):
        with pytest.raises(ValidationError, match="at least two"):
            Term('interaction', ('x',))

    def test_unknown_transform(self):
        with pytest.raises(ValidationError, match="Unknown transform"):
            Term('logit', 'x')

    def test_equality(self):
        assert Term.parse('log(x)') == Term('log', 'x')

    @pytest.mark.parametrize("text", ['log(x y)', '1x', 'a:'])
    def test_bad_names(self, text):
        with pytest.raises(ValidationError):
            Term.parse(text)


class TestParse:

    def test_diamonds_formula(self):
        f = FormulaSpec.parse('log(price) ~ log(carat) + clarity')
        assert f.response == Term('log', 'price')
        assert f.terms == (Term('log', 'carat'), Term('clarity'))
        assert f.intercept is True
        assert f.label == 'log(price) ~ log(carat) + clarity'

    def test_no_intercept(self):
        f = FormulaSpec.parse('y ~ x - 1')
        assert f.intercept is False
        assert f.label == 'y ~ x - 1'

    def test_zero_removes_intercept(self):
        assert FormulaSpec.parse('y ~ 0 + x').intercept is False

    def test_intercept_only(self):
        f = FormulaSpec.parse('y ~ 1')
        assert f.terms == ()
        assert f.label == 'y ~ 1'

    def test_interaction(self):
        f = FormulaSpec.parse('y ~ x + g + x:g')
        assert f.terms[-1] == Term('interaction', ('x', 'g'))

    def test_only_one_may_be_subtracted(self):
        with pytest.raises(ValidationError, match="Only '- 1'"):
            FormulaSpec.parse('y ~ x - z')

    def test_needs_tilde(self):
        with pytest.raises(ValidationError, match="exactly one"):
            FormulaSpec.parse('y x')

    def test_duplicate_terms(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            FormulaSpec.parse('y ~ x + x')

    def test_empty_model(self):
        with pytest.raises(ValidationError):
            FormulaSpec.parse('y ~ - 1')

    def test_fields(self):
        f = FormulaSpec.parse('log(price) ~ log(carat) + carat:clarity')
        assert f.fields == {'price', 'carat', 'clarity'}
        assert f.predictor_fields == {'carat', 'clarity'}

    def test_registered_transform(self):
        import numpy as np
        try:
            register_transform('cbrt_test', np.cbrt)
        except ValueError:
            pass
        f = FormulaSpec.parse('y ~ cbrt_test(x)')
        assert f.terms[0].transform == 'cbrt_test'


class TestValidate:

    def test_unknown_field(self):
        ds = Dataset.from_columns(x=[1.0, 2.0], y=[1.0, 2.0])
        with pytest.raises(UnknownFieldError) as exc_info:
            FormulaSpec.parse('y ~ x + cut').validate(ds)
        assert exc_info.value.field == 'cut'
        assert exc_info.value.available == ('x', 'y')

    def test_categorical_response(self):
        ds = Dataset.from_columns(x=[1.0, 2.0], g=['a', 'b'])
        with pytest.raises(ValidationError, match="must be numeric"):
            FormulaSpec.parse('g ~ x').validate(ds)

    def test_transform_of_categorical(self):
        ds = Dataset.from_columns(y=[1.0, 2.0], g=['a', 'b'])
        with pytest.raises(ValidationError, match="categorical"):
            FormulaSpec.parse('y ~ log(g)').validate(ds)
