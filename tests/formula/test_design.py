"""
Tests for model-matrix construction.
"""

import numpy as np
import pytest

from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import ValidationError
from pymodelselect.formula import FormulaSpec
from pymodelselect.formula.design import INTERCEPT, FormulaDesign, ModelFrame


@pytest.fixture
def small():
    return Dataset.from_columns(
        x=[1.0, 2.0, 3.0, 4.0],
        y=[2.0, 4.0, 6.0, 8.0],
        g=['a', 'b', 'c', 'b'],
    )


class TestNumericTerms:

    def test_intercept_and_slope(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('y ~ x'), small)
        assert design.column_names == (INTERCEPT, 'x')
        np.testing.assert_array_equal(design.X[:, 0], 1.0)
        np.testing.assert_array_equal(design.X[:, 1], small['x'])
        assert (design.n, design.p) == (4, 2)

    def test_transformed_response(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('log(y) ~ x'), small)
        np.testing.assert_allclose(design.y, np.log(small['y']))

    def test_square_term(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('y ~ x + square(x)'), small)
        np.testing.assert_array_equal(design.X[:, 2], small['x'] ** 2)

    def test_non_finite_transform(self):
        ds = Dataset.from_columns(x=[0.0, 1.0], y=[1.0, 2.0])
        with pytest.raises(ValidationError, match="non-finite"):
            FormulaDesign.build(FormulaSpec.parse('y ~ log(x)'), ds)

    def test_cross_products(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('y ~ x'), small)
        np.testing.assert_allclose(design.XtX(), design.X.T @ design.X)
        np.testing.assert_allclose(design.Xty(), design.X.T @ design.y)


class TestCategoricalTerms:

    def test_treatment_coding(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('y ~ g'), small)
        assert design.column_names == (INTERCEPT, 'gb', 'gc')
        np.testing.assert_array_equal(design.X[:, 1], [0, 1, 0, 1])
        np.testing.assert_array_equal(design.X[:, 2], [0, 0, 1, 0])

    def test_full_coding_without_intercept(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('y ~ g - 1'), small)
        assert design.column_names == ('ga', 'gb', 'gc')
        np.testing.assert_array_equal(design.X.sum(axis=1), 1.0)

    def test_interaction_numeric_by_categorical(self, small):
        design = FormulaDesign.build(FormulaSpec.parse('y ~ x + g + x:g'), small)
        assert design.column_names[-2:] == ('x:gb', 'x:gc')
        np.testing.assert_array_equal(design.X[:, -2], [0, 2, 0, 4])

    def test_levels_come_from_training_rows(self):
        ds = Dataset.from_columns(
            x=[1.0, 2.0, 3.0], y=[1.0, 2.0, 3.0], g=['a', 'b', 'a'],
            levels={'g': ['a', 'b', 'c']},
        )
        frame = ModelFrame.learn(FormulaSpec.parse('y ~ g'), ds)
        assert frame.levels['g'] == ('a', 'b')
        assert frame.n_columns == 2

    def test_unseen_level_in_new_data(self, small):
        train = small.take([0, 1, 3])
        frame = ModelFrame.learn(FormulaSpec.parse('y ~ g'), train)
        with pytest.raises(ValidationError, match="not seen"):
            frame.matrix(small.take([2]))

    def test_same_columns_for_test_rows(self, small):
        frame = ModelFrame.learn(FormulaSpec.parse('y ~ x + g'), small)
        X_test = frame.matrix(small.take([1]))
        assert X_test.shape == (1, frame.n_columns)
        np.testing.assert_array_equal(X_test[0], [1.0, 2.0, 1.0, 0.0])

    def test_matrix_needs_no_response(self, small):
        frame = ModelFrame.learn(FormulaSpec.parse('y ~ x'), small)
        new = Dataset.from_columns(x=[10.0])
        np.testing.assert_array_equal(frame.matrix(new), [[1.0, 10.0]])


class TestTransformFailures:

    def test_user_transform_error_becomes_validation_error(self, small, failing_transform):
        formula = FormulaSpec.parse(f'y ~ {failing_transform}(x)')
        with pytest.raises(ValidationError, match="input rejected") as exc_info:
            FormulaDesign.build(formula, small)
        assert isinstance(exc_info.value.__cause__, ValueError)
