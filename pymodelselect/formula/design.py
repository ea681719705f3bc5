"""
Formula Design.

Design turns a FormulaSpec plus a Dataset into a numeric design matrix X
and response y. It knows it's building a regression; the Dataset doesn't.

The encoding learned from the training data (which categorical levels
exist, and therefore which indicator columns X has) is kept in a
ModelFrame so that test data is encoded into exactly the same columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.dataset import CATEGORICAL, Dataset
from pymodelselect.core.exceptions import ValidationError
from pymodelselect.core.validation import (
    check_consistent_length,
    check_finite,
)
from pymodelselect.formula.spec import FormulaSpec, Term
from pymodelselect.formula.transforms import get_transform

INTERCEPT = '(Intercept)'


@dataclass(frozen=True)
class ModelFrame:
    """
    Column encoding of a formula, learned from training data.

    Attributes:
        formula: The formula being encoded
        levels: For each categorical field, the levels seen in training,
            in declared order. The first is the reference level.
        full_coding: Fields coded with one indicator per level (the first
            categorical main effect of a no-intercept model)
        column_names: Names of the design-matrix columns
    """
    formula: FormulaSpec
    levels: dict[str, tuple[str, ...]]
    full_coding: frozenset[str]
    column_names: tuple[str, ...]

    @classmethod
    def learn(cls, formula: FormulaSpec, data: Dataset) -> ModelFrame:
        """
        Learn the encoding from a training Dataset.

        Raises:
            UnknownFieldError: If the formula references missing fields
        """
        formula.validate(data)

        levels: dict[str, tuple[str, ...]] = {}
        for name in sorted(formula.predictor_fields):
            if data.kind(name) == CATEGORICAL:
                present = set(data[name].tolist())
                levels[name] = tuple(
                    level for level in data.levels(name) if level in present
                )

        full_coding: set[str] = set()
        if not formula.intercept:
            for term in formula.terms:
                if term.transform == 'identity' and term.fields[0] in levels:
                    full_coding.add(term.fields[0])
                    break

        names: list[str] = [INTERCEPT] if formula.intercept else []
        frame = cls(
            formula=formula,
            levels=levels,
            full_coding=frozenset(full_coding),
            column_names=(),
        )
        for term in formula.terms:
            names.extend(frame._term_names(term))
        return cls(
            formula=formula,
            levels=levels,
            full_coding=frame.full_coding,
            column_names=tuple(names),
        )

    @property
    def n_columns(self) -> int:
        return len(self.column_names)

    def matrix(self, data: Dataset) -> NDArray[np.floating[Any]]:
        """
        Design matrix for `data`, shape (n, n_columns).

        Raises:
            UnknownFieldError: If a predictor field is missing
            ValidationError: If a categorical value was not seen in training,
                or a transform produces non-finite values
        """
        self.formula.validate(data, require_response=False)
        n = data.n_observations
        blocks: list[NDArray] = []
        if self.formula.intercept:
            blocks.append(np.ones((n, 1), dtype=np.float64))
        for term in self.formula.terms:
            blocks.append(self._term_block(term, data))
        X = np.hstack(blocks) if blocks else np.empty((n, 0))
        check_finite(X, 'X')
        return X

    def response(self, data: Dataset) -> NDArray[np.floating[Any]]:
        """
        Response term evaluated on `data`, shape (n,).

        Raises:
            UnknownFieldError: If the response field is missing
            ValidationError: If the transform produces non-finite values
        """
        term = self.formula.response
        column = data.column(term.fields[0])
        if data.kind(term.fields[0]) == CATEGORICAL:
            raise ValidationError(f"Response '{term.label}' must be numeric")
        y = np.asarray(get_transform(term.transform).apply(column), dtype=np.float64)
        check_finite(y, term.label)
        return y

    # === Term encoding ===

    def _coded_levels(self, name: str) -> tuple[str, ...]:
        levels = self.levels[name]
        return levels if name in self.full_coding else levels[1:]

    def _term_names(self, term: Term) -> list[str]:
        if term.transform == 'interaction':
            names = ['']
            for name in term.fields:
                parts = (
                    [f"{name}{level}" for level in self._coded_levels(name)]
                    if name in self.levels else [name]
                )
                names = [f"{a}:{b}" if a else b for a in names for b in parts]
            return names
        name = term.fields[0]
        if name in self.levels:
            return [f"{name}{level}" for level in self._coded_levels(name)]
        return [term.label]

    def _indicators(self, name: str, data: Dataset) -> NDArray:
        values = data[name]
        known = set(self.levels[name])
        unseen = sorted(set(values.tolist()) - known)
        if unseen:
            raise ValidationError(
                f"Field '{name}' has levels {unseen} not seen when the model "
                f"was fit (known: {list(self.levels[name])})"
            )
        coded = self._coded_levels(name)
        return np.column_stack(
            [(values == level).astype(np.float64) for level in coded]
        ) if coded else np.empty((len(values), 0))

    def _term_block(self, term: Term, data: Dataset) -> NDArray:
        transform = get_transform(term.transform)
        if term.transform == 'interaction':
            block = np.ones((data.n_observations, 1))
            for name in term.fields:
                if name in self.levels:
                    part = self._indicators(name, data)
                else:
                    part = data[name].reshape(-1, 1)
                block = np.einsum('ni,nj->nij', block, part).reshape(data.n_observations, -1)
            return block

        name = term.fields[0]
        if name in self.levels:
            return self._indicators(name, data)
        column = transform.apply(*(data[f] for f in term.fields))
        return np.asarray(column, dtype=np.float64).reshape(-1, 1)


@dataclass(frozen=True)
class FormulaDesign:
    """
    Regression design built from a formula.

    Immutable after construction. Backends read X and y; the ModelFrame
    travels with the fitted model so predictions use the same encoding.
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _frame: ModelFrame
    _n: int
    _p: int

    @classmethod
    def build(cls, formula: FormulaSpec, data: Dataset) -> FormulaDesign:
        """
        Learn the encoding from `data` and build X and y.

        Raises:
            UnknownFieldError: If the formula references missing fields
            ValidationError: If the data cannot be encoded
        """
        frame = ModelFrame.learn(formula, data)
        X = frame.matrix(data)
        y = frame.response(data)
        check_consistent_length(X, y, names=('X', 'y'))
        n, p = X.shape
        return cls(_X=X, _y=y, _frame=frame, _n=n, _p=p)

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def frame(self) -> ModelFrame:
        return self._frame

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of design-matrix columns."""
        return self._p

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._frame.column_names

    def XtX(self) -> NDArray[np.floating[Any]]:
        return self._X.T @ self._X

    def Xty(self) -> NDArray[np.floating[Any]]:
        return self._X.T @ self._y
