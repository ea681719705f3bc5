"""
Predictor and response transformations.

Each Transform defines:
- A name used in Term labels and in parsed formulas ("log", "sqrt", ...)
- An arity (how many fields it combines)
- apply(*columns) producing one numeric column

Categorical fields are not transformed here; the model-matrix builder
expands them into treatment-coded indicator blocks. Only `identity` and
`interaction` accept categorical fields.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.exceptions import ValidationError


class Transform(ABC):
    """Named transformation of one or more numeric columns."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    def arity(self) -> int | None:
        """Number of fields taken; None means two or more."""
        return 1

    @property
    def accepts_categorical(self) -> bool:
        return False

    @abstractmethod
    def apply(self, *columns: NDArray) -> NDArray:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class _Elementwise(Transform):
    """Single-field transform backed by a numpy ufunc."""

    def __init__(self, name: str, func):
        self._name = name
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    def apply(self, *columns: NDArray) -> NDArray:
        (x,) = columns
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            try:
                return self._func(x)
            except (ValueError, TypeError, ArithmeticError) as e:
                raise ValidationError(f"Transform {self._name!r} failed: {e}") from e

    def __repr__(self) -> str:
        return f"Transform({self._name!r})"


class Identity(Transform):
    """The field itself. Categorical fields expand to indicator columns."""

    @property
    def name(self) -> str:
        return 'identity'

    @property
    def accepts_categorical(self) -> bool:
        return True

    def apply(self, *columns: NDArray) -> NDArray:
        (x,) = columns
        return x


class Interaction(Transform):
    """Row-wise product of two or more fields (R's a:b)."""

    @property
    def name(self) -> str:
        return 'interaction'

    @property
    def arity(self) -> int | None:
        return None

    @property
    def accepts_categorical(self) -> bool:
        return True

    def apply(self, *columns: NDArray) -> NDArray:
        out = np.ones_like(columns[0], dtype=np.float64)
        for col in columns:
            out = out * col
        return out


TRANSFORMS: dict[str, Transform] = {
    t.name: t for t in (
        Identity(),
        Interaction(),
        _Elementwise('log', np.log),
        _Elementwise('log2', np.log2),
        _Elementwise('log10', np.log10),
        _Elementwise('log1p', np.log1p),
        _Elementwise('exp', np.exp),
        _Elementwise('sqrt', np.sqrt),
        _Elementwise('square', np.square),
        _Elementwise('cube', lambda x: x ** 3),
        _Elementwise('reciprocal', np.reciprocal),
    )
}


def get_transform(name: str) -> Transform:
    """
    Look up a transform by name.

    Raises:
        ValidationError: If the name is not registered
    """
    try:
        return TRANSFORMS[name]
    except KeyError:
        raise ValidationError(
            f"Unknown transform {name!r}. Available: {sorted(TRANSFORMS)}"
        ) from None


def register_transform(name: str, func) -> Transform:
    """
    Register a single-field elementwise transform.

    A ValueError, TypeError or ArithmeticError raised by `func` is re-raised
    as ValidationError, so select() records it against the candidate
    instead of aborting the run.

    Example:
        register_transform('cbrt', np.cbrt)
        FormulaSpec.parse('y ~ cbrt(x)')
    """
    if name in TRANSFORMS:
        raise ValueError(f"Transform {name!r} is already registered")
    transform = _Elementwise(name, func)
    TRANSFORMS[name] = transform
    return transform
