"""
Candidate and per-candidate result types.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pymodelselect.core.exceptions import InvalidParameterError
from pymodelselect.formula.spec import FormulaSpec
from pymodelselect.scoring._common import Score


@dataclass(frozen=True)
class Candidate:
    """
    A functional form to evaluate.

    Attributes:
        formula: FormulaSpec (a formula string is parsed)
        complexity: Caller-supplied scalar used by the one-SE rule, lower
            meaning simpler (e.g. number of coefficients)
        name: Label for reports; defaults to the formula label
    """
    formula: FormulaSpec
    complexity: float
    name: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.formula, str):
            object.__setattr__(self, 'formula', FormulaSpec.parse(self.formula))
        elif not isinstance(self.formula, FormulaSpec):
            raise InvalidParameterError(
                f"formula must be a FormulaSpec or string, got {type(self.formula).__name__}",
                parameter='formula',
                value=self.formula,
            )
        if (
            isinstance(self.complexity, bool)
            or not isinstance(self.complexity, (int, float))
            or not math.isfinite(self.complexity)
        ):
            raise InvalidParameterError(
                f"complexity must be a finite number, got {self.complexity!r}",
                parameter='complexity',
                value=self.complexity,
            )
        if self.name is None:
            object.__setattr__(self, 'name', self.formula.label)

    @classmethod
    def coerce(cls, value: Any) -> Candidate:
        """Accept a Candidate or a (formula, complexity[, name]) tuple."""
        if isinstance(value, Candidate):
            return value
        if isinstance(value, tuple) and len(value) in (2, 3):
            return cls(*value)
        raise InvalidParameterError(
            f"Expected Candidate or (formula, complexity) tuple, got {value!r}",
            parameter='candidates',
            value=value,
        )


@dataclass(frozen=True)
class CandidateResult:
    """
    Aggregated evaluation of one candidate.

    For a failed candidate mean, standard_error and rank are None and
    error / error_kind describe the first failure.
    """
    candidate: Candidate
    index: int
    scores: tuple[Score, ...]
    mean: float | None
    standard_error: float | None
    rank: int | None = None
    failed: bool = False
    error: str | None = None
    error_kind: str | None = None
    within_one_se: bool = False

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def complexity(self) -> float:
        return self.candidate.complexity

    @property
    def n_folds(self) -> int:
        return len(self.scores)

    def __repr__(self) -> str:
        if self.failed:
            return f"CandidateResult({self.name!r}, failed={self.error_kind})"
        return (
            f"CandidateResult({self.name!r}, rank={self.rank}, "
            f"mean={self.mean:.6g}, se={self.standard_error:.4g})"
        )
