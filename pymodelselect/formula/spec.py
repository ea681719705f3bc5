"""
Formula specifications.

A FormulaSpec is a tagged value describing a candidate functional form:
a response Term, a tuple of predictor Terms, and whether to include an
intercept. It carries no data and no fitted values; the same FormulaSpec
is refit on every training fold.

Construction:
    FormulaSpec(response='y', terms=['x'])
    FormulaSpec(response=Term('log', 'price'), terms=[Term('log', 'carat'), 'clarity'])
    FormulaSpec.parse('log(price) ~ log(carat) + clarity')
    FormulaSpec.parse('y ~ x + x:g - 1')
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Union

from pymodelselect.core.dataset import CATEGORICAL, Dataset
from pymodelselect.core.exceptions import UnknownFieldError, ValidationError
from pymodelselect.formula.transforms import get_transform

_CALL = re.compile(r'^\s*([A-Za-z_][A-Za-z0-9_.]*)\s*\((.*)\)\s*$')
_NAME = re.compile(r'^[A-Za-z_.][A-Za-z0-9_.]*$')
_SIGNED = re.compile(r"([+-])")


@dataclass(frozen=True, init=False)
class Term:
    """
    One predictor (or the response): a named transform applied to fields.

    Term('carat')                  -> carat
    Term('log', 'carat')           -> log(carat)
    Term('interaction', ('a', 'b')) -> a:b
    """
    transform: str
    fields: tuple[str, ...] = field(default=())

    def __init__(self, transform: str, fields: str | Iterable[str] | None = None):
        if fields is None:
            transform, fields = 'identity', (transform,)
        elif isinstance(fields, str):
            fields = (fields,)
        fields = tuple(fields)

        t = get_transform(transform)
        if not fields:
            raise ValidationError(f"Term {transform!r}: needs at least one field")
        if t.arity is None and len(fields) < 2:
            raise ValidationError(
                f"Term {transform!r}: needs at least two fields, got {len(fields)}"
            )
        if t.arity is not None and len(fields) != t.arity:
            raise ValidationError(
                f"Term {transform!r}: takes {t.arity} field(s), got {len(fields)}"
            )
        for name in fields:
            if not isinstance(name, str) or not name:
                raise ValidationError(f"Term {transform!r}: invalid field name {name!r}")

        object.__setattr__(self, 'transform', transform)
        object.__setattr__(self, 'fields', fields)

    @property
    def label(self) -> str:
        if self.transform == 'identity':
            return self.fields[0]
        if self.transform == 'interaction':
            return ':'.join(self.fields)
        return f"{self.transform}({', '.join(self.fields)})"

    @classmethod
    def parse(cls, text: str) -> Term:
        """Parse 'x', 'log(x)' or 'a:b'."""
        text = text.strip()
        match = _CALL.match(text)
        if match:
            name, args = match.groups()
            fields = tuple(a.strip() for a in args.split(','))
            _check_names(fields, text)
            return cls(name, fields)
        if ':' in text:
            fields = tuple(a.strip() for a in text.split(':'))
            _check_names(fields, text)
            return cls('interaction', fields)
        _check_names((text,), text)
        return cls('identity', (text,))

    def __str__(self) -> str:
        return self.label


TermLike = Union[Term, str]


def _check_names(names: tuple[str, ...], text: str) -> None:
    for name in names:
        if not _NAME.match(name):
            raise ValidationError(f"Cannot parse term {text!r}: bad field name {name!r}")


def as_term(term: TermLike) -> Term:
    if isinstance(term, Term):
        return term
    if isinstance(term, str):
        return Term.parse(term)
    raise ValidationError(f"Expected a Term or str, got {type(term).__name__}")


@dataclass(frozen=True, init=False)
class FormulaSpec:
    """
    Symbolic description of a candidate functional form.

    Attributes:
        response: Response term (must be numeric; may be transformed)
        terms: Predictor terms, in model-matrix column order
        intercept: Whether to prepend an intercept column
    """
    response: Term
    terms: tuple[Term, ...] = ()
    intercept: bool = True

    def __init__(
        self,
        response: TermLike,
        terms: Iterable[TermLike] = (),
        intercept: bool = True,
    ):
        response = as_term(response)
        if response.transform == 'interaction':
            raise ValidationError("Response cannot be an interaction term")
        terms = tuple(as_term(t) for t in terms)
        labels = [t.label for t in terms]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate predictor terms: {duplicates}")
        if not terms and not intercept:
            raise ValidationError("Formula needs at least one predictor or an intercept")

        object.__setattr__(self, 'response', response)
        object.__setattr__(self, 'terms', terms)
        object.__setattr__(self, 'intercept', bool(intercept))

    @classmethod
    def parse(cls, text: str) -> FormulaSpec:
        """
        Parse an R-style formula string.

        Supports `+`-separated terms, transforms `f(x)`, interactions `a:b`,
        `1` (intercept only) and `- 1` / `0` (no intercept).
        """
        if text.count('~') != 1:
            raise ValidationError(f"Formula must contain exactly one '~': {text!r}")
        lhs, rhs = (part.strip() for part in text.split('~'))
        if not lhs:
            raise ValidationError(f"Formula has no response: {text!r}")

        intercept = True
        terms = []
        pieces = _SIGNED.split(rhs)
        signs = ['+'] + pieces[1::2]
        for sign, token in zip(signs, pieces[0::2]):
            token = token.strip()
            if not token:
                continue
            if sign == '-':
                if token != '1':
                    raise ValidationError(
                        f"Only '- 1' may be subtracted in a formula, got '- {token}'"
                    )
                intercept = False
            elif token == '0':
                intercept = False
            elif token != '1':
                terms.append(Term.parse(token))
        return cls(response=Term.parse(lhs), terms=terms, intercept=intercept)

    @property
    def fields(self) -> frozenset[str]:
        """Every field referenced by the response or a predictor."""
        names = set(self.response.fields)
        for term in self.terms:
            names.update(term.fields)
        return frozenset(names)

    @property
    def predictor_fields(self) -> frozenset[str]:
        names: set[str] = set()
        for term in self.terms:
            names.update(term.fields)
        return frozenset(names)

    @property
    def label(self) -> str:
        rhs = ' + '.join(t.label for t in self.terms) or '1'
        if not self.intercept:
            rhs += ' - 1'
        return f"{self.response.label} ~ {rhs}"

    def validate(self, dataset: Dataset, *, require_response: bool = True) -> None:
        """
        Check every referenced field exists with a usable kind.

        Raises:
            UnknownFieldError: If a field is missing from the dataset
            ValidationError: If a categorical field is used where a numeric
                one is required
        """
        names = self.fields if require_response else self.predictor_fields
        missing = sorted(name for name in names if name not in dataset)
        if missing:
            raise UnknownFieldError(
                f"Formula '{self.label}' references fields {missing} "
                f"not in dataset. Available: {list(dataset.keys())}",
                field=missing[0],
                available=dataset.keys(),
            )

        if require_response and dataset.kind(self.response.fields[0]) == CATEGORICAL:
            raise ValidationError(
                f"Response '{self.response.label}' must be numeric"
            )

        for term in self.terms:
            transform = get_transform(term.transform)
            if transform.accepts_categorical:
                continue
            for name in term.fields:
                if dataset.kind(name) == CATEGORICAL:
                    raise ValidationError(
                        f"Term '{term.label}': transform {term.transform!r} "
                        f"needs a numeric field, '{name}' is categorical"
                    )

    def __str__(self) -> str:
        return self.label
