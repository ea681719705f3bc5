"""
Ranking and the one-standard-error rule.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.exceptions import InvalidParameterError, ValidationError
from pymodelselect.core.validation import (
    check_1d,
    check_array,
    check_consistent_length,
    check_finite,
)

DIRECTIONS = ('minimize', 'maximize')


def _vector(values: Any, name: str) -> NDArray[np.floating[Any]]:
    arr = check_array(values, name)
    check_1d(arr, name)
    check_finite(arr, name)
    return arr


def _check_direction(direction: str) -> None:
    if direction not in DIRECTIONS:
        raise InvalidParameterError(
            f"direction must be one of {list(DIRECTIONS)}, got {direction!r}",
            parameter='direction',
            value=direction,
        )


def rank_order(means: Sequence[float] | NDArray[Any], direction: str = 'minimize') -> NDArray[np.intp]:
    """
    Indices of `means` from best to worst.

    Equal means keep their input order.
    """
    _check_direction(direction)
    m = _vector(means, 'means')
    key = m if direction == 'minimize' else -m
    return np.argsort(key, kind='stable')


def within_one_se(
    means: Sequence[float] | NDArray[Any],
    ses: Sequence[float] | NDArray[Any],
    direction: str = 'minimize',
) -> NDArray[np.bool_]:
    """
    Mask of candidates not worse than the best by more than the best's SE.
    """
    m = _vector(means, 'means')
    s = _vector(ses, 'ses')
    if m.size == 0:
        raise ValidationError("No candidates to compare")
    check_consistent_length(m, s, names=('means', 'ses'))
    if np.any(s < 0):
        raise ValidationError(f"ses: must be non-negative, got {s.tolist()}")

    best = int(rank_order(m, direction)[0])
    best_se = s[best]
    if direction == 'minimize':
        return m <= m[best] + best_se
    return m >= m[best] - best_se


def one_se_rule(
    means: Sequence[float] | NDArray[Any],
    ses: Sequence[float] | NDArray[Any],
    complexities: Sequence[float] | NDArray[Any],
    direction: str = 'minimize',
) -> int:
    """
    Index of the simplest candidate within one SE of the best.

    The best candidate is the one with the lowest mean ('minimize') or the
    highest mean ('maximize'). Every candidate whose mean is no worse than
    the best's by more than the best's standard error is eligible; the one
    with the lowest complexity wins, ties going to the earliest index.

    Args:
        means: Mean score per candidate
        ses: Standard error of each mean
        complexities: Caller-supplied complexity per candidate
        direction: 'minimize' for error metrics, 'maximize' for densities

    Returns:
        Index into the input sequences

    Example:
        >>> one_se_rule([0.26, 0.187, 0.144, 0.136, 0.132],
        ...             [0.002, 0.002, 0.001, 0.001, 0.001],
        ...             [2, 9, 12, 15, 19])
        4
    """
    c = _vector(complexities, 'complexities')
    eligible = within_one_se(means, ses, direction)
    check_consistent_length(eligible, c, names=('means', 'complexities'))

    candidates = np.flatnonzero(eligible)
    # argmin returns the first minimum, so ties keep input order
    return int(candidates[np.argmin(c[candidates])])
