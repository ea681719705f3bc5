"""
Seed handling.

Nothing in PyModelSelect touches numpy's global random state. Every
stochastic operation takes an explicit seed (int, Generator or None) and
builds its own Generator. Work units that may run in parallel derive their
seeds from a base seed plus their coordinates, so the order in which units
execute never changes their draws.
"""

from typing import Union

import numpy as np

from pymodelselect.core.exceptions import InvalidParameterError

SeedLike = Union[int, np.integer, np.random.Generator, np.random.SeedSequence, None]


def as_generator(seed: SeedLike) -> np.random.Generator:
    """
    Build a Generator from a seed-like value.

    A Generator is returned as-is so callers can thread one source of
    randomness through several calls.
    """
    if isinstance(seed, np.random.Generator):
        return seed
    if seed is None or isinstance(seed, np.random.SeedSequence):
        return np.random.default_rng(seed)
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise InvalidParameterError(
            f"seed must be an int, numpy Generator, SeedSequence or None, "
            f"got {type(seed).__name__}",
            parameter='seed',
            value=seed,
        )
    if seed < 0:
        raise InvalidParameterError(
            f"seed must be non-negative, got {seed}",
            parameter='seed',
            value=seed,
        )
    return np.random.default_rng(int(seed))


def resolve_base_seed(seed: int | None) -> int:
    """
    Return `seed`, or fresh OS entropy when it is None.

    The returned value is recorded by callers so an unseeded run can be
    replayed.
    """
    if seed is None:
        return int(np.random.SeedSequence().entropy)
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise InvalidParameterError(
            f"base seed must be a non-negative int or None, got {seed!r}",
            parameter='seed',
            value=seed,
        )
    return int(seed)


def derive_seed(base_seed: int, *coordinates: int) -> int:
    """
    Deterministic per-unit seed from (base seed, coordinates...).

    Example:
        derive_seed(858, candidate_index, fold_index)
    """
    sequence = np.random.SeedSequence([int(base_seed), *(int(c) for c in coordinates)])
    return int(sequence.generate_state(1, dtype=np.uint64)[0])
