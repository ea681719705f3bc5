"""
Public API for resampling.
"""

from __future__ import annotations

import warnings

from pymodelselect.core.compute.random import SeedLike, as_generator
from pymodelselect.core.compute.timing import Timer
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.result import Result
from pymodelselect.resampling._common import make_fold
from pymodelselect.resampling._schemes import GENERATORS
from pymodelselect.resampling.design import PartitionDesign, Scheme
from pymodelselect.resampling.solution import Resamples


def partition(
    dataset: Dataset,
    scheme: Scheme = 'vfold',
    *,
    prop: float = 0.75,
    times: int = 25,
    v: int = 10,
    repeats: int = 1,
    seed: SeedLike = None,
) -> Resamples:
    """
    Split a dataset into train/test folds.

    Args:
        dataset: The table to split. Never modified.
        scheme:
            - 'holdout': one split, round(prop * n) rows for training
            - 'mc': Monte Carlo cross-validation, `times` independent splits
            - 'bootstrap': `times` draws of n rows with replacement;
              test rows are the ones never drawn
            - 'vfold': `v` groups of near-equal size, each the test set
              once; `repeats` repeats with fresh permutations
        prop: Training proportion for 'holdout' and 'mc'.
        times: Repetitions for 'mc' and 'bootstrap'.
        v: Number of folds for 'vfold'.
        repeats: Number of v-fold repetitions.
        seed: int, numpy Generator, or None. The same seed with the same
            scheme and dataset gives identical folds.

    Returns:
        Resamples (a sequence of Fold)

    Raises:
        InvalidParameterError: If v < 2, v > n, prop outside (0, 1), etc.

    Example:
        >>> folds = partition(ds, 'vfold', v=10, seed=858)
        >>> len(folds)
        10
        >>> folds[0].train, folds[0].test
    """
    design = PartitionDesign.for_partition(
        dataset, scheme, prop=prop, times=times, v=v, repeats=repeats, seed=seed,
    )

    timer = Timer()
    timer.start()
    rng = as_generator(design.seed)

    with timer.section('draw_indices'):
        splits = GENERATORS[design.scheme](design, rng)

    warnings_list: list[str] = []
    empty = [label for label, _, test in splits if test.size == 0]
    if empty:
        msg = (
            f"{len(empty)} resample(s) have an empty test set "
            f"({', '.join(empty[:3])}{'...' if len(empty) > 3 else ''}); "
            f"scoring them will fail"
        )
        warnings.warn(msg, RuntimeWarning, stacklevel=2)
        warnings_list.append(msg)

    folds = tuple(make_fold(label, train, test, dataset) for label, train, test in splits)
    timer.stop()

    result = Result(
        params=folds,
        info={
            'scheme': design.scheme,
            'n': dataset.n_observations,
            'n_folds': len(folds),
            **design.params,
        },
        timing=timer.result(),
        backend_name='cpu_resample',
        warnings=tuple(warnings_list),
    )
    return Resamples(_result=result, _design=design)
