"""
Index generation for each resampling scheme.

Each function takes a validated PartitionDesign and a Generator and returns
(id, train_index, test_index) triples. Nothing here touches the data
itself, only row positions.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pymodelselect.resampling.design import PartitionDesign

Split = tuple[str, NDArray[np.intp], NDArray[np.intp]]


def monte_carlo(design: PartitionDesign, rng: np.random.Generator) -> list[Split]:
    """
    Draw `n_train` rows without replacement, test on the rest, `times` times.
    """
    n = design.dataset.n_observations
    n_train = design.n_train
    width = len(str(design.times))
    prefix = 'Holdout' if design.scheme == 'holdout' else 'Resample'

    splits = []
    for r in range(design.times):
        perm = rng.permutation(n)
        train = np.sort(perm[:n_train])
        test = np.sort(perm[n_train:])
        label = prefix if design.scheme == 'holdout' else f"{prefix}{r + 1:0{width}d}"
        splits.append((label, train, test))
    return splits


def bootstrap(design: PartitionDesign, rng: np.random.Generator) -> list[Split]:
    """
    Draw n rows with replacement for training; test on rows never drawn.

    Training indices keep draw order (duplicates included). About 36.8% of
    rows are expected out of bag.
    """
    n = design.dataset.n_observations
    width = len(str(design.times))

    splits = []
    for r in range(design.times):
        train = rng.integers(0, n, size=n)
        in_bag = np.zeros(n, dtype=bool)
        in_bag[train] = True
        test = np.flatnonzero(~in_bag)
        splits.append((f"Bootstrap{r + 1:0{width}d}", train, test))
    return splits


def vfold(design: PartitionDesign, rng: np.random.Generator) -> list[Split]:
    """
    Permute once per repeat and cut into v contiguous groups.

    np.array_split gives group sizes that differ by at most one; group i
    is the test set of fold i.
    """
    n = design.dataset.n_observations
    v = design.v
    width = max(2, len(str(v)))

    splits = []
    for r in range(design.repeats):
        perm = rng.permutation(n)
        groups = np.array_split(perm, v)
        for i, group in enumerate(groups):
            test = np.sort(group)
            train = np.sort(np.concatenate([g for j, g in enumerate(groups) if j != i]))
            label = f"Fold{i + 1:0{width}d}"
            if design.repeats > 1:
                label = f"Repeat{r + 1}/{label}"
            splits.append((label, train, test))
    return splits


GENERATORS = {
    'holdout': monte_carlo,
    'mc': monte_carlo,
    'bootstrap': bootstrap,
    'vfold': vfold,
}
