"""
Design class for resampling.

PartitionDesign encapsulates everything a partitioning run needs: the
dataset, the scheme, its parameters and the seed. Immutable, validated at
construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np

from pymodelselect.core.compute.random import SeedLike
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import InvalidParameterError, ValidationError
from pymodelselect.core.validation import check_positive_int, check_proportion

Scheme = Literal['holdout', 'mc', 'bootstrap', 'vfold']

SCHEMES: tuple[str, ...] = ('holdout', 'mc', 'bootstrap', 'vfold')


@dataclass(frozen=True)
class PartitionDesign:
    """
    Frozen design for one partitioning run.

    Attributes:
        dataset: The table being split.
        scheme: 'holdout', 'mc' (Monte Carlo), 'bootstrap' or 'vfold'.
        prop: Training proportion for 'holdout' and 'mc'.
        n_train: round(prop * n) for 'holdout' and 'mc', else None.
        times: Number of repetitions for 'mc' and 'bootstrap'.
        v: Number of groups for 'vfold'.
        repeats: Number of independent v-fold repetitions.
        seed: Seed or Generator for the draws.
    """
    dataset: Dataset
    scheme: Scheme
    prop: float | None
    n_train: int | None
    times: int
    v: int | None
    repeats: int
    seed: SeedLike

    @classmethod
    def for_partition(
        cls,
        dataset: Dataset,
        scheme: Scheme,
        *,
        prop: float = 0.75,
        times: int = 25,
        v: int = 10,
        repeats: int = 1,
        seed: SeedLike = None,
    ) -> PartitionDesign:
        """
        Create a partition design with validation.

        Raises:
            InvalidParameterError: If the scheme is unknown or a parameter
                is out of range for this dataset
            ValidationError: If `dataset` is not a Dataset
        """
        if not isinstance(dataset, Dataset):
            raise ValidationError(
                f"dataset must be a Dataset, got {type(dataset).__name__}"
            )
        if scheme not in SCHEMES:
            raise InvalidParameterError(
                f"scheme must be one of {list(SCHEMES)}, got {scheme!r}",
                parameter='scheme',
                value=scheme,
            )

        n = dataset.n_observations
        if n < 2:
            raise InvalidParameterError(
                f"dataset must have at least 2 rows to partition, got {n}",
                parameter='dataset',
                value=n,
            )

        prop_value: float | None = None
        n_train: int | None = None
        v_value: int | None = None
        times_value = 1
        repeats_value = 1

        if scheme in ('holdout', 'mc'):
            prop_value = check_proportion(prop, 'prop')
            n_train = int(np.floor(prop_value * n + 0.5))
            if n_train < 1 or n_train > n - 1:
                raise InvalidParameterError(
                    f"prop={prop_value} gives {n_train} training rows out of {n}; "
                    f"need between 1 and {n - 1}",
                    parameter='prop',
                    value=prop_value,
                )
            if scheme == 'mc':
                times_value = check_positive_int(times, 'times')
        elif scheme == 'bootstrap':
            times_value = check_positive_int(times, 'times')
        else:
            v_value = check_positive_int(v, 'v', minimum=2)
            if v_value > n:
                raise InvalidParameterError(
                    f"v must be <= number of rows ({n}), got {v_value}",
                    parameter='v',
                    value=v_value,
                )
            repeats_value = check_positive_int(repeats, 'repeats')

        return cls(
            dataset=dataset,
            scheme=scheme,
            prop=prop_value,
            n_train=n_train,
            times=times_value,
            v=v_value,
            repeats=repeats_value,
            seed=seed,
        )

    @property
    def params(self) -> dict[str, float | int]:
        """The parameters that apply to this scheme."""
        if self.scheme == 'holdout':
            return {'prop': self.prop}
        if self.scheme == 'mc':
            return {'prop': self.prop, 'times': self.times}
        if self.scheme == 'bootstrap':
            return {'times': self.times}
        return {'v': self.v, 'repeats': self.repeats}
