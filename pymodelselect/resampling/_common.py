"""
Common data structures for resampling.

A Fold is one train/test split: two index arrays into the parent Dataset
plus lazily built Dataset views of each side.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.dataset import Dataset


@dataclass(frozen=True, eq=False)
class Fold:
    """
    One train/test split.

    Attributes:
        id: Label such as 'Fold03', 'Repeat2/Fold01', 'Bootstrap07'
        train_index: Row positions of the training set. May repeat rows
            for bootstrap folds.
        test_index: Row positions of the test set, sorted, no repeats.
    """
    id: str
    train_index: NDArray[np.intp]
    test_index: NDArray[np.intp]
    _dataset: Dataset

    @cached_property
    def train(self) -> Dataset:
        """Training rows as a Dataset (the analysis set)."""
        return self._dataset.take(self.train_index)

    @cached_property
    def test(self) -> Dataset:
        """Test rows as a Dataset (the assessment set)."""
        return self._dataset.take(self.test_index)

    @property
    def n_train(self) -> int:
        return int(self.train_index.size)

    @property
    def n_test(self) -> int:
        return int(self.test_index.size)

    def __repr__(self) -> str:
        return f"Fold({self.id!r}, train={self.n_train}, test={self.n_test})"


def make_fold(id: str, train: Any, test: Any, dataset: Dataset) -> Fold:
    train_index = np.asarray(train, dtype=np.intp)
    test_index = np.asarray(test, dtype=np.intp)
    train_index.setflags(write=False)
    test_index.setflags(write=False)
    return Fold(id=id, train_index=train_index, test_index=test_index, _dataset=dataset)
