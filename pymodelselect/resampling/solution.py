"""
Solution wrapper for resampling runs.

Resamples is a read-only sequence of Fold objects plus the scheme and
parameters that produced them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Iterator, overload

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.result import Result
from pymodelselect.resampling._common import Fold
from pymodelselect.resampling.design import PartitionDesign


@dataclass
class Resamples(Sequence):
    """
    User-facing partition results.

    Behaves like a tuple of Fold; `select()` accepts it directly.
    """
    _result: Result[tuple[Fold, ...]]
    _design: PartitionDesign

    @property
    def folds(self) -> tuple[Fold, ...]:
        return self._result.params

    @property
    def scheme(self) -> str:
        return self._design.scheme

    @property
    def params(self) -> dict[str, Any]:
        return self._design.params

    @property
    def seed(self) -> Any:
        return self._design.seed

    @property
    def n_observations(self) -> int:
        return self._design.dataset.n_observations

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Sequence protocol ---

    def __len__(self) -> int:
        return len(self.folds)

    @overload
    def __getitem__(self, index: int) -> Fold: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Fold, ...]: ...

    def __getitem__(self, index):
        return self.folds[index]

    def __iter__(self) -> Iterator[Fold]:
        return iter(self.folds)

    # --- Diagnostics ---

    def test_counts(self) -> NDArray[np.intp]:
        """
        How many test sets each row of the dataset falls in.

        For v-fold with one repeat every entry is 1.
        """
        counts = np.zeros(self.n_observations, dtype=np.intp)
        for fold in self.folds:
            np.add.at(counts, fold.test_index, 1)
        return counts

    def summary(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.params.items())
        lines = [
            f"Resamples: {self.scheme} ({params})",
            "=" * 40,
            f"{'id':<18} {'train':>8} {'test':>8}",
            "-" * 40,
        ]
        for fold in self.folds:
            lines.append(f"{fold.id:<18} {fold.n_train:>8} {fold.n_test:>8}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Resamples(scheme={self.scheme!r}, n_folds={len(self)}, "
            f"n={self.n_observations})"
        )
