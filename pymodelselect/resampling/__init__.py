"""
Resampling schemes for model assessment.

Provides single holdout, Monte Carlo, bootstrap and v-fold partitions
(the schemes of R's rsample package) with explicit, reproducible seeds.

Usage:
    from pymodelselect.resampling import partition

    folds = partition(ds, 'vfold', v=10, seed=858)
    folds = partition(ds, 'mc', prop=0.8, times=25, seed=858)
    folds = partition(ds, 'bootstrap', times=25, seed=858)
"""

from pymodelselect.resampling._common import Fold
from pymodelselect.resampling.design import PartitionDesign
from pymodelselect.resampling.solution import Resamples
from pymodelselect.resampling.solvers import partition

__all__ = [
    "partition",
    "Fold",
    "Resamples",
    "PartitionDesign",
]
