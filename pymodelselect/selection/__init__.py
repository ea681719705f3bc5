"""
Model selection.

Public API:
    select(candidates, folds, metric, ...) -> SelectionSolution
    select_loo(candidates, data, ...) -> SelectionSolution
    one_se_rule(means, ses, complexities, direction) -> index

Example:
    >>> from pymodelselect import partition, select
    >>> folds = partition(ds, 'vfold', v=10, repeats=2, seed=858)
    >>> sel = select(
    ...     [('log(price) ~ log(carat)', 2),
    ...      ('log(price) ~ log(carat) + clarity', 9)],
    ...     folds, 'rmse', seed=858,
    ... )
    >>> print(sel.summary())
"""

from pymodelselect.selection._common import Candidate, CandidateResult
from pymodelselect.selection.rules import one_se_rule, rank_order, within_one_se
from pymodelselect.selection.solution import SelectionSolution
from pymodelselect.selection.solvers import select, select_loo

__all__ = [
    "select",
    "select_loo",
    "one_se_rule",
    "within_one_se",
    "rank_order",
    "Candidate",
    "CandidateResult",
    "SelectionSolution",
]
