"""
Model scoring.

Public API:
    score(model, data, metric) -> Score
    loo(model, data) -> LooSolution
    loo_compare({name: LooSolution}) -> LooComparison

Metrics:
    rmse, mae   -- minimize
    rsq         -- maximize
    elpd        -- held-out log predictive density (needs log-likelihood)
    elpd_loo    -- PSIS-LOO on the training data (needs log-likelihood)
"""

from pymodelselect.scoring._common import Score
from pymodelselect.scoring._psis import PARETO_K_BAD, PARETO_K_OK, psis_smooth
from pymodelselect.scoring.loo import LooComparison, LooSolution, loo, loo_compare
from pymodelselect.scoring.metrics import METRICS, Metric, get_metric
from pymodelselect.scoring.solvers import score

__all__ = [
    "score",
    "Score",
    "loo",
    "loo_compare",
    "LooSolution",
    "LooComparison",
    "Metric",
    "METRICS",
    "get_metric",
    "psis_smooth",
    "PARETO_K_OK",
    "PARETO_K_BAD",
]
