"""
Metric registry.

Point metrics compare observed and predicted (transformed) responses.
Density metrics read the model's pointwise log-likelihood and therefore
need a model that supports CAPABILITY_LOG_LIKELIHOOD.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from pymodelselect.core.capabilities import CAPABILITY_LOG_LIKELIHOOD, CAPABILITY_PREDICT
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import MetricUndefinedError
from pymodelselect.scoring._common import Score

Direction = Literal['minimize', 'maximize']


def rmse(actual: NDArray[np.floating[Any]], predicted: NDArray[np.floating[Any]]) -> float:
    """Root mean squared error."""
    return float(np.sqrt(np.mean((actual - predicted) ** 2)))


def mae(actual: NDArray[np.floating[Any]], predicted: NDArray[np.floating[Any]]) -> float:
    """Mean absolute error."""
    return float(np.mean(np.abs(actual - predicted)))


def rsq(actual: NDArray[np.floating[Any]], predicted: NDArray[np.floating[Any]]) -> float:
    """
    Squared Pearson correlation of actual and predicted.

    nan when either vector is constant; a warning is issued in that case.
    """
    if actual.shape[0] < 2 or np.ptp(actual) == 0 or np.ptp(predicted) == 0:
        warnings.warn(
            "rsq is undefined for a constant actual or predicted vector",
            RuntimeWarning,
            stacklevel=3,
        )
        return float('nan')
    r = np.corrcoef(actual, predicted)[0, 1]
    return float(r * r)


def pointwise_lpd(log_lik: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """log(mean_s p(y_i | theta_s)) per observation from a (draws, n) matrix."""
    return logsumexp(log_lik, axis=0) - np.log(log_lik.shape[0])


@dataclass(frozen=True)
class Metric:
    """A named metric with an optimisation direction."""
    name: str
    direction: Direction
    requires: str

    def better(self, a: float, b: float) -> bool:
        """True when a is strictly better than b."""
        return a < b if self.direction == 'minimize' else a > b

    def evaluate(self, model: Any, data: Dataset) -> Score:
        raise NotImplementedError


@dataclass(frozen=True)
class PointMetric(Metric):
    """Metric computed from observed and predicted responses."""
    requires: str = CAPABILITY_PREDICT

    def compute(self, actual: NDArray, predicted: NDArray) -> float:
        return _POINT_FUNCTIONS[self.name](actual, predicted)

    def evaluate(self, model: Any, data: Dataset) -> Score:
        actual = model.observed_response(data)
        predicted = model.predict(data)
        return Score(
            metric=self.name,
            value=self.compute(actual, predicted),
            n_observations=int(actual.shape[0]),
        )


@dataclass(frozen=True)
class HeldOutElpd(Metric):
    """Sum of log pointwise predictive densities on held-out data."""
    name: str = 'elpd'
    direction: Direction = 'maximize'
    requires: str = CAPABILITY_LOG_LIKELIHOOD

    def evaluate(self, model: Any, data: Dataset) -> Score:
        lpd = pointwise_lpd(np.asarray(model.log_likelihood(data), dtype=np.float64))
        n = lpd.shape[0]
        se = float(np.sqrt(n * np.var(lpd, ddof=1))) if n > 1 else None
        return Score(metric=self.name, value=float(np.sum(lpd)), n_observations=n, standard_error=se)


@dataclass(frozen=True)
class LooElpd(Metric):
    """PSIS-LOO ELPD on the data the model was fit on."""
    name: str = 'elpd_loo'
    direction: Direction = 'maximize'
    requires: str = CAPABILITY_LOG_LIKELIHOOD

    def evaluate(self, model: Any, data: Dataset) -> Score:
        from pymodelselect.scoring.loo import loo

        # loo() already issues the ParetoKWarnings
        solution = loo(model, data)
        return Score(
            metric=self.name,
            value=solution.elpd_loo,
            n_observations=solution.n_observations,
            standard_error=solution.se,
            pareto_k=tuple(float(k) for k in solution.pareto_k),
            warnings=solution.warnings,
        )


_POINT_FUNCTIONS = {
    'rmse': rmse,
    'mae': mae,
    'rsq': rsq,
}

METRICS: dict[str, Metric] = {
    'rmse': PointMetric('rmse', 'minimize'),
    'mae': PointMetric('mae', 'minimize'),
    'rsq': PointMetric('rsq', 'maximize'),
    'elpd': HeldOutElpd(),
    'elpd_loo': LooElpd(),
}


def get_metric(name: str) -> Metric:
    """
    Look up a metric by name.

    Raises:
        MetricUndefinedError: If the name is not registered
    """
    try:
        return METRICS[name]
    except (KeyError, TypeError):
        raise MetricUndefinedError(
            f"Unknown metric {name!r}. Available: {sorted(METRICS)}",
            metric=str(name),
        ) from None
