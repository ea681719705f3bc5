"""
Shared result types for scoring.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Score:
    """
    A metric evaluated on one dataset.

    Attributes:
        metric: Metric name ('rmse', 'mae', 'rsq', 'elpd', 'elpd_loo')
        value: Metric value
        n_observations: Rows the metric was evaluated on
        standard_error: Pointwise standard error for density metrics
        pareto_k: Per-observation Pareto k for 'elpd_loo'
        warnings: Diagnostics raised while scoring
    """
    metric: str
    value: float
    n_observations: int
    standard_error: float | None = None
    pareto_k: tuple[float, ...] | None = None
    warnings: tuple[str, ...] = ()

    def __float__(self) -> float:
        return self.value

    def __repr__(self) -> str:
        se = f" ± {self.standard_error:.4g}" if self.standard_error is not None else ""
        return f"Score({self.metric}={self.value:.6g}{se}, n={self.n_observations})"


@dataclass(frozen=True)
class LooParams:
    """
    Pointwise PSIS-LOO estimates.

    Attributes:
        elpd_i: Leave-one-out log predictive density per observation
        lpd_i: In-sample log predictive density per observation
        pareto_k: Pareto shape estimate per observation
    """
    elpd_i: NDArray[np.floating[Any]]
    lpd_i: NDArray[np.floating[Any]]
    pareto_k: NDArray[np.floating[Any]]
