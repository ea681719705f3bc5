"""
Approximate leave-one-out cross-validation.

loo() estimates the expected log pointwise predictive density of a
Bayesian model from a single fit with Pareto-smoothed importance
sampling; loo_compare() ranks several such estimates.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from pymodelselect.core.capabilities import CAPABILITY_LOG_LIKELIHOOD
from pymodelselect.core.compute.timing import Timer
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import (
    DimensionError,
    MetricUndefinedError,
    ParetoKWarning,
    ValidationError,
)
from pymodelselect.core.result import Result
from pymodelselect.scoring._common import LooParams
from pymodelselect.scoring._psis import PARETO_K_BAD, PARETO_K_OK, psis_smooth


def _pointwise_se(values: NDArray[np.floating[Any]]) -> float:
    n = values.shape[0]
    if n < 2:
        return float('nan')
    return float(np.sqrt(n * np.var(values, ddof=1)))


def pareto_k_messages(pareto_k: NDArray[np.floating[Any]]) -> tuple[str, ...]:
    """Diagnostic messages for Pareto k values above the thresholds."""
    messages = []
    n_bad = int(np.sum(pareto_k > PARETO_K_BAD))
    n_ok = int(np.sum((pareto_k > PARETO_K_OK) & (pareto_k <= PARETO_K_BAD)))
    if n_ok:
        messages.append(
            f"{n_ok} observation(s) with {PARETO_K_OK} < Pareto k <= {PARETO_K_BAD}; "
            f"PSIS-LOO estimates for them may be noisy"
        )
    if n_bad:
        messages.append(
            f"{n_bad} observation(s) with Pareto k > {PARETO_K_BAD}; "
            f"PSIS-LOO estimates are unreliable, consider k-fold cross-validation"
        )
    return tuple(messages)


@dataclass
class LooSolution:
    """
    PSIS-LOO estimate for one model.

    Attributes exposed as properties: elpd_loo, se, p_loo, looic,
    pointwise, pareto_k.
    """
    _result: Result[LooParams]

    @property
    def elpd_loo(self) -> float:
        return float(np.sum(self._result.params.elpd_i))

    @property
    def se(self) -> float:
        return _pointwise_se(self._result.params.elpd_i)

    @property
    def p_loo(self) -> float:
        """Effective number of parameters."""
        p = self._result.params
        return float(np.sum(p.lpd_i - p.elpd_i))

    @property
    def p_loo_se(self) -> float:
        p = self._result.params
        return _pointwise_se(p.lpd_i - p.elpd_i)

    @property
    def looic(self) -> float:
        return -2.0 * self.elpd_loo

    @property
    def looic_se(self) -> float:
        return 2.0 * self.se

    @property
    def pointwise(self) -> NDArray[np.floating[Any]]:
        return self._result.params.elpd_i

    @property
    def pareto_k(self) -> NDArray[np.floating[Any]]:
        return self._result.params.pareto_k

    @property
    def n_observations(self) -> int:
        return int(self._result.params.elpd_i.shape[0])

    @property
    def n_draws(self) -> int:
        return int(self._result.info['n_draws'])

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    def pareto_k_table(self) -> dict[str, int]:
        """Counts of observations per Pareto k band."""
        k = self.pareto_k
        return {
            f'(-Inf, {PARETO_K_OK}]': int(np.sum(k <= PARETO_K_OK)),
            f'({PARETO_K_OK}, {PARETO_K_BAD}]': int(np.sum((k > PARETO_K_OK) & (k <= PARETO_K_BAD))),
            f'({PARETO_K_BAD}, 1]': int(np.sum((k > PARETO_K_BAD) & (k <= 1.0))),
            '(1, Inf)': int(np.sum(k > 1.0)),
        }

    def summary(self) -> str:
        lines = [
            f"Computed from {self.n_draws} by {self.n_observations} log-likelihood matrix",
            "",
            f"{'':10s} {'Estimate':>10s} {'SE':>8s}",
            f"{'elpd_loo':10s} {self.elpd_loo:10.1f} {self.se:8.1f}",
            f"{'p_loo':10s} {self.p_loo:10.1f} {self.p_loo_se:8.1f}",
            f"{'looic':10s} {self.looic:10.1f} {self.looic_se:8.1f}",
            "",
            "Pareto k diagnostic values:",
        ]
        for band, count in self.pareto_k_table().items():
            lines.append(f"  {band:12s} {count:6d}")
        for message in self.warnings:
            lines.append(f"Warning: {message}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"LooSolution(elpd_loo={self.elpd_loo:.2f}, se={self.se:.2f}, n={self.n_observations})"


def loo(model: Any, data: Any) -> LooSolution:
    """
    PSIS-LOO for a model exposing pointwise log-likelihood.

    Args:
        model: A DistributionalModel, normally the fit on `data`
        data: The dataset the model was fit on

    Returns:
        LooSolution

    Raises:
        MetricUndefinedError: If the model has no log-likelihood
        ValidationError: If `data` is empty

    Warns:
        ParetoKWarning: When any Pareto k exceeds PARETO_K_OK
    """
    if not model.supports(CAPABILITY_LOG_LIKELIHOOD):
        raise MetricUndefinedError(
            f"PSIS-LOO needs pointwise log-likelihood, which "
            f"{type(model).__name__} does not provide; fit with engine='bayes'",
            metric='elpd_loo',
            model_type=type(model).__name__,
        )
    dataset = Dataset.coerce(data)
    if len(dataset) == 0:
        raise ValidationError("Cannot compute PSIS-LOO on an empty dataset")

    timer = Timer()
    timer.start()

    with timer.section('log_likelihood'):
        log_lik = np.asarray(model.log_likelihood(dataset), dtype=np.float64)

    with timer.section('psis'):
        log_weights, pareto_k = psis_smooth(-log_lik)

    n_draws = log_lik.shape[0]
    elpd_i = logsumexp(log_weights + log_lik, axis=0)
    lpd_i = logsumexp(log_lik, axis=0) - np.log(n_draws)

    timer.stop()

    messages = pareto_k_messages(pareto_k)
    for message in messages:
        warnings.warn(message, ParetoKWarning, stacklevel=2)

    result = Result(
        params=LooParams(elpd_i=elpd_i, lpd_i=lpd_i, pareto_k=pareto_k),
        info={'method': 'psis', 'n_draws': n_draws},
        timing=timer.result(),
        backend_name='cpu_psis',
        warnings=messages,
    )
    return LooSolution(_result=result)


@dataclass(frozen=True)
class LooComparison:
    """
    Models ordered by ELPD, best first.

    elpd_diff is each model's ELPD minus the best one's (so <= 0), and
    se_diff is the standard error of that paired pointwise difference.
    """
    names: tuple[str, ...]
    elpd_loo: tuple[float, ...]
    se: tuple[float, ...]
    elpd_diff: tuple[float, ...]
    se_diff: tuple[float, ...]

    @property
    def best(self) -> str:
        return self.names[0]

    def rows(self) -> list[dict[str, Any]]:
        return [
            {
                'model': name, 'elpd_diff': diff, 'se_diff': se_diff,
                'elpd_loo': elpd, 'se_elpd_loo': se,
            }
            for name, elpd, se, diff, se_diff in zip(
                self.names, self.elpd_loo, self.se, self.elpd_diff, self.se_diff,
            )
        ]

    def summary(self) -> str:
        width = max(len(n) for n in self.names)
        lines = [f"{'':{width}s} {'elpd_diff':>10s} {'se_diff':>8s}"]
        for row in self.rows():
            lines.append(f"{row['model']:{width}s} {row['elpd_diff']:10.1f} {row['se_diff']:8.1f}")
        return "\n".join(lines)


def loo_compare(loos: Mapping[str, LooSolution]) -> LooComparison:
    """
    Compare PSIS-LOO estimates of models fit to the same observations.

    Raises:
        ValidationError: If fewer than two models are given
        DimensionError: If the models were evaluated on different numbers
            of observations
    """
    if len(loos) < 2:
        raise ValidationError(f"loo_compare needs at least 2 models, got {len(loos)}")

    sizes = {name: sol.n_observations for name, sol in loos.items()}
    if len(set(sizes.values())) != 1:
        raise DimensionError(
            f"All models must be evaluated on the same observations, got sizes {sizes}"
        )

    ordered = sorted(loos.items(), key=lambda item: -item[1].elpd_loo)
    best_pointwise = ordered[0][1].pointwise

    names, elpds, ses, diffs, se_diffs = [], [], [], [], []
    for name, sol in ordered:
        names.append(name)
        elpds.append(sol.elpd_loo)
        ses.append(sol.se)
        diff = sol.pointwise - best_pointwise
        diffs.append(float(np.sum(diff)))
        se_diffs.append(0.0 if sol is ordered[0][1] else _pointwise_se(diff))

    return LooComparison(
        names=tuple(names),
        elpd_loo=tuple(elpds),
        se=tuple(ses),
        elpd_diff=tuple(diffs),
        se_diff=tuple(se_diffs),
    )
