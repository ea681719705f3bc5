"""
Model selection across candidates and resampling folds.

This module provides select() and select_loo() (public API).
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from pymodelselect.core.capabilities import CAPABILITY_LOG_LIKELIHOOD
from pymodelselect.core.compute.random import derive_seed, resolve_base_seed
from pymodelselect.core.compute.timing import Timer
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import (
    InsufficientFoldsError,
    InvalidParameterError,
    MetricUndefinedError,
    PyModelSelectError,
    ValidationError,
)
from pymodelselect.core.result import Result
from pymodelselect.fitting import fit
from pymodelselect.fitting.design import SamplerConfig
from pymodelselect.fitting.solvers import ENGINES, BackendChoice, Engine
from pymodelselect.resampling._common import Fold
from pymodelselect.scoring import loo, score
from pymodelselect.scoring._common import Score
from pymodelselect.scoring.metrics import Metric, get_metric
from pymodelselect.selection._common import Candidate, CandidateResult
from pymodelselect.selection._executor import resolve_workers, run_units
from pymodelselect.selection.rules import one_se_rule, rank_order, within_one_se
from pymodelselect.selection.solution import SelectionSolution


@dataclass(frozen=True)
class _Unit:
    candidate_index: int
    fold_index: int
    candidate: Candidate
    fold: Fold
    seed: int


@dataclass(frozen=True)
class _Outcome:
    score: Score | None = None
    error: PyModelSelectError | None = None


def _coerce_candidates(candidates: Sequence[Any]) -> tuple[Candidate, ...]:
    coerced = tuple(Candidate.coerce(c) for c in candidates)
    if not coerced:
        raise ValidationError("At least one candidate is required")
    return coerced


def _aggregate(
    candidate: Candidate,
    index: int,
    outcomes: Sequence[_Outcome],
    fold_ids: Sequence[str],
) -> CandidateResult:
    """Mean and standard error of one candidate's fold scores."""
    for outcome, fold_id in zip(outcomes, fold_ids):
        if outcome.error is not None:
            exc = outcome.error
            return CandidateResult(
                candidate=candidate, index=index, scores=(), mean=None,
                standard_error=None, failed=True,
                error=f"{exc} (fold {fold_id})", error_kind=type(exc).__name__,
            )

    scores = tuple(o.score for o in outcomes)
    values = np.array([s.value for s in scores], dtype=np.float64)
    if not np.all(np.isfinite(values)):
        bad = fold_ids[int(np.flatnonzero(~np.isfinite(values))[0])]
        return CandidateResult(
            candidate=candidate, index=index, scores=scores, mean=None,
            standard_error=None, failed=True,
            error=f"non-finite {scores[0].metric} (fold {bad})",
            error_kind='NonFiniteScore',
        )

    k = values.shape[0]
    return CandidateResult(
        candidate=candidate,
        index=index,
        scores=scores,
        mean=float(np.mean(values)),
        standard_error=float(np.std(values, ddof=1) / math.sqrt(k)),
    )


def _rank(
    aggregated: Sequence[CandidateResult],
    direction: str,
) -> tuple[tuple[CandidateResult, ...], int | None]:
    """
    Assign ranks and the one-SE flag; return ordered results and the
    selected candidate index (None when all failed).
    """
    ok = [r for r in aggregated if not r.failed]
    failed = [r for r in aggregated if r.failed]
    if not ok:
        return tuple(failed), None

    means = np.array([r.mean for r in ok])
    ses = np.array([r.standard_error for r in ok])
    complexities = np.array([r.complexity for r in ok])

    order = rank_order(means, direction)
    eligible = within_one_se(means, ses, direction)
    chosen = one_se_rule(means, ses, complexities, direction)

    ranks = np.empty(len(ok), dtype=int)
    ranks[order] = np.arange(1, len(ok) + 1)

    ranked = [
        CandidateResult(
            candidate=r.candidate, index=r.index, scores=r.scores, mean=r.mean,
            standard_error=r.standard_error, rank=int(ranks[i]),
            within_one_se=bool(eligible[i]),
        )
        for i, r in enumerate(ok)
    ]
    ordered = tuple(ranked[i] for i in order) + tuple(failed)
    return ordered, ok[chosen].index


def _finish(
    results: tuple[CandidateResult, ...],
    selected_index: int | None,
    info: dict[str, Any],
    timer: Timer,
    backend_name: str,
) -> SelectionSolution:
    messages: list[str] = []
    if selected_index is None:
        message = (
            f"All {len(results)} candidates failed; no model selected. "
            f"First error: {results[0].error_kind}: {results[0].error}"
        )
        warnings.warn(message, RuntimeWarning, stacklevel=3)
        messages.append(message)
    else:
        n_failed = sum(r.failed for r in results)
        if n_failed:
            messages.append(f"{n_failed} of {len(results)} candidates failed")

    info['selected_index'] = selected_index
    return SelectionSolution(
        _result=Result(
            params=results,
            info=info,
            timing=timer.result(),
            backend_name=backend_name,
            warnings=tuple(messages),
        )
    )


def select(
    candidates: Sequence[Candidate | tuple],
    folds: Sequence[Fold],
    metric: str | Metric = 'rmse',
    *,
    engine: Engine = 'ols',
    seed: int | None = None,
    n_jobs: int | None = 1,
    backend: BackendChoice = 'cpu',
    sampler: SamplerConfig | None = None,
) -> SelectionSolution:
    """
    Cross-validated model selection with the one-standard-error rule.

    Every candidate is fit on each fold's training rows and scored on its
    test rows. Per candidate the fold scores are averaged and the standard
    error of the mean is sd(scores, ddof=1) / sqrt(k). Candidates are
    ranked best first and the simplest candidate within one standard
    error of the best is selected.

    A library error raised while fitting or scoring a candidate on any
    fold marks that candidate failed; the remaining candidates are still
    evaluated. The metric 'elpd_loo' is computed on each fold's training
    rows, the data the model was fit on.

    Args:
        candidates: Candidate objects or (formula, complexity) tuples
        folds: Folds from partition() (or any sequence of Fold)
        metric: 'rmse', 'mae', 'rsq', 'elpd' or 'elpd_loo'
        engine: 'ols' or 'bayes'
        seed: Base seed. Each (candidate, fold) unit is fit with
            derive_seed(seed, candidate_index, fold_index), so results do
            not depend on n_jobs or execution order.
        n_jobs: Worker threads (1 = serial, None or -1 = one per CPU)
        backend: Least-squares backend for engine='ols'
        sampler: SamplerConfig for engine='bayes'

    Returns:
        SelectionSolution

    Raises:
        InsufficientFoldsError: If fewer than 2 folds are given
        MetricUndefinedError: If the metric is unknown or needs
            log-likelihood and engine='ols'
        InvalidParameterError: For an unknown engine or bad n_jobs

    Example:
        >>> folds = partition(ds, 'vfold', v=10, seed=858)
        >>> sel = select([('y ~ x', 2), ('y ~ x + square(x)', 3)], folds)
        >>> sel.selected.name
    """
    fold_list = tuple(folds)
    if len(fold_list) < 2:
        raise InsufficientFoldsError(
            f"At least 2 folds are needed to estimate a standard error, got {len(fold_list)}",
            n_folds=len(fold_list),
        )
    m = metric if isinstance(metric, Metric) else get_metric(metric)
    if engine not in ENGINES:
        raise InvalidParameterError(
            f"engine must be one of {list(ENGINES)}, got {engine!r}",
            parameter='engine',
            value=engine,
        )
    if engine == 'ols' and m.requires == CAPABILITY_LOG_LIKELIHOOD:
        raise MetricUndefinedError(
            f"Metric {m.name!r} needs pointwise log-likelihood; "
            f"least-squares fits do not provide it, use engine='bayes'",
            metric=m.name,
            model_type='LinearModel',
        )
    cands = _coerce_candidates(candidates)
    base_seed = resolve_base_seed(seed)

    units = [
        _Unit(ci, fi, cand, fold, derive_seed(base_seed, ci, fi))
        for ci, cand in enumerate(cands)
        for fi, fold in enumerate(fold_list)
    ]

    def evaluate(unit: _Unit) -> _Outcome:
        try:
            model = fit(
                unit.candidate.formula, unit.fold.train, engine,
                seed=unit.seed, backend=backend, sampler=sampler,
            )
            target = unit.fold.train if m.name == 'elpd_loo' else unit.fold.test
            return _Outcome(score=score(model, target, m))
        except PyModelSelectError as exc:
            return _Outcome(error=exc)

    workers = resolve_workers(n_jobs, len(units))

    timer = Timer()
    timer.start()
    with timer.section('evaluation'):
        outcomes = run_units(units, evaluate, workers)

    with timer.section('aggregation'):
        k = len(fold_list)
        fold_ids = [f.id for f in fold_list]
        aggregated = [
            _aggregate(cand, ci, outcomes[ci * k:(ci + 1) * k], fold_ids)
            for ci, cand in enumerate(cands)
        ]
        results, selected_index = _rank(aggregated, m.direction)
    timer.stop()

    info = {
        'method': 'resampling',
        'metric': m.name,
        'direction': m.direction,
        'engine': engine,
        'seed': base_seed,
        'n_folds': k,
        'n_jobs': workers,
    }
    return _finish(results, selected_index, info, timer,
                   'cpu_threads' if workers > 1 else 'cpu_serial')


def select_loo(
    candidates: Sequence[Candidate | tuple],
    data: Any,
    *,
    seed: int | None = None,
    sampler: SamplerConfig | None = None,
    n_jobs: int | None = 1,
) -> SelectionSolution:
    """
    Select among Bayesian fits by PSIS-LOO.

    Each candidate is fit once on the full dataset with engine='bayes';
    elpd_loo and its standard error play the role of the fold mean and
    SE, and the same one-SE rule picks the simplest adequate candidate.
    The per-candidate LooSolution objects are kept in
    solution.info['loo'] for loo_compare().

    Args:
        candidates: Candidate objects or (formula, complexity) tuples
        data: Dataset all candidates are fit on
        seed: Base seed; candidate i is fit with derive_seed(seed, i)
        sampler: SamplerConfig for the Gibbs sampler
        n_jobs: Worker threads

    Returns:
        SelectionSolution with metric 'elpd_loo'

    Warns:
        ParetoKWarning: When a candidate's PSIS diagnostics are poor
    """
    cands = _coerce_candidates(candidates)
    dataset = Dataset.coerce(data)
    base_seed = resolve_base_seed(seed)

    def evaluate(ci: int):
        try:
            model = fit(
                cands[ci].formula, dataset, 'bayes',
                seed=derive_seed(base_seed, ci), sampler=sampler,
            )
            return loo(model, dataset)
        except PyModelSelectError as exc:
            return exc

    workers = resolve_workers(n_jobs, len(cands))

    timer = Timer()
    timer.start()
    with timer.section('evaluation'):
        outcomes = run_units(list(range(len(cands))), evaluate, workers)

    with timer.section('aggregation'):
        aggregated = []
        loos = {}
        for ci, (cand, outcome) in enumerate(zip(cands, outcomes)):
            if isinstance(outcome, PyModelSelectError):
                aggregated.append(CandidateResult(
                    candidate=cand, index=ci, scores=(), mean=None,
                    standard_error=None, failed=True,
                    error=str(outcome), error_kind=type(outcome).__name__,
                ))
                continue
            key = cand.name if cand.name not in loos else f"{cand.name} [{ci}]"
            loos[key] = outcome
            aggregated.append(CandidateResult(
                candidate=cand,
                index=ci,
                scores=(Score(
                    metric='elpd_loo',
                    value=outcome.elpd_loo,
                    n_observations=outcome.n_observations,
                    standard_error=outcome.se,
                    pareto_k=tuple(float(k) for k in outcome.pareto_k),
                    warnings=outcome.warnings,
                ),),
                mean=outcome.elpd_loo,
                standard_error=outcome.se,
            ))
        results, selected_index = _rank(aggregated, 'maximize')
    timer.stop()

    info = {
        'method': 'psis_loo',
        'metric': 'elpd_loo',
        'direction': 'maximize',
        'engine': 'bayes',
        'seed': base_seed,
        'n_folds': None,
        'n_jobs': workers,
        'loo': loos,
    }
    return _finish(results, selected_index, info, timer,
                   'cpu_threads' if workers > 1 else 'cpu_serial')
