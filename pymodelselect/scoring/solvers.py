"""
Scoring entry point.
"""

from __future__ import annotations

from typing import Any

from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import MetricUndefinedError, ValidationError
from pymodelselect.scoring._common import Score
from pymodelselect.scoring.metrics import Metric, get_metric


def score(model: Any, data: Any, metric: str | Metric = 'rmse') -> Score:
    """
    Evaluate a fitted model on a dataset.

    The observed values are the model's response term evaluated on `data`,
    so a model of log(price) is scored on the log scale.

    Args:
        model: A fitted model (LinearModel or BayesianLinearModel)
        data: Dataset to score on, usually a fold's test set
        metric: 'rmse', 'mae', 'rsq', 'elpd' or 'elpd_loo'

    Returns:
        Score

    Raises:
        MetricUndefinedError: If the metric is unknown, or needs
            log-likelihood the model does not provide
        ValidationError: If `data` is empty

    Warns:
        ParetoKWarning: For 'elpd_loo' when PSIS diagnostics are poor

    Example:
        >>> s = score(fit('y ~ x', train), test, 'rmse')
        >>> s.value
    """
    m = metric if isinstance(metric, Metric) else get_metric(metric)

    if not model.supports(m.requires):
        raise MetricUndefinedError(
            f"Metric {m.name!r} needs {m.requires!r}, which "
            f"{type(model).__name__} does not provide",
            metric=m.name,
            model_type=type(model).__name__,
        )

    dataset = Dataset.coerce(data)
    if len(dataset) == 0:
        raise ValidationError(f"Cannot compute {m.name!r} on an empty dataset")

    return m.evaluate(model, dataset)
