"""
Solver dispatch for model fitting.

This module provides the fit() function (public API) and backend selection.
"""

from __future__ import annotations

from typing import Any, Literal

from pymodelselect.core.compute.device import select_device
from pymodelselect.core.compute.random import resolve_base_seed
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import InvalidParameterError
from pymodelselect.core.protocols import Backend
from pymodelselect.fitting._common import LinearParams
from pymodelselect.fitting.backends.cpu import CPUQRBackend
from pymodelselect.fitting.backends.gibbs import CPUGibbsBackend
from pymodelselect.fitting.design import SamplerConfig
from pymodelselect.fitting.solution import BayesianLinearModel, LinearModel
from pymodelselect.formula.design import FormulaDesign
from pymodelselect.formula.spec import FormulaSpec

Engine = Literal['ols', 'bayes']
BackendChoice = Literal['auto', 'cpu', 'gpu']

ENGINES: tuple[str, ...] = ('ols', 'bayes')


def fit(
    formula: FormulaSpec | str,
    data: Any,
    engine: Engine = 'ols',
    *,
    seed: int | None = None,
    backend: BackendChoice = 'cpu',
    sampler: SamplerConfig | None = None,
) -> LinearModel | BayesianLinearModel:
    """
    Fit a formula to training data.

    The dataset is never modified. The returned model carries the encoding
    learned from `data` (categorical levels, column layout) and applies it
    to whatever it is asked to predict.

    Args:
        formula: FormulaSpec or a formula string such as
            'log(price) ~ log(carat) + clarity'.
        data: Training Dataset (or records / DataFrame).
        engine:
            - 'ols': closed-form least squares (deterministic)
            - 'bayes': Gibbs-sampled Bayesian linear regression
        seed: Seed for the 'bayes' engine. None draws fresh entropy; the
            seed actually used is stored in model.info['seed'].
        backend: Least-squares backend: 'cpu' (LAPACK QR), 'gpu' (PyTorch
            QR, needs a GPU) or 'auto' (GPU when available).
        sampler: SamplerConfig for the 'bayes' engine.

    Returns:
        LinearModel for 'ols', BayesianLinearModel for 'bayes'.

    Raises:
        UnknownFieldError: If the formula references a field not in `data`
        SingularDesignError: If the least-squares design is rank-deficient
        InvalidParameterError: If the engine or backend is unknown

    Example:
        >>> model = fit('y ~ x', anscombe_1())
        >>> model.predict({'x': 10.0})
    """
    if isinstance(formula, str):
        formula = FormulaSpec.parse(formula)
    dataset = Dataset.coerce(data)

    if engine not in ENGINES:
        raise InvalidParameterError(
            f"engine must be one of {list(ENGINES)}, got {engine!r}",
            parameter='engine',
            value=engine,
        )

    design = FormulaDesign.build(formula, dataset)

    if engine == 'ols':
        backend_impl = _get_backend(backend)
        result = backend_impl.solve(design)
        return LinearModel(_result=result, _design=design)

    config = sampler if sampler is not None else SamplerConfig()
    result = CPUGibbsBackend(config).solve(design, resolve_base_seed(seed))
    return BayesianLinearModel(_result=result, _design=design)


def _get_backend(choice: BackendChoice) -> Backend[FormulaDesign, LinearParams]:
    """
    Select and instantiate the least-squares backend.

    Raises:
        InvalidParameterError: If unknown backend specified
        RuntimeError: If GPU requested but unavailable
    """
    if choice == 'cpu':
        return CPUQRBackend()

    if choice in ('auto', 'gpu'):
        device = select_device(choice)
        if device.is_gpu:
            from pymodelselect.fitting.backends.gpu import GPUQRBackend
            return GPUQRBackend(device)
        return CPUQRBackend()

    raise InvalidParameterError(
        f"Unknown backend: {choice!r}", parameter='backend', value=choice,
    )
