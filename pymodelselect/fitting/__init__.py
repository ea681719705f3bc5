"""
Model fitting.

Public API:
    fit(formula, data, engine='ols' | 'bayes', ...) -> fitted model

The fit() function is the only entry point. It handles:
    - Formula parsing and validation against the data
    - Design construction
    - Backend selection
    - Result wrapping

Example:
    >>> from pymodelselect.fitting import fit
    >>> ols = fit('y ~ x', ds)
    >>> print(ols.summary())
    >>> post = fit('y ~ x', ds, engine='bayes', seed=858)
    >>> post.predict_distribution({'x': 10.0}).shape
    (4000, 1)
"""

from pymodelselect.fitting.design import SamplerConfig, RHAT_THRESHOLD
from pymodelselect.fitting.solution import BayesianLinearModel, LinearModel
from pymodelselect.fitting.solvers import fit

__all__ = [
    "fit",
    "LinearModel",
    "BayesianLinearModel",
    "SamplerConfig",
    "RHAT_THRESHOLD",
]
