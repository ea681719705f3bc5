"""
PyModelSelect: resampling-based model selection for linear models.

Partition a dataset into resampling folds, fit candidate functional forms
on each training fold, score them on the held-out rows, and pick the
simplest candidate within one standard error of the best.

Submodules:
    core: Dataset, exceptions, Result envelope, compute helpers
    formula: Candidate formulas and model-matrix construction
    resampling: Holdout, Monte Carlo, bootstrap and v-fold partitions
    fitting: Least-squares and Bayesian linear models
    scoring: RMSE, MAE, R-squared, ELPD and PSIS-LOO
    selection: Cross-validated selection and the one-SE rule
"""

__version__ = "0.1.0"

from pymodelselect import core
from pymodelselect import formula
from pymodelselect import resampling
from pymodelselect import fitting
from pymodelselect import scoring
from pymodelselect import selection

from pymodelselect.core import (
    Dataset,
    PyModelSelectError,
    ValidationError,
    DimensionError,
    InvalidParameterError,
    UnknownFieldError,
    NumericalError,
    SingularDesignError,
    MetricUndefinedError,
    InsufficientFoldsError,
    ParetoKWarning,
)
from pymodelselect.formula import FormulaSpec, Term
from pymodelselect.resampling import Fold, partition
from pymodelselect.fitting import SamplerConfig, fit
from pymodelselect.scoring import Score, loo, loo_compare, score
from pymodelselect.selection import Candidate, one_se_rule, select, select_loo

__all__ = [
    "__version__",
    # Workflow
    "Dataset",
    "FormulaSpec",
    "Term",
    "Candidate",
    "partition",
    "Fold",
    "fit",
    "SamplerConfig",
    "score",
    "Score",
    "loo",
    "loo_compare",
    "select",
    "select_loo",
    "one_se_rule",
    # Exceptions
    "PyModelSelectError",
    "ValidationError",
    "DimensionError",
    "InvalidParameterError",
    "UnknownFieldError",
    "NumericalError",
    "SingularDesignError",
    "MetricUndefinedError",
    "InsufficientFoldsError",
    "ParetoKWarning",
]
