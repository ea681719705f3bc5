"""
Core infrastructure for PyModelSelect.

This module provides shared abstractions, utilities, and compute
infrastructure used by the formula, resampling, fitting, scoring and
selection subpackages.

Key components:
    dataset: Immutable columnar Dataset
    protocols: FittedModel, DistributionalModel, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Hardware detection, timing, seeds, linear algebra
"""

from pymodelselect.core.dataset import Dataset
from pymodelselect.core.protocols import FittedModel, DistributionalModel, Backend
from pymodelselect.core.result import Result
from pymodelselect.core.exceptions import (
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

__all__ = [
    # Data
    "Dataset",
    # Protocols
    "FittedModel",
    "DistributionalModel",
    "Backend",
    # Result
    "Result",
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
