"""
Exception hierarchy for PyModelSelect.

All exceptions inherit from PyModelSelectError to allow catching any
library-specific error. The model selector relies on this: any
PyModelSelectError raised while fitting or scoring a single candidate is
recorded against that candidate instead of aborting the whole run.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from typing import Any


class PyModelSelectError(Exception):
    """Base exception for all PyModelSelect errors."""
    pass


class ValidationError(PyModelSelectError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    """
    pass


class InvalidParameterError(ValidationError):
    """
    A resampling or fitting parameter is out of range.

    Attributes:
        parameter: Name of the offending parameter
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        value: Any = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class UnknownFieldError(ValidationError):
    """
    A formula references a field the dataset does not have.

    Attributes:
        field: The missing field name
        available: Field names the dataset does have
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        available: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.field = field
        self.available = available


class NumericalError(PyModelSelectError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularDesignError(NumericalError):
    """
    Design matrix is rank-deficient.

    Raised by least-squares fitting when the columns of the design matrix
    are linearly dependent (perfect multicollinearity, or fewer rows than
    columns).

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank
        expected_rank: Rank required for a unique solution
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class MetricUndefinedError(PyModelSelectError):
    """
    A metric cannot be computed for the given model.

    Raised for unknown metric names and for metrics that need information
    the fitted model does not expose (e.g. pointwise log-likelihood from a
    least-squares fit).

    Attributes:
        metric: The requested metric name
        model_type: Class name of the fitted model, if any
    """

    def __init__(
        self,
        message: str,
        metric: str | None = None,
        model_type: str | None = None,
    ):
        super().__init__(message)
        self.metric = metric
        self.model_type = model_type


class InsufficientFoldsError(PyModelSelectError):
    """
    Too few folds to estimate a standard error.

    Attributes:
        n_folds: Number of folds supplied
    """

    def __init__(self, message: str, n_folds: int):
        super().__init__(message)
        self.n_folds = n_folds


class ParetoKWarning(UserWarning):
    """
    PSIS-LOO diagnostics flag unreliable importance weights.

    Issued when one or more Pareto shape estimates exceed 0.5 (and again,
    more strongly, above 0.7).
    """
    pass
