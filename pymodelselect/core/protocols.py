"""
Core protocols for PyModelSelect.

These define structural interfaces that fitted models and backends must
satisfy. We use Protocol (structural typing) rather than ABC (nominal
typing) so any object with the right methods can be scored and selected,
whichever engine produced it.

Design Principles:
    - Minimal contracts: predict() is the only universal operation
    - Capability-driven: use supports() for optional features
    - Callers never branch on engine identity
"""

from typing import Any, Protocol, TypeVar, runtime_checkable, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from pymodelselect.core.result import Result

D = TypeVar('D')  # Design type
P = TypeVar('P')  # Parameter payload type


@runtime_checkable
class FittedModel(Protocol):
    """
    Minimal protocol for any fitted model.

    `data` may be a Dataset, a single record mapping, or a sequence of
    records. The response field need not be present.
    """

    def predict(self, data: Any) -> NDArray[np.floating[Any]]:
        """Point prediction of the (transformed) response, shape (n,)."""
        ...

    def supports(self, capability: str) -> bool:
        """
        Check if this model supports a given capability.

        Note:
            Unknown capabilities MUST return False, never raise.
        """
        ...

    def observed_response(self, data: Any) -> NDArray[np.floating[Any]]:
        """The response term evaluated on `data`, shape (n,)."""
        ...


@runtime_checkable
class DistributionalModel(FittedModel, Protocol):
    """
    A fitted model that exposes posterior draws.

    Produced by sampling engines. Required for predictive-density metrics.
    """

    def predict_distribution(self, data: Any, seed: Any = None) -> NDArray[np.floating[Any]]:
        """Posterior predictive draws, shape (draws, n)."""
        ...

    def log_likelihood(self, data: Any) -> NDArray[np.floating[Any]]:
        """Pointwise log-likelihood per posterior draw, shape (draws, n)."""
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend takes a validated design and produces a Result wrapping a
    parameter payload. Backends are stateless; all configuration is passed
    via the design or at construction time.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_qr', 'gpu_qr', 'cpu_gibbs'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        ...
