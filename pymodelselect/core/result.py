"""
Generic result container for all PyModelSelect computations.

The Result class is the envelope every backend returns: the fitting
backends wrap coefficient or posterior-draw payloads in it, and the PSIS
routine wraps its pointwise estimates. Shared tooling (timing, warnings,
summaries) reads from the envelope rather than from the payloads.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, rank, diagnostics)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (coefficients, draws, etc.)
        info: Structured metadata (method, rank, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> # Direct method
        >>> Result(
        ...     params=LinearParams(coefficients=beta, ...),
        ...     info={'method': 'qr', 'rank': 5},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_qr'
        ... )

        >>> # Sampler
        >>> Result(
        ...     params=PosteriorParams(beta=draws, sigma=sigma_draws, ...),
        ...     info={'method': 'gibbs', 'chains': 4, 'rhat': {...}},
        ...     timing={'total_seconds': 0.5, 'sampling': 0.45},
        ...     backend_name='cpu_gibbs'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
