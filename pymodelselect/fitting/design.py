"""
Sampler configuration for the Bayesian engine.

Defaults match the usual posterior-sampling setup: 4 chains of 2000
iterations with the first 1000 discarded as warmup, giving 4000 draws.
"""

from __future__ import annotations

from dataclasses import dataclass

from pymodelselect.core.exceptions import InvalidParameterError
from pymodelselect.core.validation import check_positive_int

# Split R-hat above this is reported as a convergence warning
RHAT_THRESHOLD = 1.05


@dataclass(frozen=True)
class SamplerConfig:
    """
    Settings for the Gibbs sampler.

    Attributes:
        chains: Independent chains, each with its own derived seed.
        iterations: Iterations per chain, warmup included.
        warmup: Leading iterations discarded from each chain.
        prior_scale: Coefficient prior SD in units of sd(y) / sd(x).
        sigma_prior_df: Degrees of freedom of the scaled inverse-chi²
            prior on sigma², centred at var(y).
    """
    chains: int = 4
    iterations: int = 2000
    warmup: int = 1000
    prior_scale: float = 2.5
    sigma_prior_df: float = 1.0

    def __post_init__(self):
        check_positive_int(self.chains, 'chains')
        check_positive_int(self.iterations, 'iterations', minimum=2)
        if isinstance(self.warmup, bool) or not isinstance(self.warmup, int) or self.warmup < 0:
            raise InvalidParameterError(
                f"warmup must be a non-negative integer, got {self.warmup!r}",
                parameter='warmup',
                value=self.warmup,
            )
        if self.iterations - self.warmup < 2:
            raise InvalidParameterError(
                f"iterations ({self.iterations}) must exceed warmup "
                f"({self.warmup}) by at least 2",
                parameter='iterations',
                value=self.iterations,
            )
        for name in ('prior_scale', 'sigma_prior_df'):
            value = getattr(self, name)
            if not value > 0:
                raise InvalidParameterError(
                    f"{name} must be positive, got {value!r}",
                    parameter=name,
                    value=value,
                )

    @property
    def draws_per_chain(self) -> int:
        return self.iterations - self.warmup

    @property
    def n_draws(self) -> int:
        return self.chains * self.draws_per_chain
