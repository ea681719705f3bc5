"""
Common data structures for fitting.

LinearParams and PosteriorParams are the parameter payloads wrapped by
Result[P] and exposed through the fitted-model classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for least-squares regression.

    This is the immutable data computed by the QR backends.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int


@dataclass(frozen=True)
class PosteriorParams:
    """
    Parameter payload for Bayesian linear regression.

    Draws from all chains are stacked chain-major: rows
    [c * n_keep, (c + 1) * n_keep) belong to chain c.
    """
    beta: NDArray[np.floating[Any]]            # shape (draws, p)
    sigma: NDArray[np.floating[Any]]           # shape (draws,)
    chains: int
    draws_per_chain: int
    prior_location: NDArray[np.floating[Any]]  # shape (p,), centred scale
    prior_scale: NDArray[np.floating[Any]]     # shape (p,), centred scale
