"""
Pareto-smoothed importance sampling.

Given log importance ratios for each observation (one column per
observation, one row per posterior draw), replace the largest ratios by
order statistics of a generalized Pareto distribution fitted to the tail,
and report the fitted shape k as a reliability diagnostic.

References:
    Vehtari, A., Gelman, A., & Gabry, J. (2017). Practical Bayesian model
        evaluation using leave-one-out cross-validation and WAIC.
        Statistics and Computing, 27, 1413-1432.
    Zhang, J., & Stephens, M. A. (2009). A new and efficient estimation
        method for the generalized Pareto distribution. Technometrics, 51.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from pymodelselect.core.validation import check_2d, check_finite

# k <= PARETO_K_OK: estimate reliable
PARETO_K_OK = 0.5
# PARETO_K_OK < k <= PARETO_K_BAD: usable but noisy; above: unreliable
PARETO_K_BAD = 0.7

_PRIOR_BS = 3.0
_PRIOR_K = 10.0
_CUTOFF_MIN = float(np.log(np.finfo(float).tiny))


def tail_length(n_draws: int) -> int:
    """Number of largest ratios replaced by Pareto order statistics."""
    return int(np.ceil(min(0.2 * n_draws, 3.0 * np.sqrt(n_draws))))


def gpd_fit(x: NDArray[np.floating[Any]]) -> tuple[float, float]:
    """
    Estimate generalized Pareto (k, sigma) from sorted exceedances.

    Empirical-Bayes estimate of Zhang & Stephens with a weak prior pulling
    k towards 0.5.

    Args:
        x: Positive exceedances over the cutoff, sorted ascending

    Returns:
        (k, sigma)
    """
    n = x.shape[0]
    m_est = 30 + int(np.sqrt(n))

    b = 1.0 - np.sqrt(m_est / (np.arange(1, m_est + 1, dtype=np.float64) - 0.5))
    b /= _PRIOR_BS * x[int(n / 4 + 0.5) - 1]
    b += 1.0 / x[-1]

    with np.errstate(divide='ignore', invalid='ignore'):
        k = np.mean(np.log1p(-b[:, None] * x), axis=1)
        len_scale = n * (np.log(-(b / k)) - k - 1.0)
        weights = 1.0 / np.sum(np.exp(len_scale - len_scale[:, None]), axis=1)

    real = weights >= 10 * np.finfo(float).eps
    weights = weights[real]
    b = b[real]
    weights /= np.sum(weights)

    b_post = float(np.sum(b * weights))
    k_post = float(np.mean(np.log1p(-b_post * x)))
    sigma = -k_post / b_post
    k_post = (n * k_post + _PRIOR_K * 0.5) / (n + _PRIOR_K)
    return k_post, sigma


def gpd_quantile(probs: NDArray[np.floating[Any]], k: float, sigma: float) -> NDArray[np.floating[Any]]:
    """Inverse CDF of the generalized Pareto distribution (location 0)."""
    if sigma <= 0:
        return np.full_like(probs, np.nan)
    if abs(k) < np.finfo(float).eps:
        q = -np.log1p(-probs)
    else:
        q = np.expm1(-k * np.log1p(-probs)) / k
    return q * sigma


def psis_smooth(log_ratios: NDArray[np.floating[Any]]) -> tuple[NDArray, NDArray]:
    """
    Pareto-smooth log importance ratios column by column.

    Args:
        log_ratios: shape (draws, n)

    Returns:
        (normalised smoothed log weights (draws, n), Pareto k (n,))
        k is inf when the tail is too short to fit.
    """
    check_2d(log_ratios, 'log_ratios')
    check_finite(log_ratios, 'log_ratios')
    S, n = log_ratios.shape
    m = tail_length(S)
    log_weights = np.empty_like(log_ratios, dtype=np.float64)
    pareto_k = np.empty(n)

    for i in range(n):
        lw = log_ratios[:, i] - np.max(log_ratios[:, i])
        order = np.argsort(lw, kind='stable')
        cutoff = max(lw[order[-m - 1]], _CUTOFF_MIN) if m < S else _CUTOFF_MIN
        tail_idx = np.flatnonzero(lw > cutoff)

        if tail_idx.size <= 4:
            k = float('inf')
        else:
            tail_order = tail_idx[np.argsort(lw[tail_idx], kind='stable')]
            exp_cutoff = np.exp(cutoff)
            exceedances = np.exp(lw[tail_order]) - exp_cutoff
            k, sigma = gpd_fit(exceedances)
            if np.isfinite(k):
                probs = (np.arange(tail_order.size) + 0.5) / tail_order.size
                smoothed = np.log(gpd_quantile(probs, k, sigma) + exp_cutoff)
                lw[tail_order] = np.minimum(smoothed, 0.0)

        log_weights[:, i] = lw - logsumexp(lw)
        pareto_k[i] = k

    return log_weights, pareto_k
