"""
CPU backend for Bayesian linear regression via Gibbs sampling.

Model:
    y_i ~ Normal(x_i'β, σ²)

Priors (weakly informative, scaled to the data the way rstanarm's
autoscaling does):
    - Non-intercept coefficients are placed on centred predictors with
      Normal(0, (s · sd(y) / sd(x_j))²) priors, s = prior_scale
    - The intercept of the centred model gets Normal(mean(y), (s · sd(y))²)
    - σ² ~ scaled inverse-χ²(ν, var(y)), ν = sigma_prior_df

Both full conditionals are conjugate:
    β | σ², y  ~ Normal(V (X'y/σ² + Λ₀μ₀), V),  V = (X'X/σ² + Λ₀)⁻¹
    σ² | β, y  ~ InvGamma(ν/2 + n/2, ν·var(y)/2 + RSS(β)/2)

Draws of the centred intercept are mapped back to the original
parameterisation before they are returned.
"""

from __future__ import annotations

import warnings
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import LinAlgError, cho_solve, cholesky, solve_triangular

from pymodelselect.core.exceptions import NumericalError
from pymodelselect.core.result import Result
from pymodelselect.core.compute.timing import Timer
from pymodelselect.fitting._common import PosteriorParams
from pymodelselect.fitting.design import RHAT_THRESHOLD, SamplerConfig
from pymodelselect.formula.design import FormulaDesign


def split_rhat(draws: NDArray[np.floating[Any]]) -> float:
    """
    Split R-hat for one scalar parameter.

    Args:
        draws: shape (chains, draws_per_chain)

    Returns:
        R-hat, or NaN when there are too few draws or zero within-chain
        variance.
    """
    half = draws.shape[1] // 2
    if half < 2:
        return float('nan')
    split = np.concatenate([draws[:, :half], draws[:, -half:]], axis=0)
    within = float(np.mean(np.var(split, axis=1, ddof=1)))
    if within <= 0:
        return float('nan')
    between = half * float(np.var(np.mean(split, axis=1), ddof=1))
    var_hat = (half - 1) / half * within + between / half
    return float(np.sqrt(var_hat / within))


class CPUGibbsBackend:
    """
    CPU Gibbs sampler for the Gaussian linear model.

    Each chain gets its own Generator spawned from the fit seed, so chains
    are independent and the whole fit is reproducible from one integer.
    """

    def __init__(self, config: SamplerConfig):
        self._config = config

    @property
    def name(self) -> str:
        return 'cpu_gibbs'

    def solve(self, design: FormulaDesign, seed: int) -> Result[PosteriorParams]:
        """
        Sample the posterior.

        Args:
            design: Validated formula design
            seed: Non-negative integer seed

        Returns:
            Result[PosteriorParams] with stacked draws from all chains

        Raises:
            NumericalError: If the posterior precision is not positive
                definite
        """
        cfg = self._config
        timer = Timer()
        timer.start()

        X, y = design.X, design.y
        n, p = design.n, design.p
        has_intercept = design.frame.formula.intercept

        with timer.section('priors'):
            y_sd = float(np.std(y, ddof=1)) if n > 1 else 0.0
            if not y_sd > 0:
                y_sd = 1.0
            x_sd = np.std(X, axis=0, ddof=1) if n > 1 else np.zeros(p)

            shift = np.zeros(p)
            if has_intercept:
                shift[1:] = np.mean(X[:, 1:], axis=0)
            Xc = X - shift

            prior_loc = np.zeros(p)
            prior_scale = np.where(
                x_sd > 0,
                cfg.prior_scale * y_sd / np.where(x_sd > 0, x_sd, 1.0),
                cfg.prior_scale * y_sd,
            )
            if has_intercept:
                prior_loc[0] = float(np.mean(y))
                prior_scale[0] = cfg.prior_scale * y_sd
            prior_prec = 1.0 / prior_scale ** 2

            XtX = Xc.T @ Xc
            Xty = Xc.T @ y
            yty = float(y @ y)
            shape_post = cfg.sigma_prior_df / 2.0 + n / 2.0
            rate_prior = cfg.sigma_prior_df * y_sd ** 2 / 2.0

        keep = cfg.draws_per_chain
        gamma_draws = np.empty((cfg.chains, keep, p))
        sigma_draws = np.empty((cfg.chains, keep))

        with timer.section('sampling'):
            children = np.random.SeedSequence(seed).spawn(cfg.chains)
            for c, child in enumerate(children):
                rng = np.random.default_rng(child)
                sigma2 = y_sd ** 2 * float(np.exp(rng.uniform(-1.0, 1.0)))
                for it in range(cfg.iterations):
                    precision = XtX / sigma2 + np.diag(prior_prec)
                    rhs = Xty / sigma2 + prior_prec * prior_loc
                    try:
                        L = cholesky(precision, lower=True)
                    except LinAlgError as e:
                        raise NumericalError(
                            f"Posterior precision is not positive definite at "
                            f"chain {c}, iteration {it}: {e}"
                        ) from e
                    mean = cho_solve((L, True), rhs)
                    gamma = mean + solve_triangular(L.T, rng.standard_normal(p), lower=False)

                    rss = yty - 2.0 * float(gamma @ Xty) + float(gamma @ XtX @ gamma)
                    sigma2 = (rate_prior + max(rss, 0.0) / 2.0) / rng.gamma(shape_post)

                    if it >= cfg.warmup:
                        gamma_draws[c, it - cfg.warmup] = gamma
                        sigma_draws[c, it - cfg.warmup] = np.sqrt(sigma2)

        with timer.section('diagnostics'):
            beta_draws = gamma_draws.copy()
            if has_intercept and p > 1:
                beta_draws[:, :, 0] = gamma_draws[:, :, 0] - gamma_draws[:, :, 1:] @ shift[1:]

            rhat = {
                name: split_rhat(beta_draws[:, :, j])
                for j, name in enumerate(design.column_names)
            }
            rhat['sigma'] = split_rhat(sigma_draws)

        timer.stop()

        warnings_list: list[str] = []
        high = sorted(k for k, v in rhat.items() if np.isfinite(v) and v > RHAT_THRESHOLD)
        if high:
            msg = (
                f"Split R-hat above {RHAT_THRESHOLD} for {high}; chains may not "
                f"have converged. Increase iterations."
            )
            warnings.warn(msg, RuntimeWarning, stacklevel=3)
            warnings_list.append(msg)

        params = PosteriorParams(
            beta=beta_draws.reshape(cfg.chains * keep, p),
            sigma=sigma_draws.reshape(cfg.chains * keep),
            chains=cfg.chains,
            draws_per_chain=keep,
            prior_location=prior_loc,
            prior_scale=prior_scale,
        )

        info: dict[str, Any] = {
            'method': 'gibbs',
            'seed': seed,
            'chains': cfg.chains,
            'iterations': cfg.iterations,
            'warmup': cfg.warmup,
            'rhat': rhat,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
