"""
Fitted model types.

Contains the user-facing wrappers around the backend Results. Both
satisfy the FittedModel protocol (predict / observed_response / supports);
BayesianLinearModel additionally satisfies DistributionalModel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.capabilities import (
    CAPABILITY_LOG_LIKELIHOOD,
    CAPABILITY_PREDICT,
    CAPABILITY_PREDICTIVE_DRAWS,
)
from pymodelselect.core.compute.random import SeedLike, as_generator, derive_seed
from pymodelselect.core.dataset import Dataset
from pymodelselect.core.exceptions import InvalidParameterError
from pymodelselect.core.result import Result
from pymodelselect.fitting._common import LinearParams, PosteriorParams
from pymodelselect.formula.design import FormulaDesign, ModelFrame
from pymodelselect.formula.spec import FormulaSpec


def _check_prob(prob: float) -> float:
    if not 0.0 < prob < 1.0:
        raise InvalidParameterError(
            f"prob must be in (0, 1), got {prob!r}", parameter='prob', value=prob,
        )
    return float(prob)


@dataclass
class LinearModel:
    """
    Least-squares fit of a formula.

    Wraps the backend Result and provides convenient accessors for
    coefficients, standard errors and t-statistics, plus predict() for
    new data.
    """
    _result: Result[LinearParams]
    _design: FormulaDesign

    _standard_errors: NDArray[np.floating[Any]] | None = None

    # --- FittedModel protocol ---

    def predict(self, data: Any) -> NDArray[np.floating[Any]]:
        """
        Predicted (transformed) response for each row of `data`.

        `data` may be a Dataset, one record, or a sequence of records.
        """
        X = self.frame.matrix(Dataset.coerce(data))
        return X @ self.coefficients

    def observed_response(self, data: Any) -> NDArray[np.floating[Any]]:
        return self.frame.response(Dataset.coerce(data))

    def supports(self, capability: str) -> bool:
        return capability == CAPABILITY_PREDICT

    # --- Accessors ---

    @property
    def formula(self) -> FormulaSpec:
        return self.frame.formula

    @property
    def frame(self) -> ModelFrame:
        return self._design.frame

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._design.column_names

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def n_parameters(self) -> int:
        return self._design.p

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        n = self._design.n
        p = self._result.params.rank
        if n - p <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * (n - 1) / (n - p)

    @property
    def residual_std_error(self) -> float:
        df = self._result.params.df_residual
        if df <= 0:
            return 0.0
        return float(np.sqrt(self.rss / df))

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

        Computed as SE(β) = sqrt(diag(σ² (X'X)⁻¹)). NaN when there are no
        residual degrees of freedom.
        """
        if self._standard_errors is not None:
            return self._standard_errors

        df = self._result.params.df_residual
        p = len(self.coefficients)
        if df <= 0:
            self._standard_errors = np.full(p, np.nan, dtype=np.float64)
            return self._standard_errors

        sigma_sq = self.rss / df
        XtX_inv = np.linalg.inv(self._design.XtX())
        self._standard_errors = np.sqrt(sigma_sq * np.diag(XtX_inv))
        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / self.standard_errors
        return np.where(np.isfinite(t), t, np.nan)

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values from the t distribution."""
        from scipy import stats
        df = self._result.params.df_residual
        if df <= 0:
            return np.full(len(self.coefficients), np.nan)
        return 2.0 * stats.t.sf(np.abs(self.t_statistics), df)

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Generate R-style summary output."""
        width = max(12, max(len(name) for name in self.column_names))
        lines = [
            "Linear Regression Results",
            "=" * (width + 40),
            f"Formula: {self.formula.label}",
            f"Observations: {self._design.n}",
            f"R-squared: {self.r_squared:.6f}",
            f"Adj. R-squared: {self.adjusted_r_squared:.6f}",
            f"Residual Std. Error: {self.residual_std_error:.6f} on {self.df_residual} DF",
            "",
            f"{'':<{width}} {'Estimate':>12} {'Std.Error':>12} {'t value':>9} {'Pr(>|t|)':>10}",
            "-" * (width + 40),
        ]
        for name, coef, se, t, pv in zip(
            self.column_names, self.coefficients, self.standard_errors,
            self.t_statistics, self.p_values,
        ):
            se_str = f"{se:12.6f}" if not np.isnan(se) else f"{'NA':>12}"
            t_str = f"{t:9.3f}" if not np.isnan(t) else f"{'NA':>9}"
            p_str = f"{pv:10.3g}" if not np.isnan(pv) else f"{'NA':>10}"
            lines.append(f"{name:<{width}} {coef:12.6f} {se_str} {t_str} {p_str}")
        lines.append("-" * (width + 40))
        lines.append(f"Backend: {self.backend_name}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearModel({self.formula.label!r}, n={self._design.n}, "
            f"r_squared={self.r_squared:.4f})"
        )


@dataclass
class BayesianLinearModel:
    """
    Posterior draws of a Gaussian linear model.

    Point summaries follow the usual convention for sampled fits:
    coefficients are posterior medians and their uncertainty is the MAD SD.
    predict() returns the posterior median of the linear predictor.
    """
    _result: Result[PosteriorParams]
    _design: FormulaDesign

    # --- FittedModel protocol ---

    def predict(self, data: Any) -> NDArray[np.floating[Any]]:
        """Posterior median of the linear predictor for each row."""
        return np.median(self.linear_predictor(data), axis=0)

    def observed_response(self, data: Any) -> NDArray[np.floating[Any]]:
        return self.frame.response(Dataset.coerce(data))

    def supports(self, capability: str) -> bool:
        return capability in (
            CAPABILITY_PREDICT,
            CAPABILITY_PREDICTIVE_DRAWS,
            CAPABILITY_LOG_LIKELIHOOD,
        )

    # --- DistributionalModel protocol ---

    def linear_predictor(self, data: Any) -> NDArray[np.floating[Any]]:
        """Draws of x'β for each row, shape (draws, n)."""
        X = self.frame.matrix(Dataset.coerce(data))
        return self.draws @ X.T

    def predict_distribution(self, data: Any, seed: SeedLike = None) -> NDArray[np.floating[Any]]:
        """
        Posterior predictive draws, shape (draws, n).

        Without a seed, draws are derived from the fit seed, so repeated
        calls return the same array.
        """
        mu = self.linear_predictor(data)
        if seed is None:
            seed = derive_seed(self.info['seed'], 1)
        rng = as_generator(seed)
        return mu + self.sigma_draws[:, None] * rng.standard_normal(mu.shape)

    def log_likelihood(self, data: Any) -> NDArray[np.floating[Any]]:
        """
        Pointwise log-likelihood of the observed response under each draw,
        shape (draws, n).
        """
        from scipy import stats
        ds = Dataset.coerce(data)
        mu = self.linear_predictor(ds)
        y = self.frame.response(ds)
        return stats.norm.logpdf(y[None, :], loc=mu, scale=self.sigma_draws[:, None])

    # --- Accessors ---

    @property
    def formula(self) -> FormulaSpec:
        return self.frame.formula

    @property
    def frame(self) -> ModelFrame:
        return self._design.frame

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._design.column_names

    @property
    def n_observations(self) -> int:
        return self._design.n

    @property
    def n_parameters(self) -> int:
        return self._design.p

    @property
    def draws(self) -> NDArray[np.floating[Any]]:
        """Coefficient draws, shape (draws, p)."""
        return self._result.params.beta

    @property
    def sigma_draws(self) -> NDArray[np.floating[Any]]:
        return self._result.params.sigma

    @property
    def n_draws(self) -> int:
        return self.draws.shape[0]

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        """Posterior medians."""
        return np.median(self.draws, axis=0)

    @property
    def mad_sd(self) -> NDArray[np.floating[Any]]:
        """Median absolute deviation of each coefficient, scaled to an SD."""
        dev = np.abs(self.draws - self.coefficients)
        return 1.4826 * np.median(dev, axis=0)

    @property
    def sigma(self) -> float:
        return float(np.median(self.sigma_draws))

    @property
    def rhat(self) -> dict[str, float]:
        return self._result.info['rhat']

    def posterior_interval(self, prob: float = 0.9) -> NDArray[np.floating[Any]]:
        """Central credible intervals for each coefficient, shape (p, 2)."""
        prob = _check_prob(prob)
        tail = (1.0 - prob) / 2.0
        return np.quantile(self.draws, [tail, 1.0 - tail], axis=0).T

    def predictive_interval(
        self, data: Any, prob: float = 0.9, seed: SeedLike = None,
    ) -> NDArray[np.floating[Any]]:
        """Central posterior predictive intervals per row, shape (n, 2)."""
        prob = _check_prob(prob)
        tail = (1.0 - prob) / 2.0
        draws = self.predict_distribution(data, seed=seed)
        return np.quantile(draws, [tail, 1.0 - tail], axis=0).T

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Median / MAD_SD table in the style of a sampled regression print."""
        width = max(12, max(len(name) for name in self.column_names))
        lines = [
            "Bayesian Linear Regression",
            "=" * (width + 32),
            f"Formula: {self.formula.label}",
            f"Observations: {self._design.n}",
            f"Draws: {self.n_draws} ({self.info['chains']} chains)",
            "",
            f"{'':<{width}} {'Median':>12} {'MAD_SD':>10} {'Rhat':>7}",
            "-" * (width + 32),
        ]
        for name, med, mad in zip(self.column_names, self.coefficients, self.mad_sd):
            lines.append(f"{name:<{width}} {med:12.6f} {mad:10.6f} {self.rhat[name]:7.3f}")
        sigma_mad = 1.4826 * float(np.median(np.abs(self.sigma_draws - self.sigma)))
        lines.append(
            f"{'sigma':<{width}} {self.sigma:12.6f} {sigma_mad:10.6f} {self.rhat['sigma']:7.3f}"
        )
        lines.append("-" * (width + 32))
        lines.append(f"Backend: {self.backend_name}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BayesianLinearModel({self.formula.label!r}, n={self._design.n}, "
            f"draws={self.n_draws})"
        )
