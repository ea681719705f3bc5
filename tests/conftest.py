"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pymodelselect.core.dataset import Dataset
from pymodelselect.core.datasets import anscombe_1, anscombe_1_outlier
from pymodelselect.fitting.design import SamplerConfig


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def anscombe():
    return anscombe_1()


@pytest.fixture
def anscombe_outlier():
    return anscombe_1_outlier()


@pytest.fixture
def linear_data(rng):
    """y = 1 + 2x + noise, 60 rows."""
    n = 60
    x = rng.uniform(0.0, 10.0, n)
    y = 1.0 + 2.0 * x + rng.standard_normal(n) * 0.5
    return Dataset.from_columns(x=x, y=y)


@pytest.fixture
def curved_data(rng):
    """y = 1 + 0.5x + 0.8x^2 + noise, 80 rows; a quadratic term matters."""
    n = 80
    x = rng.uniform(-3.0, 3.0, n)
    y = 1.0 + 0.5 * x + 0.8 * x ** 2 + rng.standard_normal(n) * 0.3
    return Dataset.from_columns(x=x, y=y)


@pytest.fixture
def diamonds_like(rng):
    """
    Small table shaped like the diamonds data: log(price) linear in
    log(carat) with a categorical clarity shift.
    """
    n = 120
    clarity_levels = ['I1', 'SI2', 'SI1', 'VS2', 'VS1']
    carat = rng.uniform(0.2, 2.5, n)
    clarity = rng.choice(clarity_levels, size=n)
    shift = {level: 0.15 * i for i, level in enumerate(clarity_levels)}
    log_price = (
        8.4 + 1.7 * np.log(carat)
        + np.array([shift[c] for c in clarity])
        + rng.standard_normal(n) * 0.15
    )
    return Dataset.from_columns(
        carat=carat,
        clarity=clarity,
        price=np.exp(log_price),
        levels={'clarity': clarity_levels},
    )


@pytest.fixture
def fast_sampler():
    """Short Gibbs runs for tests."""
    return SamplerConfig(chains=2, iterations=400, warmup=200)


@pytest.fixture
def failing_transform():
    """A registered transform whose function raises ValueError on any input."""
    from pymodelselect.formula.transforms import TRANSFORMS, register_transform

    def reject(x):
        raise ValueError("input rejected")

    name = 'reject_all'
    register_transform(name, reject)
    yield name
    TRANSFORMS.pop(name, None)
