"""
Reference datasets for examples and tests.

Modified Anscombe quartet (first set): eleven points with a clean linear
trend, and the same points plus one gross outlier at (13, -6). Together
they show how RMSE and MAE react differently to a single large residual.
"""

import numpy as np

from pymodelselect.core.dataset import Dataset

_ANSCOMBE_1 = np.array([
    [10.0, 8.04],
    [8.0, 6.95],
    [13.0, 7.64],
    [9.0, 8.81],
    [11.0, 8.33],
    [14.0, 9.90],
    [6.0, 7.24],
    [4.0, 4.25],
    [12.0, 10.84],
    [7.0, 4.82],
    [5.0, 5.68],
])

_OUTLIER = np.array([[13.0, -6.0]])


def anscombe_1() -> Dataset:
    """Anscombe's first data set: fields 'x' and 'y', 11 rows."""
    return Dataset.from_columns(x=_ANSCOMBE_1[:, 0], y=_ANSCOMBE_1[:, 1])


def anscombe_1_outlier() -> Dataset:
    """anscombe_1 with the extra row (x=13, y=-6), 12 rows."""
    data = np.vstack([_ANSCOMBE_1, _OUTLIER])
    return Dataset.from_columns(x=data[:, 0], y=data[:, 1])
