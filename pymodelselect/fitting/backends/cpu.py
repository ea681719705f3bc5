"""
CPU reference backend for least-squares fitting.

Uses QR decomposition via LAPACK (through NumPy/SciPy). Rank-deficient
designs are rejected rather than pivoted around, so a candidate with
aliased columns fails loudly with SingularDesignError.
"""

from typing import Any

import numpy as np

from pymodelselect.core.result import Result
from pymodelselect.core.compute.timing import Timer
from pymodelselect.core.compute.linalg.qr import qr_solve_cpu
from pymodelselect.fitting._common import LinearParams
from pymodelselect.formula.design import FormulaDesign


class CPUQRBackend:
    """
    CPU backend using QR decomposition.

    Implements the Backend protocol for FormulaDesign -> LinearParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: FormulaDesign) -> Result[LinearParams]:
        """
        Solve OLS via QR decomposition.

        Algorithm:
            1. Compute QR decomposition: X = QR
            2. Solve: β = R⁻¹ Q'y
            3. Compute residuals, fitted values, and diagnostics

        Raises:
            SingularDesignError: If X is rank-deficient
        """
        timer = Timer()
        timer.start()

        X = design.X
        y = design.y
        n = design.n

        with timer.section('qr_solve'):
            coefficients, qr_result = qr_solve_cpu(X, y)

        with timer.section('residuals'):
            fitted_values = X @ coefficients
            residuals = y - fitted_values

        with timer.section('statistics'):
            rss = float(residuals @ residuals)
            tss = float(np.sum((y - np.mean(y)) ** 2))

        timer.stop()

        params = LinearParams(
            coefficients=coefficients,
            residuals=residuals,
            fitted_values=fitted_values,
            rss=rss,
            tss=tss,
            rank=qr_result.rank,
            df_residual=n - qr_result.rank,
        )

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': qr_result.rank,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
