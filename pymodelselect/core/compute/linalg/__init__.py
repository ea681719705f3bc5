"""
Linear algebra kernels for PyModelSelect.

All functions follow these conventions:
    - CPU functions use NumPy/SciPy (LAPACK under the hood)
    - GPU functions use PyTorch and return NumPy arrays (data moved to CPU)
    - Rank deficiency raises SingularDesignError immediately
"""

from pymodelselect.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
    qr_solve_gpu,
)

__all__ = [
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
    "qr_solve_gpu",
]
