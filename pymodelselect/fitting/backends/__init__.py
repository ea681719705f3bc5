"""
Fitting backends.

    cpu_qr    -- least squares, LAPACK QR (reference)
    gpu_qr    -- least squares, PyTorch QR (optional, needs torch)
    cpu_gibbs -- Bayesian linear regression, Gibbs sampler
"""

from pymodelselect.fitting.backends.cpu import CPUQRBackend
from pymodelselect.fitting.backends.gibbs import CPUGibbsBackend, split_rhat

__all__ = [
    "CPUQRBackend",
    "CPUGibbsBackend",
    "split_rhat",
]
