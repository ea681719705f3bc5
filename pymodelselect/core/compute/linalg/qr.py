"""
QR decomposition implementations.

Provides a consistent QR least-squares interface across CPU (LAPACK via
NumPy/SciPy) and GPU (PyTorch). Rank is decided from the diagonal of R with
the same tolerance on both paths, so a rank-deficient design fails the same
way regardless of where it is solved.
"""

from dataclasses import dataclass
from typing import Literal, Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pymodelselect.core.exceptions import SingularDesignError

if TYPE_CHECKING:
    import torch


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x k where k = min(n, p) for reduced mode)
        R: Upper triangular matrix (k x p)
        rank: Numerical rank determined from R diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int


# Relative tolerance on |diag(R)|, the default of R's lm.fit
RANK_TOL = 1e-7


def _rank_from_diag(diag_R: NDArray, shape: tuple[int, int], eps: float) -> int:
    if len(diag_R) > 0 and diag_R.max() > 0:
        tol = max(RANK_TOL, max(shape) * eps) * diag_R.max()
        return int(np.sum(diag_R > tol))
    return 0


def qr_cpu(
    X: NDArray[np.floating[Any]],
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRResult:
    """
    QR decomposition using LAPACK (via NumPy).

    Args:
        X: Matrix to decompose (n x p)
        mode: 'reduced' for economy QR, 'complete' for full QR

    Returns:
        QRResult with Q, R, and numerical rank
    """
    Q, R = np.linalg.qr(X, mode=mode)
    diag_R = np.abs(np.diag(R))
    rank = _rank_from_diag(diag_R, X.shape, float(np.finfo(X.dtype).eps))
    return QRResult(Q=Q, R=R, rank=rank)


def _raise_singular(rank: int, p: int, n: int) -> None:
    raise SingularDesignError(
        f"Design matrix is rank-deficient: rank={rank}, expected={p} "
        f"({n} rows). This indicates perfect multicollinearity or too few rows.",
        matrix_name='X',
        rank=rank,
        expected_rank=p,
    )


def qr_solve_cpu(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], QRResult]:
    """
    Solve least squares via QR decomposition (CPU).

    Solves min_β ||y - Xβ||² as β = R⁻¹ Q'y.

    Args:
        X: Design matrix (n x p)
        y: Response vector (n,)

    Returns:
        (β, QRResult)

    Raises:
        SingularDesignError: If X has fewer rows than columns or is
            rank-deficient
    """
    from scipy.linalg import solve_triangular

    n, p = X.shape
    if n < p:
        _raise_singular(min(n, p), p, n)

    qr_result = qr_cpu(X, mode='reduced')
    if qr_result.rank < p:
        _raise_singular(qr_result.rank, p, n)

    Qty = qr_result.Q.T @ y
    beta = solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)
    return beta, qr_result


def qr_solve_gpu(
    X: 'torch.Tensor',
    y: 'torch.Tensor',
) -> tuple[NDArray[np.floating[Any]], int]:
    """
    Solve least squares via QR decomposition (GPU).

    Args:
        X: Design matrix tensor (n x p), already on the target device
        y: Response vector tensor (n,), same device

    Returns:
        (β as a NumPy array, numerical rank)

    Raises:
        SingularDesignError: If X is rank-deficient
    """
    import torch

    n, p = X.shape
    if n < p:
        _raise_singular(min(n, p), p, n)

    Q, R = torch.linalg.qr(X, mode='reduced')
    diag_R = torch.abs(torch.diagonal(R)).cpu().numpy()
    rank = _rank_from_diag(diag_R, (n, p), float(torch.finfo(X.dtype).eps))
    if rank < p:
        _raise_singular(rank, p, n)

    Qty = Q.T @ y
    beta = torch.linalg.solve_triangular(R, Qty.unsqueeze(1), upper=True)
    return beta.squeeze(1).cpu().numpy().astype(np.float64), rank
