"""
Divided differences of the exponential.

For nodes z_0, ..., z_{n-1} the divided differences exp[z_0, ..., z_k]
form the first column of exp(Z), where Z is the lower bidiagonal Opitz
matrix with the nodes on the diagonal and ones on the subdiagonal.

exp(Z) is evaluated by a Taylor series with scaling and squaring. Before
that the diagonal is shifted by the smallest real part of the nodes; for
real nodes every Taylor term and every squaring then only adds
non-negative numbers, so even the tiny high-order differences keep full
relative accuracy (plain recursion loses it through cancellation).

Only the diagonal is scaled by 2^-s. With D = diag(2^(s k)),

    exp(2^-s Z) = D^-1 exp(2^-s diag(z) + N) D,

so the Taylor series runs on a matrix whose subdiagonal stays one, and
every squaring is followed by the diagonal similarity entry (k, l) ->
2^-(k-l) entry (k, l). The subdiagonal is never scaled, so the high-order
entries do not underflow for wide node sets.
"""

import numpy as np
from numpy.typing import NDArray, ArrayLike

from leja_expm.core.constants import TAYLOR_EXTRA_TERMS


def divided_differences(
    points: ArrayLike,
    extra_terms: int = TAYLOR_EXTRA_TERMS
) -> NDArray:
    """
    Divided differences of exp at the given nodes.

    Args:
        points: Interpolation nodes (real or complex).
        extra_terms: Taylor terms taken beyond the matrix size.

    Returns:
        Array d with d[k] = exp[z_0, ..., z_k].
    """
    z = np.asarray(points)
    if z.ndim != 1 or z.size == 0:
        raise ValueError(f"points must be a non-empty 1-D array, got shape {z.shape}")
    n = z.size
    dtype = complex if np.iscomplexobj(z) else float

    shift = np.min(z.real)
    diag = (z - shift).astype(dtype)

    radius = np.max(np.abs(diag))
    squarings = int(np.ceil(np.log2(radius))) if radius > 1 else 0
    diag = diag * 2.0**-squarings

    F = np.eye(n, dtype=dtype)
    term = np.eye(n, dtype=dtype)
    for k in range(1, n + extra_terms):
        term = _times_opitz(term, diag) / k
        F += term

    if squarings:
        offsets = np.subtract.outer(np.arange(n), np.arange(n))
        rebalance = 2.0 ** -np.maximum(offsets, 0)
        for _ in range(squarings):
            F = (F @ F) * rebalance

    return np.exp(shift) * F[:, 0]


def _times_opitz(X: NDArray, diag: NDArray) -> NDArray:
    """Right-multiply X by the bidiagonal matrix diag(diag) + (subdiagonal ones)."""
    Y = X * diag[np.newaxis, :]
    Y[:, :-1] += X[:, 1:]
    return Y
