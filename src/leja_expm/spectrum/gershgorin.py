"""
Spectral bounds from Gershgorin discs.

By Bendixson's theorem the real parts of the eigenvalues of A lie in the
numerical range of the Hermitian part H = (A + A^H)/2 and the imaginary
parts in that of K = (A - A^H)/(2i). Gershgorin's theorem applied to the
Hermitian matrices H and K then gives the box

    [SR, LR] x [SI, LI]

containing the spectrum. Only row sums are needed, so the estimate costs
no matrix-vector products.
"""

import numpy as np
from dataclasses import dataclass
from scipy import sparse

from leja_expm.core.errors import DimensionMismatch


@dataclass(frozen=True)
class SpectralEstimate:
    """
    Box containing the eigenvalues of an operator.

    Attributes:
        SR: Smallest real part.
        LR: Largest real part.
        LI: Largest imaginary part.
        SI: Smallest imaginary part.
    """
    SR: float
    LR: float
    LI: float
    SI: float

    @property
    def extent(self) -> float:
        """|SR| + |LR| + |LI| + |SI|, zero only for the zero spectrum."""
        return abs(self.SR) + abs(self.LR) + abs(self.LI) + abs(self.SI)

    @property
    def real_center(self) -> float:
        return (self.SR + self.LR) / 2

    @property
    def real_half_width(self) -> float:
        return (self.LR - self.SR) / 2

    @property
    def imag_half_width(self) -> float:
        return (self.LI - self.SI) / 2


def _gershgorin_interval(M) -> tuple:
    """
    Gershgorin interval of a Hermitian matrix.

    Args:
        M: Dense or sparse Hermitian matrix.

    Returns:
        (lower, upper) bounds of its eigenvalues.
    """
    if sparse.issparse(M):
        diag = M.diagonal()
        row_sums = np.asarray(abs(M).sum(axis=1)).ravel()
    else:
        diag = np.diag(M)
        row_sums = np.abs(M).sum(axis=1)
    radius = np.maximum(row_sums - np.abs(diag), 0.0)
    center = diag.real
    return float(np.min(center - radius)), float(np.max(center + radius))


def estimate_spectrum(A) -> SpectralEstimate:
    """
    Estimate the spectrum of A by Gershgorin discs of its Hermitian parts.

    Args:
        A: Square dense array or scipy.sparse matrix.

    Returns:
        SpectralEstimate bounding the eigenvalues of A.
    """
    if not sparse.issparse(A):
        A = np.asarray(A)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"operator must be square, got shape {A.shape}")
    if A.shape[0] == 0:
        return SpectralEstimate(0.0, 0.0, 0.0, 0.0)

    A_adj = A.conj().T
    SR, LR = _gershgorin_interval((A + A_adj) / 2)
    if np.iscomplexobj(A) or not _is_symmetric(A):
        SI, LI = _gershgorin_interval((A - A_adj) / 2j)
    else:
        SI, LI = 0.0, 0.0
    return SpectralEstimate(SR=SR, LR=LR, LI=LI, SI=SI)


def _is_symmetric(A) -> bool:
    if sparse.issparse(A):
        return (A != A.T).nnz == 0
    return bool(np.array_equal(A, A.T))
