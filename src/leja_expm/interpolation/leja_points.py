"""
Leja point sequences on the reference segments [-2, 2] and i[-2, 2].

A Leja sequence is built greedily: each new point maximises the product
of distances to the points already chosen. The reference segment has
logarithmic capacity 1, so the nodal polynomial of the first m points
grows subexponentially on it, which keeps Newton interpolation stable.

The sequences are computed on a fine discrete grid of candidates and
memoised; the returned arrays are read-only.
"""

import numpy as np
from numpy.typing import NDArray
from functools import lru_cache

from leja_expm.core.constants import LEJA_GRID_SIZE


def leja_points(n: int, grid_size: int = LEJA_GRID_SIZE) -> NDArray[np.floating]:
    """
    First n real Leja points on [-2, 2], starting at 2.

    Args:
        n: Number of points.
        grid_size: Candidate points on the segment.

    Returns:
        Read-only array (2, -2, 0, ...).
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    if n > grid_size:
        raise ValueError(f"n ({n}) exceeds the candidate grid ({grid_size})")
    return _real_leja(int(n), int(grid_size))


def conjugate_leja_points(n: int, grid_size: int = LEJA_GRID_SIZE) -> NDArray[np.complexfloating]:
    """
    First n conjugate Leja points on i[-2, 2].

    The sequence starts at 0 and continues with conjugate pairs
    (i t_k, -i t_k), each magnitude t_k chosen greedily. Interpolating at
    a prefix of odd length gives a polynomial with real coefficients.

    Args:
        n: Number of points.
        grid_size: Candidate points on the segment.

    Returns:
        Read-only complex array (0, 2i, -2i, ...).
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    if n > grid_size:
        raise ValueError(f"n ({n}) exceeds the candidate grid ({grid_size})")
    return _conjugate_leja(int(n), int(grid_size))


@lru_cache(maxsize=None)
def _real_leja(n: int, grid_size: int) -> NDArray[np.floating]:
    candidates = np.linspace(-2.0, 2.0, grid_size)
    points = np.empty(n)
    points[0] = 2.0

    with np.errstate(divide='ignore'):
        log_prod = np.log(np.abs(candidates - points[0]))
        for k in range(1, n):
            points[k] = candidates[np.argmax(log_prod)]
            log_prod += np.log(np.abs(candidates - points[k]))

    points.setflags(write=False)
    return points


@lru_cache(maxsize=None)
def _conjugate_leja(n: int, grid_size: int) -> NDArray[np.complexfloating]:
    # Magnitudes t > 0; the point 0 is taken first
    t = np.linspace(0.0, 2.0, grid_size // 2 + 1)[1:]
    z = 1j * t
    points = np.zeros(n, dtype=complex)

    with np.errstate(divide='ignore'):
        log_prod = np.log(np.abs(z))
        k = 1
        while k < n:
            idx = np.argmax(log_prod)
            points[k] = z[idx]
            log_prod += np.log(np.abs(z - points[k]))
            if k + 1 < n:
                points[k + 1] = -z[idx]
            log_prod += np.log(np.abs(z + z[idx]))
            k += 2

    points.setflags(write=False)
    return points
