"""
Newton-form evaluation of the interpolated exponential on a block of vectors.

Given nodes x_0, x_1, ... and divided differences d_k = exp[x_0, ..., x_k],
one substep approximates exp(step * A) v by

    p_m(step * A) v = sum_k d_k w_k,    w_{k+1} = (step * A - x_k) w_k,  w_0 = v.

The terms decay superlinearly once k exceeds the scaled spectral radius.
The error is estimated by the norm of the last two terms and the
iteration stops as soon as

    errest <= max(abstol, reltol * ||p||)

in the requested norm. Each w_k costs one product with A.

Two evaluators share this contract:
- newton: any nodes, arithmetic in the dtype of A and v
- newton_conjugate: nodes 0, (a + ib, a - ib), ... in conjugate pairs,
  evaluated with real coefficients so real data stays real
"""

import warnings
import numpy as np
from numpy.typing import NDArray
from typing import Tuple, Union

from leja_expm.core.errors import NonConvergenceWarning
from leja_expm.core.parameters import vector_norm


def _converged(errest: float, y: NDArray, abstol: float, reltol: float, norm_kind) -> bool:
    return errest <= max(abstol, reltol * vector_norm(y, norm_kind))


def _warn_not_converged(errest: float, n_points: int):
    warnings.warn(
        f"Newton interpolation did not converge with {n_points} points "
        f"(error estimate {errest:.3e})",
        NonConvergenceWarning,
        stacklevel=3,
    )


def newton(
    step: float,
    A,
    v: NDArray,
    xi: NDArray,
    dd: NDArray,
    abstol: float,
    reltol: float,
    norm_kind: Union[int, float] = np.inf
) -> Tuple[NDArray, float, int]:
    """
    Interpolate exp(step * A) v in Newton form at arbitrary nodes.

    Args:
        step: Substep length.
        A: Square operator supporting A @ x.
        v: Vector or block of vectors.
        xi: Interpolation nodes (already scaled to the substep).
        dd: Divided differences of exp at xi.
        abstol: Absolute tolerance for this substep.
        reltol: Relative tolerance for this substep.
        norm_kind: Norm used for the error estimate.

    Returns:
        Tuple of (approximation, error estimate, matrix-vector products).
    """
    y = dd[0] * v
    if len(dd) == 1:
        return y, 0.0, 0

    w = v
    last_norm = vector_norm(y, norm_kind)
    errest = np.inf
    for k in range(1, len(dd)):
        w = step * (A @ w) - xi[k - 1] * w
        term = dd[k] * w
        y = y + term

        term_norm = vector_norm(term, norm_kind)
        errest = term_norm + last_norm
        last_norm = term_norm

        if not np.isfinite(errest):
            _warn_not_converged(errest, k + 1)
            return y, errest, k
        if _converged(errest, y, abstol, reltol, norm_kind):
            return y, errest, k

    _warn_not_converged(errest, len(dd))
    return y, errest, len(dd) - 1


def newton_conjugate(
    step: float,
    A,
    v: NDArray,
    xi: NDArray,
    dd: NDArray,
    abstol: float,
    reltol: float,
    norm_kind: Union[int, float] = np.inf
) -> Tuple[NDArray, float, int]:
    """
    Interpolate exp(step * A) v at a real node followed by conjugate pairs.

    With x_{2k-1} = a + ib and x_{2k} = a - ib the Newton basis satisfies

        w_{2k}   = q - ib r,            q = (step * A - a) r,  r = w_{2k-1}
        w_{2k+1} = (step * A - a) q + b^2 r

    so w_{2k-1} has real coefficients. Summing one complete pair gives

        Re(d_{2k-1}) r + b Im(d_{2k}) r + Re(d_{2k}) q,

    i.e. the interpolant is accumulated with real coefficients only and
    the tolerance is checked once per pair (two products with A).

    Args:
        step: Substep length.
        A: Square operator supporting A @ x.
        v: Vector or block of vectors.
        xi: Nodes (x_0 real, then conjugate pairs), scaled to the substep.
        dd: Divided differences of exp at xi.
        abstol: Absolute tolerance for this substep.
        reltol: Relative tolerance for this substep.
        norm_kind: Norm used for the error estimate.

    Returns:
        Tuple of (approximation, error estimate, matrix-vector products).
    """
    y = dd[0].real * v
    n_pairs = (len(dd) - 1) // 2
    if n_pairs == 0:
        return y, 0.0, 0

    r = step * (A @ v) - xi[0].real * v
    matvecs = 1
    last_norm = vector_norm(y, norm_kind)
    errest = np.inf
    for k in range(1, n_pairs + 1):
        a, b = xi[2 * k - 1].real, xi[2 * k - 1].imag
        q = step * (A @ r) - a * r
        matvecs += 1

        term = (dd[2 * k - 1].real + b * dd[2 * k].imag) * r + dd[2 * k].real * q
        y = y + term

        term_norm = vector_norm(term, norm_kind)
        errest = term_norm + last_norm
        last_norm = term_norm

        if not np.isfinite(errest):
            _warn_not_converged(errest, 2 * k + 1)
            return y, errest, matvecs
        if _converged(errest, y, abstol, reltol, norm_kind):
            return y, errest, matvecs

        if k < n_pairs:
            r = step * (A @ q) - a * q + b**2 * r
            matvecs += 1

    _warn_not_converged(errest, 2 * n_pairs + 1)
    return y, errest, matvecs
