"""
Action of the matrix exponential, exp(h A) v, by Leja interpolation.

The driver validates its inputs, short-circuits degenerate requests
(zero step, zero operator, zero vector), obtains interpolation
parameters and then folds the Newton evaluator over nsteps substeps:

    v_{j+1} = eta * p(h/nsteps * (A - mu I)) v_j,   eta = exp(mu h / nsteps)

Parameters come either from a fresh spectral estimate and selection, or
from a previous call with the same operator (reuse mode). Reuse skips all
norm estimation, which pays off when many vectors or many steps of the
same length are propagated.
"""

import numpy as np
from numpy.typing import NDArray
from dataclasses import dataclass
from typing import Tuple, Optional, Any, List
from scipy import sparse

from leja_expm.core.errors import DimensionMismatch
from leja_expm.core.parameters import (
    ActionOptions,
    ToleranceSpec,
    normalize_tolerance,
    resolve_hump_power,
    resolve_max_points,
    step_length,
    vector_norm,
)
from leja_expm.spectrum.gershgorin import SpectralEstimate, estimate_spectrum
from leja_expm.interpolation.selection import (
    InterpolationParams,
    select_interp_params,
    shift_operator,
)


@dataclass
class ActionResult:
    """
    Result of expm_action.

    Iterating yields (value, errest, info, c, m, extreigs, mu, gamma2), so
    the result unpacks like a plain tuple.

    Attributes:
        value: Approximation of exp(h A) v, same shape as v.
        errest: Error estimate of every substep (before rescaling by eta).
        info: Matrix-vector products of every substep.
        c: Products spent on norm estimation (0 in reuse mode).
        m: Selected interpolation degree.
        extreigs: Spectral estimate used (None for degenerate input).
        mu: Shift applied to the operator.
        gamma2: Radius parameter of the interpolation points.
        params: InterpolationParams, reusable for the same operator.
    """
    value: NDArray
    errest: NDArray
    info: NDArray
    c: int = 0
    m: int = 0
    extreigs: Optional[SpectralEstimate] = None
    mu: float = 0.0
    gamma2: float = 0.0
    params: Optional[InterpolationParams] = None

    def __iter__(self):
        return iter((
            self.value, self.errest, self.info, self.c,
            self.m, self.extreigs, self.mu, self.gamma2,
        ))

    @property
    def total_matvecs(self) -> int:
        """Products performed by the Newton evaluators."""
        return int(np.sum(self.info))

    @property
    def nsteps(self) -> int:
        """Number of substeps performed."""
        return len(self.info)


# =============================================================================
# Input normalisation
# =============================================================================

def _as_operator(A):
    """Keep sparse operators sparse, turn everything else into an ndarray."""
    if sparse.issparse(A):
        return A
    return np.asarray(A)


def _as_vector(v) -> NDArray:
    """Copy v, promoting integer and boolean data to float."""
    v = np.array(v, copy=True)
    if not np.issubdtype(v.dtype, np.inexact):
        v = v.astype(float)
    return v


def _check_dimensions(A, v: NDArray):
    if len(A.shape) != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"operator must be square, got shape {A.shape}")
    if v.ndim not in (1, 2):
        raise DimensionMismatch(f"v must be a vector or a block of vectors, got shape {v.shape}")
    if v.shape[0] != A.shape[1]:
        raise DimensionMismatch(
            f"v has {v.shape[0]} rows but the operator has {A.shape[1]} columns"
        )


def _is_degenerate(h: float, extreigs: SpectralEstimate, v: NDArray, tol: ToleranceSpec) -> bool:
    """True when exp(h A) v = v trivially or v is zero."""
    if h * extreigs.extent == 0:
        return True
    return vector_norm(v, tol.norm_kind) == 0


def _degenerate_result(v: NDArray) -> ActionResult:
    return ActionResult(
        value=v,
        errest=np.zeros(1),
        info=np.zeros(1, dtype=int),
    )


# =============================================================================
# Parameter resolution
# =============================================================================

def _resolve_fresh(
    h: float,
    A,
    extreigs: SpectralEstimate,
    tol: ToleranceSpec,
    options: ActionOptions
) -> Tuple[InterpolationParams, Any, int]:
    """Select new parameters; returns (params, shifted operator, c)."""
    params, A_shifted = select_interp_params(
        h, A, extreigs, tol,
        max_points=resolve_max_points(options.max_points),
        p=resolve_hump_power(options.p),
        shift=True,
        verbose=options.verbose,
    )
    return params, A_shifted, params.c


def _resolve_reuse(A, params: InterpolationParams) -> Tuple[InterpolationParams, Any, int]:
    """Reuse given parameters; returns (params, shifted operator, 0)."""
    return params, shift_operator(A, params.mu), 0


# =============================================================================
# Driver
# =============================================================================

def _run_substeps(
    h: float,
    A_shifted,
    v: NDArray,
    params: InterpolationParams,
    tol: ToleranceSpec,
    verbose: bool = False
) -> Tuple[NDArray, NDArray, NDArray]:
    """
    Fold the Newton evaluator over the substeps.

    Returns:
        Tuple of (value, per-substep error estimates, per-substep products).
    """
    nsteps = params.nsteps
    step = h / nsteps
    eta = np.exp(params.mu * step)
    substep_tol = tol.per_substep(nsteps)

    value = v
    records: List[Tuple[float, int]] = []
    for j in range(nsteps):
        y, err, count = params.newton(
            step, A_shifted, value,
            substep_tol.absolute, substep_tol.relative, tol.norm_kind,
        )
        records.append((err, count))
        value = y * eta
        if verbose:
            print(f"  substep {j + 1}/{nsteps}: errest={err:.3e}, products={count}")

    errest = np.array([err for err, _ in records], dtype=float)
    info = np.array([count for _, count in records], dtype=int)
    return value, errest, info


def expm_action(
    h: Any,
    A,
    v,
    tol: Any = None,
    p: Optional[int] = None,
    params: Optional[InterpolationParams] = None,
    extreigs: Optional[SpectralEstimate] = None,
    options: Optional[ActionOptions] = None
) -> ActionResult:
    """
    Compute exp(h A) v by Leja interpolation.

    Args:
        h: Step length; for a sequence the maximum is used.
        A: Square dense array or scipy.sparse matrix.
        v: Vector of length n or n x k block of vectors.
        tol: Tolerance (absolute, relative, norm kind, operator norm kind);
            missing fields are completed by normalize_tolerance.
        p: Hump reduction power for the norm estimate.
        params: InterpolationParams from an earlier call with the same A.
        extreigs: SpectralEstimate of A, estimated when not given.
        options: ActionOptions; explicit keyword arguments take precedence.

    Returns:
        ActionResult (unpacks as value, errest, info, c, m, extreigs, mu, gamma2).

    Raises:
        DimensionMismatch: If A is not square or v does not match A.
        ValueError: For invalid step, tolerance or option values.
    """
    options = (options or ActionOptions()).merged(
        tol=tol, p=p, params=params, extreigs=extreigs,
    )
    tol = normalize_tolerance(options.tol)

    A = _as_operator(A)
    v = _as_vector(v)
    _check_dimensions(A, v)
    h = step_length(h)

    if options.params is not None:
        params, A_shifted, c = _resolve_reuse(A, options.params)
        spectrum = options.extreigs
    else:
        spectrum = options.extreigs if options.extreigs is not None else estimate_spectrum(A)
        if _is_degenerate(h, spectrum, v, tol):
            if options.verbose:
                print("=== Leja Exponential: degenerate input, returning v ===")
            return _degenerate_result(v)
        params, A_shifted, c = _resolve_fresh(h, A, spectrum, tol, options)

    if options.verbose:
        print("=== Leja Exponential ===")
        print(f"  mode: {'reuse' if options.params is not None else 'fresh'}")
        print(f"  size: {A.shape[0]}, vectors: {1 if v.ndim == 1 else v.shape[1]}")
        print(f"  h: {h:.6e}, substeps: {params.nsteps}, degree: {params.m}")

    value, errest, info = _run_substeps(h, A_shifted, v, params, tol, options.verbose)

    if options.verbose:
        print(f"  total products: {int(np.sum(info)) + c} (norm estimation: {c})")

    return ActionResult(
        value=value,
        errest=errest,
        info=info,
        c=c,
        m=params.m,
        extreigs=spectrum,
        mu=params.mu,
        gamma2=params.gamma2,
        params=params,
    )
