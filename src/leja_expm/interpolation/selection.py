"""
Selection of the interpolation parameters for exp(h A) v.

The operator is shifted by the centre mu of its real spectral interval
and the step h is split into nsteps equal substeps. On each substep
exp((h/nsteps)(A - mu I)) is interpolated at Leja points scaled to the
segment [-2 gamma2, 2 gamma2] (or i[-2 gamma2, 2 gamma2] for spectra that
are wider in the imaginary direction).

How far a degree-m interpolant can be stretched is tabulated once per
tolerance: theta[m] is the largest radius 2 gamma for which the a-priori
error |d_m(gamma)| gamma^m Omega_m stays below the tolerance, with Omega_m
the maximum of the unit nodal polynomial over the region that must be
covered (the segment itself for flat spectra, otherwise the disc).

The radius is measured with a hump-reduced norm of the shifted operator,

    alpha = min(||A||, min_{2<=k<=p} max(||A^k||^{1/k}, ||A^{k+1}||^{1/(k+1)})),

which is never below the spectral radius but can be far below ||A|| for
non-normal operators. Degree and substep count minimise the total
number of products m * ceil(h alpha / theta[m]).
"""

import numpy as np
from numpy.typing import NDArray
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple, Optional, Union, Any
from scipy import sparse
from scipy.sparse.linalg import LinearOperator, onenormest

from leja_expm.core.constants import (
    UNIT_ROUNDOFF,
    THETA_GRID_SIZE,
    THETA_GAMMA_MIN,
    THETA_GAMMA_MAX,
    REGION_SAMPLES,
)
from leja_expm.core.parameters import (
    ToleranceSpec,
    normalize_tolerance,
    resolve_hump_power,
    resolve_max_points,
    step_length,
)
from leja_expm.spectrum.gershgorin import SpectralEstimate
from leja_expm.interpolation.leja_points import leja_points, conjugate_leja_points
from leja_expm.interpolation.divided_differences import divided_differences
from leja_expm.interpolation.newton import newton, newton_conjugate


KINDS = ("real", "imaginary")
REGIONS = ("segment", "disk")


@dataclass(frozen=True, eq=False)
class InterpolationParams:
    """
    Interpolation parameters for repeated evaluation with one operator.

    Attributes:
        m: Selected interpolation degree (0 for a zero shifted operator).
        mu: Shift subtracted from the operator.
        xi: Interpolation nodes scaled to one substep (read-only).
        dd: Divided differences of exp at xi (read-only).
        gamma2: Nodes lie in [-2 gamma2, 2 gamma2] (times i for 'imaginary').
        nsteps: Number of substeps.
        kind: 'real' or 'imaginary' node set.
        region: 'segment' or 'disk' used for the a-priori bound.
        alpha: Hump-reduced norm estimate of the shifted operator.
        c: Matrix-vector products spent on the norm estimates.
        p: Hump reduction power used for alpha.
        operator_norm_kind: Operator norm alpha was measured in.
    """
    m: int
    mu: float
    xi: NDArray
    dd: NDArray
    gamma2: float
    nsteps: int
    kind: str = "real"
    region: str = "disk"
    alpha: float = 0.0
    c: int = 0
    p: int = 5
    operator_norm_kind: Union[int, float] = np.inf

    def __post_init__(self):
        if self.nsteps < 1:
            raise ValueError(f"nsteps must be at least 1, got {self.nsteps}")
        if self.kind not in KINDS:
            raise ValueError(f"kind must be one of {KINDS}, got {self.kind!r}")
        if len(self.xi) != len(self.dd):
            raise ValueError(
                f"xi and dd must have equal length, got {len(self.xi)} and {len(self.dd)}"
            )
        for name in ("xi", "dd"):
            arr = np.array(getattr(self, name))
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    def newton(
        self,
        step: float,
        A,
        v: NDArray,
        abstol: float,
        reltol: float,
        norm_kind: Union[int, float] = np.inf
    ) -> Tuple[NDArray, float, int]:
        """
        Evaluate one substep with the evaluator matching the node set.

        Returns:
            Tuple of (approximation, error estimate, matrix-vector products).
        """
        evaluate = newton_conjugate if self.kind == "imaginary" else newton
        return evaluate(step, A, v, self.xi, self.dd, abstol, reltol, norm_kind)


# =============================================================================
# Operator helpers
# =============================================================================

def shift_operator(A, mu: float):
    """Return A - mu I as a new operator of the same storage type."""
    if mu == 0:
        return A
    n = A.shape[0]
    if sparse.issparse(A):
        return A - mu * sparse.identity(n, dtype=np.result_type(A.dtype, float), format='csr')
    return np.asarray(A) - mu * np.eye(n)


def _exact_norm(A, kind) -> float:
    """1-, inf- or (bounded) 2-norm of an explicit matrix from its row/column sums."""
    absA = abs(A) if sparse.issparse(A) else np.abs(A)
    col = float(np.max(np.asarray(absA.sum(axis=0)))) if A.shape[0] else 0.0
    row = float(np.max(np.asarray(absA.sum(axis=1)))) if A.shape[0] else 0.0
    if kind == 1:
        return col
    if kind == np.inf:
        return row
    return float(np.sqrt(col * row))


class _PowerOperator(LinearOperator):
    """
    Linear operator for M^k that counts products with M.

    Used by onenormest, which needs both products with M^k and with its
    adjoint.
    """

    def __init__(self, M, power: int):
        self.M = M
        self.power = power
        self.matvecs = 0
        super().__init__(dtype=np.result_type(M.dtype, float), shape=M.shape)

    def _apply(self, M, X):
        X = np.asarray(X)
        for _ in range(self.power):
            X = M @ X
        self.matvecs += self.power * (X.shape[1] if X.ndim > 1 else 1)
        return np.asarray(X)

    def _matvec(self, x):
        return self._apply(self.M, x)

    def _matmat(self, X):
        return self._apply(self.M, X)

    def _rmatvec(self, x):
        return self._apply(self.M.conj().T, x)

    def _rmatmat(self, X):
        return self._apply(self.M.conj().T, X)


def _power_norm(A, k: int, kind) -> Tuple[float, int]:
    """
    Estimate ||A^k|| by onenormest.

    The inf-norm is the 1-norm of the transpose; the 2-norm is bounded by
    sqrt(||.||_1 ||.||_inf).

    Returns:
        Tuple of (norm estimate, matrix-vector products used).
    """
    if kind == 1:
        op = _PowerOperator(A, k)
        return float(onenormest(op)), op.matvecs
    if kind == np.inf:
        op = _PowerOperator(A.T, k)
        return float(onenormest(op)), op.matvecs
    n1, c1 = _power_norm(A, k, 1)
    ninf, cinf = _power_norm(A, k, np.inf)
    return float(np.sqrt(n1 * ninf)), c1 + cinf


def hump_reduced_norm(A, p: int = 5, kind=np.inf) -> Tuple[float, int]:
    """
    Hump-reduced norm estimate of A.

    Args:
        A: Square dense or sparse operator.
        p: Maximal power in the reduction.
        kind: Operator norm (1, 2 or inf).

    Returns:
        Tuple of (alpha, matrix-vector products used).
    """
    alpha = _exact_norm(A, kind)
    if alpha == 0 or p < 2 or A.shape[0] < 2:
        return alpha, 0

    matvecs = 0
    d = {}
    for k in range(2, p + 2):
        est, cost = _power_norm(A, k, kind)
        d[k] = est ** (1.0 / k)
        matvecs += cost
    for k in range(2, p + 1):
        alpha = min(alpha, max(d[k], d[k + 1]))
    return alpha, matvecs


# =============================================================================
# Theta tables
# =============================================================================

def unit_points(kind: str, n: int) -> NDArray:
    """First n reference nodes for the given kind."""
    if kind == "imaginary":
        return conjugate_leja_points(n)
    return leja_points(n)


def _log_nodal_maxima(points: NDArray, kind: str, region: str) -> NDArray:
    """
    log max |prod_{j<m} (u - points_j)| over the region, for m = 0..len(points)-1.

    The region is the reference segment ([-2, 2] or i[-2, 2]) or the disc
    of radius 2, sampled on its boundary.
    """
    if region == "segment":
        u = np.linspace(-2.0, 2.0, REGION_SAMPLES)
        if kind == "imaginary":
            u = 1j * u
    else:
        u = 2.0 * np.exp(2j * np.pi * np.arange(REGION_SAMPLES) / REGION_SAMPLES)

    with np.errstate(divide='ignore'):
        logs = np.log(np.abs(u[np.newaxis, :] - points[:-1, np.newaxis]))
    cumulative = np.vstack([np.zeros(u.size), np.cumsum(logs, axis=0)])
    return np.max(cumulative, axis=1)


def theta_table(kind: str, region: str, tol: float, max_points: int) -> NDArray:
    """
    Largest admissible region radius for each interpolation degree.

    Args:
        kind: 'real' or 'imaginary' nodes.
        region: 'segment' or 'disk'.
        tol: Scalar tolerance for the a-priori bound.
        max_points: Largest degree tabulated.

    Returns:
        Read-only array theta with theta[m] the radius for degree m
        (theta[0] = 0; 0 marks degrees that cannot reach tol).
    """
    if kind not in KINDS:
        raise ValueError(f"kind must be one of {KINDS}, got {kind!r}")
    if region not in REGIONS:
        raise ValueError(f"region must be one of {REGIONS}, got {region!r}")
    return _theta_table(kind, region, float(max(tol, UNIT_ROUNDOFF)), int(max_points))


@lru_cache(maxsize=32)
def _theta_table(kind: str, region: str, tol: float, max_points: int) -> NDArray:
    points = unit_points(kind, max_points + 1)
    log_omega = _log_nodal_maxima(points, kind, region)
    degrees = np.arange(max_points + 1)

    gammas = np.geomspace(THETA_GAMMA_MIN, THETA_GAMMA_MAX, THETA_GRID_SIZE)
    log_err = np.empty((gammas.size, max_points + 1))
    with np.errstate(divide='ignore'):
        for i, gamma in enumerate(gammas):
            dd = divided_differences(gamma * points)
            log_err[i] = np.log(np.abs(dd)) + degrees * np.log(gamma) + log_omega

    log_tol = np.log(tol)
    log_gammas = np.log(gammas)
    theta = np.zeros(max_points + 1)
    for m in range(1, max_points + 1):
        fails = np.nonzero(log_err[:, m] > log_tol)[0]
        if fails.size == 0:
            theta[m] = 2 * gammas[-1]
            continue
        first = fails[0]
        if first == 0:
            continue
        lo, hi = log_err[first - 1, m], log_err[first, m]
        if np.isfinite(lo) and np.isfinite(hi) and hi > lo:
            frac = (log_tol - lo) / (hi - lo)
            log_gamma = log_gammas[first - 1] + frac * (log_gammas[first] - log_gammas[first - 1])
        else:
            log_gamma = log_gammas[first - 1]
        theta[m] = 2 * np.exp(log_gamma)

    theta.setflags(write=False)
    return theta


def effective_tolerance(tol: ToleranceSpec) -> float:
    """Scalar tolerance for the theta tables: relative if set, else absolute."""
    scalar = tol.relative if tol.relative > 0 else tol.absolute
    return max(scalar, UNIT_ROUNDOFF)


def choose_degree(h_alpha: float, theta: NDArray) -> Tuple[int, int]:
    """
    Degree and substep count minimising m * ceil(h alpha / theta[m]).

    Ties go to the smaller degree.

    Returns:
        Tuple of (m, nsteps).
    """
    degrees = np.nonzero(theta > 0)[0]
    if degrees.size == 0:
        raise ValueError("no interpolation degree reaches the tolerance; increase max_points")
    steps = np.maximum(np.ceil(h_alpha / theta[degrees]), 1).astype(int)
    best = int(np.argmin(degrees * steps))
    return int(degrees[best]), int(steps[best])


# =============================================================================
# Parameter selection
# =============================================================================

def select_interp_params(
    h: Any,
    A,
    extreigs: SpectralEstimate,
    tol: Any = None,
    max_points: Optional[int] = None,
    p: Optional[int] = None,
    shift: bool = True,
    params: Optional[InterpolationParams] = None,
    verbose: bool = False
) -> Tuple[InterpolationParams, Any]:
    """
    Select shift, degree, substeps and nodes for exp(h A) v.

    With params from an earlier call (same operator, new h) the shift,
    node kind and norm estimate are taken over and only the degree,
    substeps and nodes are recomputed; no products with A are spent.

    Args:
        h: Step length (scalar or sequence; the maximum is used).
        A: Square operator, dense or sparse, not yet shifted.
        extreigs: Spectral estimate of A.
        tol: Partial or full tolerance, see normalize_tolerance.
        max_points: Interpolation points searched (default 100).
        p: Hump reduction power (default 5).
        shift: Whether to shift A by the centre of its real spectrum.
        params: Earlier parameters for the same operator.
        verbose: Print diagnostic information.

    Returns:
        Tuple of (InterpolationParams, shifted operator A - mu I).
    """
    tol = normalize_tolerance(tol)
    p = resolve_hump_power(p)
    max_points = resolve_max_points(max_points)
    h = step_length(h)

    if params is not None:
        mu = params.mu
    elif shift:
        mu = float(extreigs.real_center)
    else:
        mu = 0.0
    A_shifted = shift_operator(A, mu)

    if params is not None:
        kind, region = params.kind, params.region
    else:
        a, b = extreigs.real_half_width, extreigs.imag_half_width
        kind = "imaginary" if b > a else "real"
        flat = a == 0 if kind == "imaginary" else b == 0
        region = "segment" if flat else "disk"

    reuse_norm = (
        params is not None
        and params.p == p
        and params.operator_norm_kind == tol.operator_norm_kind
    )
    if reuse_norm:
        alpha, c = params.alpha, 0
    else:
        alpha, c = hump_reduced_norm(A_shifted, p, tol.operator_norm_kind)

    h_alpha = abs(h) * alpha
    if h_alpha == 0:
        m, nsteps, gamma2 = 0, 1, 0.0
        xi = np.zeros(1, dtype=complex if kind == "imaginary" else float)
        dd = np.ones(1)
    else:
        theta = theta_table(kind, region, effective_tolerance(tol), max_points)
        # The last tenth of the points is headroom for the per-substep tolerance
        m, nsteps = choose_degree(h_alpha, theta[:max_points - max_points // 10 + 1])
        gamma2 = h_alpha / (2 * nsteps)
        # h < 0 mirrors the nodes
        xi = np.sign(h) * gamma2 * unit_points(kind, max_points + 1)
        dd = divided_differences(xi)

    result = InterpolationParams(
        m=m,
        mu=mu,
        xi=xi,
        dd=dd,
        gamma2=gamma2,
        nsteps=nsteps,
        kind=kind,
        region=region,
        alpha=alpha,
        c=c,
        p=p,
        operator_norm_kind=tol.operator_norm_kind,
    )

    if verbose:
        print("=== Interpolation Parameters ===")
        print(f"  shift mu: {mu:.6e}")
        print(f"  nodes: {kind} ({region} bound)")
        print(f"  alpha: {alpha:.6e} ({c} products)")
        print(f"  degree m: {m}")
        print(f"  substeps: {nsteps}")
        print(f"  gamma2: {gamma2:.6e}")

    return result, A_shifted
