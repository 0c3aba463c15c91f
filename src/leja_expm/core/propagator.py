"""
Repeated exponential steps with a fixed operator.

Time stepping u(t + h) = exp(h A) u(t) applies the exponential many times
with the same A. LejaPropagator estimates the spectrum once, keeps the
interpolation parameters and the shifted operator between calls and
reselects them only when the step length changes. Reselection keeps
the initial shift and norm estimate, so after the first step no products
are spent on norm estimation.
"""

import numpy as np
from numpy.typing import NDArray
from typing import Optional, Any, Iterable

from leja_expm.core.parameters import (
    normalize_tolerance,
    resolve_hump_power,
    resolve_max_points,
    step_length,
)
from leja_expm.core.action import (
    _as_operator,
    _as_vector,
    _check_dimensions,
    _run_substeps,
)
from leja_expm.spectrum.gershgorin import SpectralEstimate, estimate_spectrum
from leja_expm.interpolation.selection import InterpolationParams, select_interp_params


class LejaPropagator:
    """
    Propagate vectors with exp(h A) for a fixed operator A.

    Example:
        >>> prop = LejaPropagator(A, tol=[0, 1e-10])
        >>> u = prop.step(u0, 0.1)
        >>> u = prop.propagate(u, [0.1, 0.1, 0.05])
    """

    def __init__(
        self,
        A,
        tol: Any = None,
        p: Optional[int] = None,
        extreigs: Optional[SpectralEstimate] = None,
        max_points: Optional[int] = None,
        verbose: bool = False
    ):
        """
        Initialize propagator.

        Args:
            A: Square dense array or scipy.sparse matrix.
            tol: Tolerance, see normalize_tolerance.
            p: Hump reduction power.
            extreigs: Spectral estimate of A (estimated if not given).
            max_points: Interpolation points searched.
            verbose: Print diagnostic information.
        """
        self.A = _as_operator(A)
        self.tol = normalize_tolerance(tol)
        self.p = resolve_hump_power(p)
        self.max_points = resolve_max_points(max_points)
        self.verbose = verbose
        self.extreigs = extreigs if extreigs is not None else estimate_spectrum(self.A)

        self.params: Optional[InterpolationParams] = None
        self._A_shifted = None
        self._h: Optional[float] = None
        self.n_steps_taken = 0
        self.total_matvecs = 0
        self.n_selections = 0

        if verbose:
            print("=== Leja Propagator Initialized ===")
            print(f"  size: {self.A.shape[0]}")
            print(f"  spectrum: Re in [{self.extreigs.SR:.4e}, {self.extreigs.LR:.4e}], "
                  f"Im in [{self.extreigs.SI:.4e}, {self.extreigs.LI:.4e}]")
            print(f"  tolerance: {self.tol.as_tuple()}")

    def _select(self, h: float):
        """Select parameters for step h, keeping shift and norm estimate."""
        params, A_shifted = select_interp_params(
            h, self.A, self.extreigs, self.tol,
            max_points=self.max_points,
            p=self.p,
            shift=self.params is None,
            params=self.params,
            verbose=self.verbose,
        )
        self.total_matvecs += params.c
        self.params = params
        self._A_shifted = A_shifted
        self._h = h
        self.n_selections += 1

    def step(self, v, h: Any) -> NDArray:
        """
        Advance v by one step of length h.

        Args:
            v: Vector or block of vectors.
            h: Step length.

        Returns:
            exp(h A) v.

        Raises:
            DimensionMismatch: If v does not match A, also for h == 0.
        """
        v = _as_vector(v)
        _check_dimensions(self.A, v)
        h = step_length(h)
        if h == 0:
            self.n_steps_taken += 1
            return v
        if self.params is None or h != self._h:
            self._select(h)

        value, _, info = _run_substeps(h, self._A_shifted, v, self.params, self.tol, self.verbose)
        self.n_steps_taken += 1
        self.total_matvecs += int(np.sum(info))
        return value

    def propagate(self, v, steps: Iterable[float]) -> NDArray:
        """
        Apply a sequence of steps.

        Args:
            v: Initial vector or block of vectors.
            steps: Step lengths, applied in order.

        Returns:
            Value after the last step (a copy of v if steps is empty).
        """
        value = np.array(v, copy=True)
        for h in steps:
            value = self.step(value, h)
        return value
