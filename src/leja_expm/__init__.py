"""
Leja Expm - Action of the Matrix Exponential by Leja Interpolation

Computes exp(h A) v for large, possibly sparse and non-normal operators
without forming exp(h A). The operator is shifted to centre its spectrum,
the step is split into substeps, and each substep evaluates a Newton
interpolation polynomial at Leja points until an a-posteriori error
estimate meets the tolerance.

Main Interface:
    from leja_expm import expm_action

    result = expm_action(0.1, A, v, tol=[0, 1e-10])
    y, errest, info, c, m, extreigs, mu, gamma2 = result

    # Reuse the parameters for another vector and the same step
    y2 = expm_action(0.1, A, w, params=result.params).value

Components:
- expm_action: Single step, fresh parameters or reuse
- LejaPropagator: Repeated steps with a fixed operator
- estimate_spectrum: Gershgorin/Bendixson spectral box
- select_interp_params: Interpolation parameter selection
"""

from leja_expm.core import (
    expm_action,
    ActionResult,
    LejaPropagator,
    ActionOptions,
    ToleranceSpec,
    normalize_tolerance,
    DimensionMismatch,
    NonConvergenceWarning,
)
from leja_expm.spectrum import SpectralEstimate, estimate_spectrum
from leja_expm.interpolation import (
    InterpolationParams,
    select_interp_params,
    newton,
    newton_conjugate,
)

__version__ = "0.1.0"

__all__ = [
    # Solvers
    "expm_action",
    "ActionResult",
    "LejaPropagator",
    # Options
    "ActionOptions",
    "ToleranceSpec",
    "normalize_tolerance",
    # Errors
    "DimensionMismatch",
    "NonConvergenceWarning",
    # Spectrum
    "SpectralEstimate",
    "estimate_spectrum",
    # Interpolation
    "InterpolationParams",
    "select_interp_params",
    "newton",
    "newton_conjugate",
]
