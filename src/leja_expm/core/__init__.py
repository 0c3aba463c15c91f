"""
Core module for the Leja exponential solver.

Contains configuration constants, tolerance handling and the solvers.

Main interface:
- expm_action: exp(h A) v for one step, fresh or with reused parameters
- LejaPropagator: repeated steps with a fixed operator

Configuration:
- constants.json next to constants.py overrides the package defaults
- ToleranceSpec / normalize_tolerance complete partial tolerances
"""

from leja_expm.core.constants import (
    DEFAULT_TOLERANCE,
    UNIT_ROUNDOFF,
    HUMP_POWER,
    MAX_POINTS,
    load_constants_from_json,
    get_constants_json_path,
)
from leja_expm.core.errors import DimensionMismatch, NonConvergenceWarning
from leja_expm.core.parameters import (
    ToleranceSpec,
    ActionOptions,
    normalize_tolerance,
)

# Solvers
from leja_expm.core.action import expm_action, ActionResult
from leja_expm.core.propagator import LejaPropagator

__all__ = [
    # Constants
    "DEFAULT_TOLERANCE",
    "UNIT_ROUNDOFF",
    "HUMP_POWER",
    "MAX_POINTS",
    "load_constants_from_json",
    "get_constants_json_path",
    # Errors
    "DimensionMismatch",
    "NonConvergenceWarning",
    # Parameters
    "ToleranceSpec",
    "ActionOptions",
    "normalize_tolerance",
    # Solvers
    "expm_action",
    "ActionResult",
    "LejaPropagator",
]
