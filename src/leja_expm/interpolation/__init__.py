"""
Leja interpolation of the exponential.

- leja_points / conjugate_leja_points: reference node sequences
- divided_differences: exp divided differences via the Opitz matrix
- newton / newton_conjugate: Newton-form evaluation on vectors
- select_interp_params: shift, degree, substeps and nodes for exp(h A) v
"""

from leja_expm.interpolation.leja_points import leja_points, conjugate_leja_points
from leja_expm.interpolation.divided_differences import divided_differences
from leja_expm.interpolation.newton import newton, newton_conjugate
from leja_expm.interpolation.selection import (
    InterpolationParams,
    select_interp_params,
    hump_reduced_norm,
    theta_table,
    shift_operator,
)

__all__ = [
    "leja_points",
    "conjugate_leja_points",
    "divided_differences",
    "newton",
    "newton_conjugate",
    "InterpolationParams",
    "select_interp_params",
    "hump_reduced_norm",
    "theta_table",
    "shift_operator",
]
