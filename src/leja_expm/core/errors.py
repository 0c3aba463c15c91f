"""
Exceptions and warnings raised by the Leja exponential solver.
"""


class DimensionMismatch(ValueError):
    """Operator and vector shapes are incompatible."""


class NonConvergenceWarning(RuntimeWarning):
    """
    Newton interpolation ran out of points before meeting the tolerance.

    The evaluator still returns its last iterate together with the error
    estimate; escalate with ``warnings.simplefilter("error", NonConvergenceWarning)``.
    """
