"""
Tolerance and option dataclasses for configuring the solver.

A tolerance is the 4-tuple (absolute, relative, norm kind, operator norm
kind). Callers may give fewer fields; normalize_tolerance completes them
with a fixed rule so that every solver stage sees a fully populated
ToleranceSpec.
"""

from dataclasses import dataclass
from typing import Optional, Any, Union, Sequence
import numpy as np

from leja_expm.core.constants import (
    DEFAULT_TOLERANCE,
    PARTIAL_OPERATOR_NORM,
    HUMP_POWER,
    MAX_POINTS,
)

_NORM_KINDS = (1, 2, np.inf)


def as_norm_kind(value: Any) -> Union[int, float]:
    """
    Convert a user supplied norm kind to 1, 2 or np.inf.

    Args:
        value: 1, 2, np.inf, float('inf') or the string "inf".

    Returns:
        The canonical norm kind.
    """
    if isinstance(value, str):
        if value.lower() in ("inf", "infinity"):
            return np.inf
        raise ValueError(f"norm kind must be 1, 2 or inf, got {value!r}")
    try:
        kind = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"norm kind must be 1, 2 or inf, got {value!r}") from None
    if kind == np.inf:
        return np.inf
    if kind in (1.0, 2.0):
        return int(kind)
    raise ValueError(f"norm kind must be 1, 2 or inf, got {value!r}")


@dataclass(frozen=True)
class ToleranceSpec:
    """
    Fully populated tolerance for one request.

    Attributes:
        absolute: Absolute tolerance of the result.
        relative: Tolerance relative to the norm of the current approximation.
        norm_kind: Norm (1, 2 or inf) in which errors are measured.
        operator_norm_kind: Operator norm used for the hump reduction.
    """
    absolute: float
    relative: float
    norm_kind: Union[int, float] = np.inf
    operator_norm_kind: Union[int, float] = np.inf

    def __post_init__(self):
        """Canonicalise norm kinds and validate magnitudes."""
        object.__setattr__(self, "absolute", float(self.absolute))
        object.__setattr__(self, "relative", float(self.relative))
        object.__setattr__(self, "norm_kind", as_norm_kind(self.norm_kind))
        object.__setattr__(
            self, "operator_norm_kind", as_norm_kind(self.operator_norm_kind)
        )
        self._validate()

    def _validate(self):
        """Validate tolerance values."""
        if not self.absolute >= 0:
            raise ValueError(f"absolute tolerance must be non-negative, got {self.absolute}")
        if not self.relative >= 0:
            raise ValueError(f"relative tolerance must be non-negative, got {self.relative}")

    def per_substep(self, nsteps: int) -> "ToleranceSpec":
        """Split the additive budget evenly over nsteps substeps."""
        return ToleranceSpec(
            self.absolute / nsteps,
            self.relative / nsteps,
            self.norm_kind,
            self.operator_norm_kind,
        )

    def as_tuple(self) -> tuple:
        return (self.absolute, self.relative, self.norm_kind, self.operator_norm_kind)


def normalize_tolerance(partial: Any = None) -> ToleranceSpec:
    """
    Complete a partially specified tolerance.

    Fields supplied -> result:
        none          (0, 2^-53, inf, inf)
        (a,)          (a, 0, inf, 2)
        (a, r)        (a, r, inf, 2)
        (a, r, n)     (a, r, n, 2)
        (a, r, n, o)  unchanged

    A bare scalar counts as one field; an existing ToleranceSpec is
    returned unchanged.

    Args:
        partial: None, a scalar, a sequence of 1-4 entries or a ToleranceSpec.

    Returns:
        ToleranceSpec with all four fields set.
    """
    if isinstance(partial, ToleranceSpec):
        return partial
    if partial is None:
        return ToleranceSpec(*DEFAULT_TOLERANCE)
    if np.isscalar(partial) and not isinstance(partial, str):
        fields = [partial]
    else:
        fields = list(np.ravel(np.asarray(partial, dtype=object)))

    n_given = len(fields)
    if n_given == 0:
        return ToleranceSpec(*DEFAULT_TOLERANCE)
    if n_given == 1:
        return ToleranceSpec(fields[0], 0.0, np.inf, PARTIAL_OPERATOR_NORM)
    if n_given == 2:
        return ToleranceSpec(fields[0], fields[1], np.inf, PARTIAL_OPERATOR_NORM)
    if n_given == 3:
        return ToleranceSpec(fields[0], fields[1], fields[2], PARTIAL_OPERATOR_NORM)
    if n_given == 4:
        return ToleranceSpec(*fields)
    raise ValueError(f"tolerance takes at most 4 fields, got {n_given}")


def resolve_hump_power(p: Optional[int] = None) -> int:
    """Return the hump reduction power, defaulting to HUMP_POWER."""
    if p is None:
        return HUMP_POWER
    if isinstance(p, (bool, np.bool_)) or int(p) != p or p < 1:
        raise ValueError(f"p must be a positive integer, got {p}")
    return int(p)


def resolve_max_points(max_points: Optional[int] = None) -> int:
    """Return the interpolation point budget, defaulting to MAX_POINTS."""
    if max_points is None:
        return MAX_POINTS
    if int(max_points) != max_points or max_points < 1:
        raise ValueError(f"max_points must be a positive integer, got {max_points}")
    return int(max_points)


def step_length(h: Any) -> float:
    """Largest entry of a scalar or sequence of step lengths."""
    h_arr = np.atleast_1d(np.asarray(h, dtype=float))
    if h_arr.size == 0:
        raise ValueError("h must contain at least one step length")
    h_max = float(np.max(h_arr))
    if not np.isfinite(h_max):
        raise ValueError(f"h must be finite, got {h}")
    return h_max


def vector_norm(x: np.ndarray, kind: Union[int, float]) -> float:
    """
    Norm of a vector or block of vectors.

    Blocks use the matching matrix norm (max column sum for 1, largest
    singular value for 2, max row sum for inf).
    """
    return float(np.linalg.norm(x, kind))


@dataclass
class ActionOptions:
    """
    Optional settings for expm_action.

    Every field defaults to None, meaning "use the package default":
    tolerance (0, 2^-53, inf, inf), hump power 5, 100 interpolation points,
    a fresh parameter set and a Gershgorin spectral estimate.

    Attributes:
        tol: Partial or full tolerance, see normalize_tolerance.
        p: Maximal power of A used for the hump reduction.
        params: Precomputed InterpolationParams to reuse.
        extreigs: Precomputed SpectralEstimate (fresh mode only).
        max_points: Interpolation points searched when selecting parameters.
        verbose: Print diagnostic information.
    """
    tol: Optional[Union[float, Sequence[float], ToleranceSpec]] = None
    p: Optional[int] = None
    params: Optional[Any] = None
    extreigs: Optional[Any] = None
    max_points: Optional[int] = None
    verbose: bool = False

    def merged(self, **overrides) -> "ActionOptions":
        """Return a copy with every non-None override applied."""
        values = {
            "tol": self.tol,
            "p": self.p,
            "params": self.params,
            "extreigs": self.extreigs,
            "max_points": self.max_points,
            "verbose": self.verbose,
        }
        for key, value in overrides.items():
            if value is not None:
                values[key] = value
        return ActionOptions(**values)
