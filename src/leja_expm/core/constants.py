"""
Numerical defaults for the Leja exponential solver.

Tunable defaults (tolerance, hump-reduction power, interpolation budget,
grid resolutions for the precomputed tables) are loaded from constants.json
if available, otherwise default values are used.

Norm kinds are stored as 1, 2 or "inf" so the file stays valid JSON.
"""

import json
import warnings
import numpy as np
from pathlib import Path
from typing import Dict, Any, Optional

# =============================================================================
# Load Defaults from JSON
# =============================================================================

# Path to constants.json (same directory as this file)
_CONSTANTS_JSON_PATH = Path(__file__).parent / "constants.json"

# Default values (used if constants.json is missing)
_DEFAULT_CONSTANTS: Dict[str, Any] = {
    "default_tolerance": [0.0, 2.0**-53, "inf", "inf"],  # (abs, rel, norm, op-norm)
    "partial_operator_norm": 2,  # op-norm filled in when tol is partially given
    "hump_power": 5,  # maximal power of A in the hump reduction
    "max_points": 100,  # interpolation points searched per parameter set
    "leja_grid_size": 4001,  # candidates for the discrete Leja sequences
    "theta_grid_size": 96,  # radii sampled per theta table
    "theta_gamma_min": 1e-5,
    "theta_gamma_max": 64.0,
    "region_samples": 2048,  # samples of the nodal polynomial per region
    "taylor_extra_terms": 24,  # Taylor terms beyond the Opitz matrix size
}


def load_constants_from_json(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load solver defaults from constants.json.

    If the file doesn't exist or is invalid, returns default values.

    Args:
        path: Alternative file to read. Defaults to the file next to
              this module.

    Returns:
        Dictionary with constant names as keys and values.
    """
    json_path = Path(path) if path is not None else _CONSTANTS_JSON_PATH
    if json_path.exists():
        try:
            with open(json_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
            # Merge with defaults to ensure all keys exist
            result = _DEFAULT_CONSTANTS.copy()
            result.update(loaded)
            return result
        except (json.JSONDecodeError, IOError) as e:
            warnings.warn(f"Failed to load {json_path.name}: {e}. Using defaults.")
            return _DEFAULT_CONSTANTS.copy()
    else:
        return _DEFAULT_CONSTANTS.copy()


def save_constants_to_json(constants: Dict[str, Any], path: Optional[Path] = None) -> None:
    """
    Save solver defaults to constants.json.

    Args:
        constants: Dictionary with constant names and values.
        path: Alternative destination. Defaults to the file next to
              this module.
    """
    json_path = Path(path) if path is not None else _CONSTANTS_JSON_PATH
    with open(json_path, 'w', encoding='utf-8') as f:
        json.dump(constants, f, indent=4)


def get_constants_json_path() -> Path:
    """Return the path to the constants.json file."""
    return _CONSTANTS_JSON_PATH


def _as_norm_kind(value):
    if isinstance(value, str) and value.lower() == "inf":
        return np.inf
    return value


# Load constants at module import time
_LOADED_CONSTANTS = load_constants_from_json()

# =============================================================================
# Tolerance
# =============================================================================
# (absolute, relative, norm kind, operator norm kind) used when the caller
# supplies no tolerance at all. 2^-53 is the unit roundoff in double.
DEFAULT_TOLERANCE: tuple = tuple(
    _as_norm_kind(x) for x in _LOADED_CONSTANTS["default_tolerance"]
)

# Operator norm kind completed when only 1-3 tolerance fields are given.
PARTIAL_OPERATOR_NORM = _as_norm_kind(_LOADED_CONSTANTS["partial_operator_norm"])

# Unit roundoff; the theta tables are never built below it.
UNIT_ROUNDOFF: float = 2.0**-53

# =============================================================================
# Interpolation budget
# =============================================================================
HUMP_POWER: int = int(_LOADED_CONSTANTS["hump_power"])
MAX_POINTS: int = int(_LOADED_CONSTANTS["max_points"])

# =============================================================================
# Table resolution
# =============================================================================
LEJA_GRID_SIZE: int = int(_LOADED_CONSTANTS["leja_grid_size"])
THETA_GRID_SIZE: int = int(_LOADED_CONSTANTS["theta_grid_size"])
THETA_GAMMA_MIN: float = float(_LOADED_CONSTANTS["theta_gamma_min"])
THETA_GAMMA_MAX: float = float(_LOADED_CONSTANTS["theta_gamma_max"])
REGION_SAMPLES: int = int(_LOADED_CONSTANTS["region_samples"])
TAYLOR_EXTRA_TERMS: int = int(_LOADED_CONSTANTS["taylor_extra_terms"])
