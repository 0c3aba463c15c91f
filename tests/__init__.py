"""
Leja Exponential Test Suite.

Unit and integration tests for exp(h A) v by Leja interpolation:
- Interpolation primitives: Leja points, divided differences, Newton form
- Parameter selection: spectral estimate, hump-reduced norm, theta tables
- Drivers: expm_action and LejaPropagator against scipy.linalg.expm

Test Files:
- test_parameters.py: Tolerance completion and options
- test_constants.py: Defaults and constants.json override
- test_gershgorin.py: Spectral box estimate
- test_leja_points.py: Real and conjugate Leja sequences
- test_divided_differences.py: Divided differences of exp
- test_newton.py: Newton evaluators
- test_selection.py: Interpolation parameter selection
- test_action.py: Integration tests for expm_action
- test_propagator.py: Integration tests for LejaPropagator

Usage:
    # Run all tests
    pytest tests/ -v

    # Run only unit tests (fast)
    pytest tests/ -m unit -v

    # Skip slow tests
    pytest tests/ -m "not slow" -v
"""
