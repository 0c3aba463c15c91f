"""
Pytest configuration for the Leja exponential test suite.
"""

import pytest
import sys
from pathlib import Path

import numpy as np
from scipy import sparse

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


def pytest_configure(config):
    """Called after command line options have been parsed."""
    # Add markers for test organization
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def toeplitz_tridiagonal(n, sub, diag, sup):
    """Dense tridiagonal Toeplitz matrix."""
    return (
        np.diag(np.full(n - 1, float(sub)), -1)
        + np.diag(np.full(n, float(diag)))
        + np.diag(np.full(n - 1, float(sup)), 1)
    )


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def laplacian_1d():
    """1D Dirichlet Laplacian stencil [1, -2, 1], size 10."""
    return toeplitz_tridiagonal(10, 1, -2, 1)


@pytest.fixture
def skew_tridiagonal():
    """Skew-symmetric tridiagonal Toeplitz matrix (-1 below, +1 above), size 10."""
    return toeplitz_tridiagonal(10, -1, 0, 1)


@pytest.fixture
def sparse_laplacian():
    """Sparse 1D Laplacian scaled by the squared grid size, size 51."""
    n = 51
    return n**2 * sparse.diags(
        [np.ones(n - 1), -2 * np.ones(n), np.ones(n - 1)], [-1, 0, 1], format='csr'
    )
