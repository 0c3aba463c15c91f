"""
Tests for the Newton-form evaluators.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.linalg import expm

from leja_expm.core.errors import NonConvergenceWarning
from leja_expm.interpolation import (
    newton,
    newton_conjugate,
    leja_points,
    conjugate_leja_points,
    divided_differences,
)


class CountingMatrix:
    """Dense matrix that counts products with vectors or blocks."""

    def __init__(self, A):
        self.A = np.asarray(A)
        self.shape = self.A.shape
        self.calls = 0

    def __matmul__(self, x):
        self.calls += 1
        return self.A @ x


def real_nodes(gamma2, n=101):
    xi = gamma2 * leja_points(n)
    return xi, divided_differences(xi)


def conjugate_nodes(gamma2, n=101):
    xi = gamma2 * conjugate_leja_points(n)
    return xi, divided_differences(xi)


@pytest.fixture
def symmetric_matrix(rng):
    """Symmetric 8x8 matrix with spectrum in [-1.5, 1.5]."""
    Q, _ = np.linalg.qr(rng.standard_normal((8, 8)))
    return Q @ np.diag(np.linspace(-1.5, 1.5, 8)) @ Q.T


@pytest.mark.unit
class TestNewton:
    """Real Leja nodes."""

    def test_accuracy(self, symmetric_matrix, rng):
        v = rng.standard_normal(8)
        xi, dd = real_nodes(0.75)
        y, errest, matvecs = newton(1.0, symmetric_matrix, v, xi, dd, 0.0, 1e-14)
        assert_allclose(y, expm(symmetric_matrix) @ v, rtol=1e-12, atol=1e-13)
        assert errest <= 1e-14 * np.linalg.norm(y, np.inf)
        assert 0 < matvecs < len(dd)

    def test_step_scales_operator(self, symmetric_matrix, rng):
        v = rng.standard_normal(8)
        xi, dd = real_nodes(0.375)
        y, _, _ = newton(0.5, symmetric_matrix, v, xi, dd, 0.0, 1e-14)
        assert_allclose(y, expm(0.5 * symmetric_matrix) @ v, rtol=1e-12, atol=1e-13)

    def test_block_of_vectors(self, symmetric_matrix, rng):
        V = rng.standard_normal((8, 3))
        xi, dd = real_nodes(0.75)
        Y, _, _ = newton(1.0, symmetric_matrix, V, xi, dd, 0.0, 1e-14)
        assert Y.shape == (8, 3)
        assert_allclose(Y, expm(symmetric_matrix) @ V, rtol=1e-12, atol=1e-13)

    def test_counts_products(self, symmetric_matrix, rng):
        A = CountingMatrix(symmetric_matrix)
        xi, dd = real_nodes(0.75)
        _, _, matvecs = newton(1.0, A, rng.standard_normal(8), xi, dd, 0.0, 1e-12)
        assert matvecs == A.calls

    def test_single_node(self, rng):
        v = rng.standard_normal(4)
        y, errest, matvecs = newton(1.0, np.eye(4), v, np.zeros(1), np.ones(1), 0.0, 1e-8)
        assert_allclose(y, v)
        assert errest == 0.0
        assert matvecs == 0

    def test_absolute_tolerance(self, symmetric_matrix, rng):
        v = rng.standard_normal(8)
        xi, dd = real_nodes(0.75)
        y, errest, _ = newton(1.0, symmetric_matrix, v, xi, dd, 1e-6, 0.0)
        assert errest <= 1e-6
        assert_allclose(y, expm(symmetric_matrix) @ v, atol=1e-5)

    def test_warns_when_points_run_out(self, symmetric_matrix, rng):
        xi, dd = real_nodes(0.75, n=4)
        with pytest.warns(NonConvergenceWarning):
            _, errest, matvecs = newton(
                1.0, symmetric_matrix, rng.standard_normal(8), xi, dd, 0.0, 1e-15
            )
        assert matvecs == 3
        assert errest > 0


@pytest.mark.unit
class TestNewtonConjugate:
    """Conjugate imaginary Leja nodes."""

    @pytest.fixture
    def skew_matrix(self, symmetric_matrix):
        """Real matrix with purely imaginary spectrum."""
        upper = np.triu(symmetric_matrix, 1)
        return upper - upper.T

    def test_accuracy(self, skew_matrix, rng):
        v = rng.standard_normal(8)
        radius = np.max(np.abs(np.linalg.eigvals(skew_matrix)))
        xi, dd = conjugate_nodes(radius / 2)
        y, _, _ = newton_conjugate(1.0, skew_matrix, v, xi, dd, 0.0, 1e-14)
        assert_allclose(y, expm(skew_matrix) @ v, rtol=1e-11, atol=1e-12)

    def test_real_data_stays_real(self, skew_matrix, rng):
        xi, dd = conjugate_nodes(1.0)
        y, _, _ = newton_conjugate(1.0, skew_matrix, rng.standard_normal(8), xi, dd, 0.0, 1e-12)
        assert not np.iscomplexobj(y)

    def test_agrees_with_complex_evaluation(self, skew_matrix, rng):
        v = rng.standard_normal(8)
        xi, dd = conjugate_nodes(1.0)
        y_real, _, _ = newton_conjugate(1.0, skew_matrix, v, xi, dd, 0.0, 1e-14)
        y_cplx, _, _ = newton(1.0, skew_matrix, v, xi, dd, 0.0, 1e-14)
        assert_allclose(y_real, y_cplx.real, rtol=1e-10, atol=1e-11)
        assert_allclose(y_cplx.imag, 0.0, atol=1e-10)

    def test_counts_products(self, skew_matrix, rng):
        A = CountingMatrix(skew_matrix)
        xi, dd = conjugate_nodes(1.0)
        _, _, matvecs = newton_conjugate(1.0, A, rng.standard_normal(8), xi, dd, 0.0, 1e-12)
        assert matvecs == A.calls

    def test_warns_when_points_run_out(self, skew_matrix, rng):
        xi, dd = conjugate_nodes(1.0, n=5)
        with pytest.warns(NonConvergenceWarning):
            newton_conjugate(1.0, skew_matrix, rng.standard_normal(8), xi, dd, 0.0, 1e-15)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
