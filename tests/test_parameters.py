"""
Tests for tolerance completion and solver options.
"""

import numpy as np
import pytest

from leja_expm.core.parameters import (
    ToleranceSpec,
    ActionOptions,
    normalize_tolerance,
    as_norm_kind,
    resolve_hump_power,
    resolve_max_points,
    step_length,
    vector_norm,
)


@pytest.mark.unit
class TestNormalizeTolerance:
    """Completion of partial tolerances."""

    def test_default(self):
        tol = normalize_tolerance(None)
        assert tol.as_tuple() == (0.0, 2.0**-53, np.inf, np.inf)

    def test_empty_sequence_is_default(self):
        assert normalize_tolerance([]) == normalize_tolerance(None)

    def test_one_field(self):
        tol = normalize_tolerance([1e-8])
        assert tol.as_tuple() == (1e-8, 0.0, np.inf, 2)

    def test_scalar_counts_as_one_field(self):
        assert normalize_tolerance(1e-8) == normalize_tolerance([1e-8])

    def test_two_fields(self):
        tol = normalize_tolerance((1e-8, 1e-6))
        assert tol.as_tuple() == (1e-8, 1e-6, np.inf, 2)

    def test_three_fields(self):
        tol = normalize_tolerance([0, 1e-10, 1])
        assert tol.as_tuple() == (0.0, 1e-10, 1, 2)

    def test_four_fields(self):
        tol = normalize_tolerance([0, 1e-10, 2, 1])
        assert tol.as_tuple() == (0.0, 1e-10, 2, 1)

    def test_string_inf(self):
        tol = normalize_tolerance([0, 1e-10, "inf", "inf"])
        assert tol.norm_kind == np.inf
        assert tol.operator_norm_kind == np.inf

    def test_too_many_fields(self):
        with pytest.raises(ValueError, match="at most 4"):
            normalize_tolerance([0, 1, 2, 2, 2])

    def test_spec_passes_through(self):
        full = ToleranceSpec(1e-3, 1e-4, 1, 2)
        assert normalize_tolerance(full) is full

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            normalize_tolerance([-1e-8])
        with pytest.raises(ValueError, match="non-negative"):
            normalize_tolerance([0, -1e-8])

    def test_bad_norm_kind(self):
        with pytest.raises(ValueError, match="norm kind"):
            normalize_tolerance([0, 1e-8, 3])
        with pytest.raises(ValueError, match="norm kind"):
            normalize_tolerance([0, 1e-8, "fro"])


@pytest.mark.unit
class TestToleranceSpec:
    """ToleranceSpec helpers."""

    def test_norm_kinds_canonical(self):
        assert as_norm_kind(1.0) == 1
        assert as_norm_kind(2) == 2
        assert as_norm_kind(float('inf')) == np.inf

    def test_per_substep(self):
        tol = ToleranceSpec(4e-8, 2e-6, 1, 2).per_substep(4)
        assert tol.absolute == pytest.approx(1e-8)
        assert tol.relative == pytest.approx(5e-7)
        assert tol.norm_kind == 1
        assert tol.operator_norm_kind == 2

    def test_frozen(self):
        tol = ToleranceSpec(0, 1e-8)
        with pytest.raises(AttributeError):
            tol.relative = 1.0


@pytest.mark.unit
class TestResolvers:
    """Defaults and validation of integer options."""

    def test_hump_power_default(self):
        assert resolve_hump_power(None) == 5

    def test_hump_power_invalid(self):
        for bad in (0, -1, 2.5, True):
            with pytest.raises(ValueError, match="p must be"):
                resolve_hump_power(bad)

    def test_max_points(self):
        assert resolve_max_points(None) == 100
        assert resolve_max_points(20) == 20
        with pytest.raises(ValueError, match="max_points"):
            resolve_max_points(0)

    def test_step_length(self):
        assert step_length(0.5) == 0.5
        assert step_length([0.1, 0.3, 0.2]) == 0.3
        assert step_length(np.array([-0.2, -0.1])) == -0.1
        with pytest.raises(ValueError, match="at least one"):
            step_length([])
        with pytest.raises(ValueError, match="finite"):
            step_length(np.inf)

    def test_vector_norm(self):
        x = np.array([3.0, -4.0])
        assert vector_norm(x, 1) == 7.0
        assert vector_norm(x, 2) == 5.0
        assert vector_norm(x, np.inf) == 4.0


@pytest.mark.unit
class TestActionOptions:
    """Merging of options with keyword overrides."""

    def test_defaults(self):
        opts = ActionOptions()
        assert opts.tol is None
        assert opts.p is None
        assert opts.verbose is False

    def test_overrides_apply(self):
        opts = ActionOptions(tol=[1e-8], p=3).merged(p=4, params=None)
        assert opts.p == 4
        assert opts.tol == [1e-8]
        assert opts.params is None

    def test_merged_returns_copy(self):
        opts = ActionOptions(p=3)
        merged = opts.merged(p=6)
        assert opts.p == 3
        assert merged.p == 6


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
