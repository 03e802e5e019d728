"""
Tests for shift enumeration, packing and sampling.
"""
import numpy as np
import pytest

from cda_py import CDAOptions, RadiusBoundary, ZERO_SHIFT
from cda_py.core.algorithms.shift_sampler import (
    SIGN_X,
    SIGN_Y,
    ShiftSampler,
    build_shift_list,
    ensure_rng,
    enumerate_offsets,
    pack_shift,
    sample_keys,
    unpack_shift,
)
from cda_py.errors import ConfigurationError


def _lattice(max_radius):
    """All non-zero offsets within max_radius, inclusive."""
    r = range(-max_radius, max_radius + 1)
    return {(i, j) for i in r for j in r if 0 < i * i + j * j <= max_radius * max_radius}


class TestPacking:
    """Compact integer keys for offsets."""

    def test_layout(self):
        assert pack_shift(3, 2) == (3 << 8) | 2
        assert pack_shift(-3, 2) == SIGN_X | (3 << 8) | 2
        assert pack_shift(3, -2) == SIGN_Y | (3 << 8) | 2
        assert pack_shift(0, 0) == 0

    @pytest.mark.parametrize("dx,dy", [(0, 0), (1, -1), (-255, 255), (-7, -12), (12, 0)])
    def test_unpack_inverts_pack(self, dx, dy):
        shift = unpack_shift(pack_shift(dx, dy))
        assert (shift.dx, shift.dy) == (dx, dy)


class TestEnumeration:
    """Annulus enumeration and its boundary policy."""

    def test_unit_ring(self):
        keys = enumerate_offsets(0, 1)
        offsets = {tuple(unpack_shift(k)) for k in keys}
        assert offsets == {(1, 0), (-1, 0), (0, 1), (0, -1)}

    def test_inclusive_and_exclusive_inner_edge(self):
        assert enumerate_offsets(2, 2, RadiusBoundary.INCLUSIVE).size == 4
        assert enumerate_offsets(2, 2, RadiusBoundary.EXCLUSIVE).size == 0

    def test_origin_never_included(self):
        for boundary in RadiusBoundary:
            offsets = [unpack_shift(k) for k in enumerate_offsets(0, 5, boundary)]
            assert ZERO_SHIFT not in offsets

    def test_annulus_distances(self):
        for key in enumerate_offsets(3, 6):
            shift = unpack_shift(key)
            assert 9 <= shift.dx ** 2 + shift.dy ** 2 <= 36

    def test_invalid_radii(self):
        with pytest.raises(ConfigurationError):
            enumerate_offsets(5, 3)
        with pytest.raises(ConfigurationError):
            enumerate_offsets(-1, 3)
        with pytest.raises(ConfigurationError):
            enumerate_offsets(0, 256)


class TestShiftList:
    """Shift lists for a complete sweep."""

    def test_zero_shift_first_and_once(self):
        shifts = build_shift_list(CDAOptions(maximum_radius=6, random_radius=3, permutations=10, seed=1))
        assert shifts[0] == ZERO_SHIFT
        assert shifts.count(ZERO_SHIFT) == 1

    @pytest.mark.parametrize("boundary", list(RadiusBoundary))
    def test_all_shifts_cover_disc_without_duplicates(self, boundary):
        options = CDAOptions(maximum_radius=3, random_radius=2, permutations=0, radius_boundary=boundary)
        shifts = build_shift_list(options)[1:]
        assert len(shifts) == len(set(shifts))
        assert {tuple(s) for s in shifts} == _lattice(3)

    def test_budget_per_ring(self):
        options = CDAOptions(maximum_radius=10, random_radius=5, permutations=15, seed=3)
        shifts = build_shift_list(options)[1:]
        outer = [s for s in shifts if s.dx ** 2 + s.dy ** 2 >= 25]
        inner = [s for s in shifts if s.dx ** 2 + s.dy ** 2 < 25]
        assert len(outer) == 15
        assert len(inner) == 15
        assert len(set(shifts)) == 30

    def test_without_sub_random_samples(self):
        options = CDAOptions(maximum_radius=6, random_radius=3, permutations=0, sub_random_samples=False)
        shifts = build_shift_list(options)[1:]
        assert all(s.distance >= 3 for s in shifts)
        assert len(shifts) == enumerate_offsets(3, 6).size

    def test_seed_reproducibility(self):
        options = CDAOptions(maximum_radius=12, random_radius=7, permutations=20, seed=42)
        assert build_shift_list(options) == build_shift_list(options)
        assert build_shift_list(options, rng=5) == build_shift_list(options, rng=5)

    def test_invalid_options(self):
        with pytest.raises(ConfigurationError):
            build_shift_list(CDAOptions(maximum_radius=5, random_radius=5))
        with pytest.raises(ConfigurationError):
            build_shift_list(CDAOptions(maximum_radius=300, random_radius=5))

    @pytest.mark.parametrize("fields", [
        {"maximum_radius": 6.5},
        {"random_radius": 2.0},
        {"permutations": 1.5},
        {"histogram_bins": True},
        {"seed": 1.0},
        {"workers": "2"},
    ])
    def test_non_integer_options(self, fields):
        options = CDAOptions(**{"maximum_radius": 6, "random_radius": 3, **fields})
        with pytest.raises(ConfigurationError, match="must be an integer"):
            options.validate()
        with pytest.raises(ConfigurationError):
            build_shift_list(options)

    def test_numpy_integer_options(self):
        options = CDAOptions(maximum_radius=np.int64(6), random_radius=np.int32(3), permutations=5, seed=1)
        assert options.validate() is options
        assert build_shift_list(options)[0] == ZERO_SHIFT


class TestSampling:
    """Random selection of keys."""

    def test_sample_within_budget(self):
        keys = np.arange(100)
        selected = sample_keys(keys, 10, ensure_rng(0))
        assert selected.size == 10
        assert set(selected.tolist()) <= set(keys.tolist())
        assert len(set(selected.tolist())) == 10
        np.testing.assert_array_equal(keys, np.arange(100))

    def test_budget_zero_or_large_keeps_all(self):
        keys = np.arange(10)
        np.testing.assert_array_equal(sample_keys(keys, 0, ensure_rng(0)), keys)
        np.testing.assert_array_equal(sample_keys(keys, 50, ensure_rng(0)), keys)

    def test_ensure_rng(self):
        generator = np.random.default_rng(1)
        assert ensure_rng(generator) is generator
        assert isinstance(ensure_rng(None), np.random.Generator)
        assert ensure_rng(3).integers(1000) == np.random.default_rng(3).integers(1000)

    def test_sampler_counts(self):
        sampler = ShiftSampler(CDAOptions(maximum_radius=3, random_radius=2, permutations=0, seed=1))
        assert sampler.count_available() == len(_lattice(3))
        assert sampler.count_available(include_sub_random=False) == enumerate_offsets(2, 3).size
        assert len(sampler.sample()) == len(_lattice(3)) + 1
