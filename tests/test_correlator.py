"""
Tests for the direct and streaming correlation accumulators.
"""
import math

import numpy as np
import pytest
from scipy.stats import pearsonr

from cda_py.core.algorithms.correlator import (
    Correlator,
    FastCorrelator,
    calculate_correlation,
    correlation,
    fast_correlation,
    integer_sum,
)


class TestCorrelationFormulas:
    """Direct and streaming formulas against an independent reference."""

    def test_matches_pearsonr(self, rng):
        x = rng.integers(0, 4096, size=500, dtype=np.uint16)
        y = (x // 2 + rng.integers(0, 2048, size=500)).astype(np.uint16)
        expected = pearsonr(x.astype(float), y.astype(float))[0]

        assert correlation(x, y) == pytest.approx(expected, abs=1e-12)
        assert fast_correlation(x, y) == pytest.approx(expected, abs=1e-12)

    def test_direct_and_streaming_agree(self, rng):
        for _ in range(20):
            x = rng.integers(0, 256, size=64)
            y = rng.integers(0, 256, size=64)
            assert correlation(x, y) == pytest.approx(fast_correlation(x, y), abs=1e-12)

    def test_perfect_correlation(self):
        x = np.arange(10)
        assert fast_correlation(x, 3 * x + 2) == pytest.approx(1.0)
        assert fast_correlation(x, 100 - x) == pytest.approx(-1.0)

    def test_constant_channel_is_nan(self):
        x = np.full(10, 7)
        y = np.arange(10)
        assert math.isnan(correlation(x, y))
        assert math.isnan(fast_correlation(x, y))
        assert math.isnan(fast_correlation(y, x))

    def test_empty_and_missing_inputs_are_nan(self):
        empty = np.array([], dtype=np.int64)
        assert math.isnan(correlation(empty, empty))
        assert math.isnan(fast_correlation(empty, empty))
        assert math.isnan(correlation(None, np.arange(3)))
        assert math.isnan(fast_correlation(np.arange(3), None))
        assert math.isnan(calculate_correlation(0, 0, 0, 0, 0, 0))

    def test_shorter_length_is_used(self):
        x = np.array([1, 2, 3, 4, 100])
        y = np.array([2, 4, 6, 8])
        assert fast_correlation(x, y) == pytest.approx(1.0)
        assert correlation(x, y, n=3) == pytest.approx(1.0)

    def test_float_samples_rejected(self):
        with pytest.raises(TypeError):
            fast_correlation(np.array([0.5, 1.5]), np.array([1, 2]))


class TestOverflow:
    """Sums that exceed 64-bit integers remain exact."""

    def test_large_sixteen_bit_image(self):
        n = 1_000_000
        x = np.where(np.arange(n) % 2 == 0, 65535, 65534).astype(np.uint16)
        y = (131069 - x.astype(np.int64)).astype(np.uint16)

        assert fast_correlation(x, x) == pytest.approx(1.0, abs=1e-12)
        assert fast_correlation(x, y) == pytest.approx(-1.0, abs=1e-12)

    def test_streaming_sums_are_exact(self):
        n = 1_000_000
        x = np.full(n, 65535, dtype=np.uint16)
        x[::3] = 1
        accumulator = FastCorrelator()
        accumulator.add(x, x)

        values = [int(v) for v in x.tolist()]
        assert accumulator.n == n
        assert accumulator.sum_x == sum(values)
        assert accumulator.sum_xx == sum(v * v for v in values)
        assert accumulator.sum_xy == accumulator.sum_xx

    def test_values_beyond_int32(self):
        x = np.array([2 ** 40, 2 ** 40 + 1, 2 ** 40 + 3], dtype=np.int64)
        y = np.array([1, 2, 4], dtype=np.int64)
        assert fast_correlation(x, y) == pytest.approx(1.0)

    def test_integer_sum_beyond_int64(self):
        values = np.full(4096, 2 ** 52, dtype=np.int64)
        values[0] += 1
        assert integer_sum(values) == 4096 * 2 ** 52 + 1
        assert integer_sum(np.full(10, 2 ** 63 - 1, dtype=np.int64)) == 10 * (2 ** 63 - 1)
        assert integer_sum(np.array([], dtype=np.uint16)) == 0

    def test_integer_sum_rejects_floats(self):
        with pytest.raises(TypeError):
            integer_sum(np.array([1.5, 2.0]))


class TestFastCorrelator:
    """Streaming accumulator behaviour."""

    def test_scalar_and_array_additions_agree(self, rng):
        x = rng.integers(0, 1000, size=50)
        y = rng.integers(0, 1000, size=50)

        scalar = FastCorrelator()
        for a, b in zip(x, y):
            scalar.add(a, b)
        arrays = FastCorrelator()
        arrays.add(x[:20], y[:20])
        arrays.add(x[20:], y[20:])

        assert scalar.n == arrays.n == 50
        assert scalar.sum_xy == arrays.sum_xy
        assert scalar.correlation() == pytest.approx(arrays.correlation())

    def test_length_limits_pairs(self):
        accumulator = FastCorrelator()
        accumulator.add(np.arange(10), np.arange(10), length=4)
        assert accumulator.n == 4
        assert accumulator.sum_x == 6

    def test_clear(self):
        accumulator = FastCorrelator()
        accumulator.add(np.arange(5), np.arange(5))
        accumulator.clear()
        assert accumulator.n == 0
        assert accumulator.sum_x == accumulator.sum_xy == 0
        assert math.isnan(accumulator.correlation())


class TestCorrelator:
    """Accumulator that stores the pairs."""

    def test_stores_pairs_and_grows(self):
        correlator = Correlator(capacity=2)
        correlator.add(np.array([1, 2, 3]), np.array([3, 2, 1]))
        correlator.add(4, 0)

        np.testing.assert_array_equal(correlator.get_x(), [1, 2, 3, 4])
        np.testing.assert_array_equal(correlator.get_y(), [3, 2, 1, 0])
        assert correlator.capacity >= 4
        assert correlator.n == 4

    def test_direct_matches_streaming(self, rng):
        correlator = Correlator()
        correlator.add(rng.integers(0, 4096, size=300), rng.integers(0, 4096, size=300))
        assert correlator.correlation() == pytest.approx(correlator.fast_correlation(), abs=1e-12)

    def test_zero_variance_is_nan_for_both(self):
        correlator = Correlator()
        correlator.add(np.full(5, 3), np.arange(5))
        assert math.isnan(correlator.correlation())
        assert math.isnan(correlator.fast_correlation())


def test_zero_variance_example_is_nan_in_both_modes():
    x = [1, 1, 1, 1]
    y = [5, 3, 8, 1]
    assert math.isnan(correlation(x, y))
    assert math.isnan(fast_correlation(x, y))


def test_linear_example_is_exactly_one():
    accumulator = FastCorrelator()
    accumulator.add([1, 2, 3, 4, 5], [2, 4, 6, 8, 10])
    assert accumulator.correlation() == 1.0


def test_clear_matches_fresh_accumulator(rng):
    x = rng.integers(0, 500, size=40)
    y = rng.integers(0, 500, size=40)
    reused = Correlator()
    reused.add(rng.integers(0, 500, size=10), rng.integers(0, 500, size=10))
    reused.clear()
    reused.add(x, y)
    fresh = Correlator()
    fresh.add(x, y)
    assert reused.n == fresh.n
    assert reused.correlation() == fresh.correlation()
    assert reused.fast_correlation() == fresh.fast_correlation()
