"""
End-to-end tests of the high-level API.
"""
import threading

import numpy as np
import pytest

import cda_py
from cda_py import CDAOptions, SignificanceVerdict
from cda_py.core.algorithms import ShiftSampler


class TestAnalyzePair:
    """Full CDA analysis of a channel pair."""

    def test_identical_channels_are_colocated(self, random_image, small_options):
        result = cda_py.analyze_pair(random_image, random_image.copy(), options=small_options)
        assert result.unshifted.r == pytest.approx(1.0)
        assert result.r.verdict is SignificanceVerdict.SIGNIFICANT_COLOCATED
        assert result.r.upper_limit < 0.5
        assert set(result.statistics) == {"M1", "M2", "R"}

    def test_inverted_channels_are_not_colocated(self, random_image, small_options):
        inverted = (255 - random_image).astype(np.uint8)
        result = cda_py.analyze_pair(random_image, inverted, options=small_options)
        assert result.unshifted.r == pytest.approx(-1.0)
        assert result.r.verdict is SignificanceVerdict.SIGNIFICANT_NOT_COLOCATED

    def test_counts_and_order(self, random_image, disk_mask, small_options):
        result = cda_py.analyze_pair(random_image, random_image, confinement=disk_mask, options=small_options)
        expected = len(ShiftSampler(small_options).sample())
        assert result.requested == result.achieved == expected
        assert not result.cancelled
        assert result.results[0].shift == cda_py.ZERO_SHIFT
        assert result.unshifted is result.results[0]
        assert result.r.samples == sum(1 for r in result.results if r.distance > small_options.random_radius)

    def test_seed_reproducibility(self, random_image, rng, small_options):
        other = rng.integers(0, 256, size=(32, 32), dtype=np.uint8)
        first = cda_py.analyze_pair(random_image, other, options=small_options)
        second = cda_py.analyze_pair(random_image, other, options=small_options)
        assert [r.shift for r in first.results] == [r.shift for r in second.results]
        assert first.r.lower_limit == second.r.lower_limit
        assert first.r.upper_limit == second.r.upper_limit

    def test_stacks(self, rng, small_options):
        stack = rng.integers(0, 4096, size=(3, 24, 24), dtype=np.uint16)
        result = cda_py.analyze_pair(stack, stack, options=small_options)
        assert result.unshifted.n == 3 * 24 * 24
        assert result.r.verdict is SignificanceVerdict.SIGNIFICANT_COLOCATED

    def test_cancelled_before_start(self, random_image, small_options):
        cancel = threading.Event()
        cancel.set()
        result = cda_py.analyze_pair(random_image, random_image, options=small_options, cancel_event=cancel)
        assert result.cancelled
        assert result.unshifted is None
        assert result.statistics == {}
        assert result.m1 is None
        assert result.m2 is None
        assert result.r is None
        assert result.achieved == 0

    def test_invalid_options(self, random_image):
        with pytest.raises(cda_py.ConfigurationError):
            cda_py.analyze_pair(random_image, random_image, options=CDAOptions(maximum_radius=3, random_radius=4))

    def test_dimension_mismatch(self, random_image):
        with pytest.raises(cda_py.DimensionMismatchError):
            cda_py.analyze_pair(random_image, random_image[:20])


def test_calculate_statistics(random_image, disk_mask):
    result = cda_py.calculate_statistics(random_image, random_image, confinement=disk_mask)
    assert result.shift == cda_py.ZERO_SHIFT
    assert result.n == np.count_nonzero(disk_mask)
    assert result.r == pytest.approx(1.0)


def test_batch_analyze(rng, small_options):
    frames = [rng.integers(0, 256, size=(16, 16), dtype=np.uint8) for _ in range(2)]
    results = cda_py.batch_analyze([(frame, frame) for frame in frames], options=small_options)
    assert len(results) == 2
    assert all(result.unshifted.r == pytest.approx(1.0) for result in results)
