"""
Shared fixtures for the CDA test suite.
"""
import numpy as np
import pytest

from cda_py import CDAOptions


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def random_image(rng):
    """32x32 uint8 image of independent uniform intensities."""
    return rng.integers(0, 256, size=(32, 32), dtype=np.uint8)


@pytest.fixture
def disk_mask():
    """Disk of radius 12 centred in a 32x32 image, 255 inside."""
    y, x = np.mgrid[:32, :32]
    inside = (y - 15.5) ** 2 + (x - 15.5) ** 2 <= 12 ** 2
    return np.where(inside, 255, 0).astype(np.uint8)


@pytest.fixture
def small_options():
    """Fast options for end-to-end runs."""
    return CDAOptions(maximum_radius=6, random_radius=3, permutations=40, seed=7, workers=2)
