"""
Enumeration and random sampling of integer displacement vectors.

Offsets ``(dx, dy)`` inside an annulus are packed into compact integer keys
(8 bits per magnitude plus two sign bits) for shuffling and storage. When
an annulus holds more offsets than the sample budget, a Fisher-Yates
shuffle selects the subset. The shuffle always runs on the calling thread,
before any parallel evaluation, so the selected shifts depend only on the
random number generator policy supplied by the caller.
"""

import logging
from typing import List, Optional, Union

import numpy as np

from ...errors import ConfigurationError
from ...types.core.shift import Shift, ZERO_SHIFT
from ...types.config.cda_options import CDAOptions, RadiusBoundary, MAXIMUM_SUPPORTED_RADIUS

logger = logging.getLogger(__name__)

MAGNITUDE_MASK = 0xff
SIGN_X = 0x00010000
SIGN_Y = 0x00020000


def pack_shift(dx: int, dy: int) -> int:
    """
    Pack an offset into a key.

    The magnitude of dx occupies bits 8-15 and of dy bits 0-7; negative
    components set the SIGN_X and SIGN_Y bits.
    """
    key = (abs(dx) & MAGNITUDE_MASK) << 8 | (abs(dy) & MAGNITUDE_MASK)
    if dx < 0:
        key |= SIGN_X
    if dy < 0:
        key |= SIGN_Y
    return key


def unpack_shift(key: int) -> Shift:
    """Unpack a key created by pack_shift."""
    key = int(key)
    dy = key & MAGNITUDE_MASK
    dx = (key >> 8) & MAGNITUDE_MASK
    if key & SIGN_X:
        dx = -dx
    if key & SIGN_Y:
        dy = -dy
    return Shift(dx, dy)


def ensure_rng(rng: Union[np.random.Generator, int, None] = None) -> np.random.Generator:
    """
    Convert an rng parameter to a Generator instance.

    Parameters
    ----------
    rng : np.random.Generator | int | None
        Random number generator, seed, or None for fresh entropy
    """
    if rng is None:
        return np.random.default_rng()
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _check_radii(min_radius: int, max_radius: int):
    if min_radius < 0 or max_radius < 0:
        raise ConfigurationError("Radii must be non-negative")
    if min_radius > max_radius:
        raise ConfigurationError(
            f"Minimum radius ({min_radius}) cannot be above maximum radius ({max_radius})"
        )
    if max_radius > MAXIMUM_SUPPORTED_RADIUS:
        raise ConfigurationError(f"Maximum radius cannot be above {MAXIMUM_SUPPORTED_RADIUS}")


def _annulus_keys(min_radius: int, max_radius: int, include_min: bool, include_max: bool) -> np.ndarray:
    # Row-major over i (dx) then j (dy); the origin is never included
    r = np.arange(-max_radius, max_radius + 1)
    i, j = np.meshgrid(r, r, indexing="ij")
    i = i.ravel()
    j = j.ravel()
    distance2 = i * i + j * j
    min2 = min_radius * min_radius
    max2 = max_radius * max_radius

    keep = distance2 > 0
    keep &= (distance2 >= min2) if include_min else (distance2 > min2)
    keep &= (distance2 <= max2) if include_max else (distance2 < max2)

    i = i[keep]
    j = j[keep]
    keys = (np.abs(i) & MAGNITUDE_MASK) << 8 | (np.abs(j) & MAGNITUDE_MASK)
    keys = np.where(i < 0, keys | SIGN_X, keys)
    keys = np.where(j < 0, keys | SIGN_Y, keys)
    return keys.astype(np.int64)


def enumerate_offsets(
    min_radius: int,
    max_radius: int,
    boundary: RadiusBoundary = RadiusBoundary.INCLUSIVE,
) -> np.ndarray:
    """
    Enumerate the packed keys of all non-zero offsets inside an annulus.

    Parameters
    ----------
    min_radius : int
        Inner radius of the annulus
    max_radius : int
        Outer radius of the annulus (always inclusive)
    boundary : RadiusBoundary, default RadiusBoundary.INCLUSIVE
        Whether offsets exactly at min_radius are included

    Returns
    -------
    np.ndarray
        Packed keys in enumeration order

    Raises
    ------
    ConfigurationError
        If the radii are negative, inverted or too large to pack
    """
    _check_radii(min_radius, max_radius)
    return _annulus_keys(
        min_radius, max_radius,
        include_min=boundary is RadiusBoundary.INCLUSIVE,
        include_max=True,
    )


def sample_keys(keys: np.ndarray, budget: int, rng: np.random.Generator) -> np.ndarray:
    """
    Randomly select up to ``budget`` keys.

    If 0 < budget < len(keys) the keys are Fisher-Yates shuffled and the
    first ``budget`` returned; otherwise all keys are returned unchanged.
    """
    if 0 < budget < keys.size:
        shuffled = keys.copy()
        rng.shuffle(shuffled)
        return shuffled[:budget]
    return keys


def build_shift_list(
    options: CDAOptions,
    rng: Union[np.random.Generator, int, None] = None,
) -> List[Shift]:
    """
    Build the list of shifts for a CDA sweep.

    The list holds the zero shift first (the observed baseline, never
    counted against the budget), then up to ``options.permutations``
    shifts from the null annulus ``[random_radius, maximum_radius]``,
    then, if ``options.sub_random_samples``, up to the same number of
    shifts from inside the random radius. The inner ring uses the
    complementary boundary so no offset appears in both rings.

    Parameters
    ----------
    options : CDAOptions
        Analysis options
    rng : np.random.Generator | int, optional
        Overrides ``options.seed`` as the shuffle randomness

    Returns
    -------
    List[Shift]
        Unique shifts, zero shift first

    Raises
    ------
    ConfigurationError
        If the options are invalid or the null annulus is empty
    """
    options.validate()
    generator = ensure_rng(options.seed if rng is None else rng)

    outer = enumerate_offsets(options.random_radius, options.maximum_radius, options.radius_boundary)
    if outer.size == 0:
        raise ConfigurationError(
            f"No shifts between radius {options.random_radius} and {options.maximum_radius}"
        )
    selected = [sample_keys(outer, options.permutations, generator)]
    total = outer.size

    if options.sub_random_samples and options.random_radius > 0:
        inner = _annulus_keys(
            0, options.random_radius,
            include_min=False,
            include_max=options.radius_boundary is RadiusBoundary.EXCLUSIVE,
        )
        selected.append(sample_keys(inner, options.permutations, generator))
        total += inner.size

    shifts = [ZERO_SHIFT]
    for keys in selected:
        shifts.extend(unpack_shift(key) for key in keys)

    logger.info("Selected %d of %d shifts (maximum radius %d, random radius %d)",
                len(shifts) - 1, total, options.maximum_radius, options.random_radius)
    return shifts


class ShiftSampler:
    """
    Reusable shift sampler bound to a set of options and an rng policy.

    Parameters
    ----------
    options : CDAOptions
        Analysis options
    rng : np.random.Generator | int, optional
        Randomness for the shuffle; defaults to ``options.seed``
    """

    def __init__(self, options: CDAOptions, rng: Union[np.random.Generator, int, None] = None):
        self.options = options.validate()
        self.rng = ensure_rng(options.seed if rng is None else rng)

    def sample(self) -> List[Shift]:
        """Draw a new shift list."""
        return build_shift_list(self.options, self.rng)

    def count_available(self, include_sub_random: Optional[bool] = None) -> int:
        """Number of shifts available before sampling, excluding the zero shift."""
        if include_sub_random is None:
            include_sub_random = self.options.sub_random_samples
        total = enumerate_offsets(
            self.options.random_radius, self.options.maximum_radius, self.options.radius_boundary
        ).size
        if include_sub_random and self.options.random_radius > 0:
            total += _annulus_keys(
                0, self.options.random_radius,
                include_min=False,
                include_max=self.options.radius_boundary is RadiusBoundary.EXCLUSIVE,
            ).size
        return total
