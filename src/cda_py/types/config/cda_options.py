"""
Main configuration options for CDA analysis.

This module defines the immutable configuration value passed into each
analysis run, replacing any "last used" global settings.
"""

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...errors import ConfigurationError

# Shift components are packed into 8 bits each
MAXIMUM_SUPPORTED_RADIUS = 255

_INTEGER_FIELDS = ("maximum_radius", "random_radius", "permutations", "histogram_bins")
_OPTIONAL_INTEGER_FIELDS = ("seed", "workers")


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class RadiusBoundary(Enum):
    """
    Policy for the inner edge of a displacement annulus.

    INCLUSIVE keeps offsets with ``min_radius**2 <= d**2 <= max_radius**2``.
    EXCLUSIVE keeps offsets with ``min_radius**2 < d**2 <= max_radius**2``.
    """
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


@dataclass(frozen=True)
class CDAOptions:
    """
    Configuration options for a CDA analysis run.

    Parameters
    ----------
    maximum_radius : int, default 12
        Maximum radial displacement of the shifted channel (pixels)
    random_radius : int, default 7
        Displacement beyond which a shifted sample joins the null distribution
    permutations : int, default 200
        Number of shifts sampled from each annulus; 0 evaluates every shift
    histogram_bins : int, default 16
        Number of bins for the display histogram of each null distribution
    p_value : float, default 0.05
        Two-tailed significance level
    sub_random_samples : bool, default True
        Also sample shifts inside the random radius
    seed : int, optional
        Seed for the shift shuffle; None draws fresh entropy each run
    workers : int, optional
        Worker threads for the sweep; None uses the available processors
    expand_confined : bool, default False
        Expand the confinement to include both channel masks instead of
        restricting the masks to the confinement
    radius_boundary : RadiusBoundary, default RadiusBoundary.INCLUSIVE
        Inner edge policy for the null annulus
    """
    maximum_radius: int = 12
    random_radius: int = 7
    permutations: int = 200
    histogram_bins: int = 16
    p_value: float = 0.05
    sub_random_samples: bool = True
    seed: Optional[int] = None
    workers: Optional[int] = None
    expand_confined: bool = False
    radius_boundary: RadiusBoundary = RadiusBoundary.INCLUSIVE

    def validate(self) -> "CDAOptions":
        """
        Check the options are usable, raising ConfigurationError otherwise.

        Returns
        -------
        CDAOptions
            The same options, for chaining
        """
        for name in _INTEGER_FIELDS:
            value = getattr(self, name)
            if not _is_integer(value):
                raise ConfigurationError(f"{name} must be an integer: {value!r}")
        for name in _OPTIONAL_INTEGER_FIELDS:
            value = getattr(self, name)
            if value is not None and not _is_integer(value):
                raise ConfigurationError(f"{name} must be an integer: {value!r}")
        if self.random_radius < 0 or self.maximum_radius < 0:
            raise ConfigurationError("Radii must be non-negative")
        if self.random_radius >= self.maximum_radius:
            raise ConfigurationError(
                f"Random radius ({self.random_radius}) must be below the "
                f"maximum radius ({self.maximum_radius})"
            )
        if self.maximum_radius > MAXIMUM_SUPPORTED_RADIUS:
            raise ConfigurationError(
                f"Maximum radius cannot be above {MAXIMUM_SUPPORTED_RADIUS}"
            )
        if self.permutations < 0:
            raise ConfigurationError("Permutations must be zero (all) or positive")
        if self.histogram_bins < 1:
            raise ConfigurationError("Histogram requires at least one bin")
        if not 0.0 <= self.p_value <= 1.0:
            raise ConfigurationError(f"p-Value must be between 0 and 1: {self.p_value}")
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError("Workers must be at least 1")
        if not isinstance(self.radius_boundary, RadiusBoundary):
            raise ConfigurationError(f"Unknown radius boundary: {self.radius_boundary}")
        return self
