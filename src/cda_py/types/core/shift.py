"""
Shift data structure.

This module defines the integer displacement applied to the second
channel during a permutation sweep.
"""

import math
from typing import NamedTuple


class Shift(NamedTuple):
    """
    Integer 2D displacement vector.

    Attributes
    ----------
    dx : int
        Displacement along the x (column) axis
    dy : int
        Displacement along the y (row) axis
    """
    dx: int
    dy: int

    @property
    def distance(self) -> float:
        """Euclidean length of the displacement."""
        return math.sqrt(self.dx * self.dx + self.dy * self.dy)

    @property
    def is_zero(self) -> bool:
        return self.dx == 0 and self.dy == 0


# The unshifted configuration used as the observed baseline
ZERO_SHIFT = Shift(0, 0)
