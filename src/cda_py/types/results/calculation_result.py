"""
Per-shift calculation result.
"""

from typing import NamedTuple

from ..core.shift import Shift


class CalculationResult(NamedTuple):
    """
    Colocalisation statistics for one displacement of the second channel.

    Attributes
    ----------
    shift : Shift
        Displacement applied to channel 2
    distance : float
        Length of the displacement
    m1 : float
        Fraction of channel 1 intensity overlapping the channel 2 mask
    m2 : float
        Fraction of channel 2 intensity overlapping the channel 1 mask
    r : float
        Pearson correlation over the overlapping pixels (NaN if undefined)
    n : int
        Number of overlapping pixels
    area : float
        Overlapping pixels as a percentage of the confined pixels
    """
    shift: Shift
    distance: float
    m1: float
    m2: float
    r: float
    n: int
    area: float
