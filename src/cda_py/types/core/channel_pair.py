"""
Channel pair data structures.

This module defines the containers for the two intensity channels, their
masks and the confinement mask consumed by the permutation sweep.
All arrays are stacks of shape (slices, height, width).
"""

from typing import NamedTuple
import numpy as np

# Mask sentinel values
MASK_ON = 255
MASK_OFF = 0


class ChannelPair(NamedTuple):
    """
    Two intensity channels and their masks.

    Attributes
    ----------
    channel1 : np.ndarray
        Channel 1 integer intensities, zero outside the confinement
    mask1 : np.ndarray
        Channel 1 mask (uint8, 0 or 255)
    channel2 : np.ndarray
        Channel 2 integer intensities, zero outside the confinement
    mask2 : np.ndarray
        Channel 2 mask (uint8, 0 or 255)
    """
    channel1: np.ndarray
    mask1: np.ndarray
    channel2: np.ndarray
    mask2: np.ndarray

    @property
    def shape(self):
        return self.channel1.shape


class PreparedInputs(NamedTuple):
    """
    Channel pair restricted to a confinement mask, ready for a sweep.

    Attributes
    ----------
    pair : ChannelPair
        Masked channel data
    confinement : np.ndarray
        Confinement mask (uint8, 0 or 255); read-only during a sweep
    denominator1 : float
        Total channel 1 intensity inside its mask and the confinement
    denominator2 : float
        Total channel 2 intensity inside its mask and the confinement
    """
    pair: ChannelPair
    confinement: np.ndarray
    denominator1: float
    denominator2: float
