"""
Core data structures for CDA analysis.
"""

from .shift import Shift, ZERO_SHIFT
from .channel_pair import ChannelPair, PreparedInputs, MASK_ON, MASK_OFF

__all__ = ['Shift', 'ZERO_SHIFT', 'ChannelPair', 'PreparedInputs', 'MASK_ON', 'MASK_OFF']
