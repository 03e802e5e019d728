"""
CDA type system - organized by functional area.

- core: Fundamental data structures (Shift, ChannelPair)
- config: Configuration and option classes
- results: Result and output structures
"""

# Core data structures
from .core import Shift, ZERO_SHIFT, ChannelPair, PreparedInputs, MASK_ON, MASK_OFF

# Configuration classes
from .config import CDAOptions, RadiusBoundary, MaskOption

# Result structures
from .results import (
    CalculationResult, SignificanceVerdict, Histogram, StatisticSummary,
    PermutationRun, CDAResult
)

__all__ = [
    # Core types
    'Shift', 'ZERO_SHIFT', 'ChannelPair', 'PreparedInputs', 'MASK_ON', 'MASK_OFF',
    # Configuration
    'CDAOptions', 'RadiusBoundary', 'MaskOption',
    # Results
    'CalculationResult', 'SignificanceVerdict', 'Histogram', 'StatisticSummary',
    'PermutationRun', 'CDAResult'
]
