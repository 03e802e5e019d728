"""
CDA Python API - Confined Displacement Algorithm colocalisation testing.

This package tests whether two intensity channels are colocalised beyond
chance, with a clean separation of concerns:

- Core algorithms (correlation, confined shifting, shift sampling, limits)
- Processing stages (mask preparation, permutation sweep, significance)
- Organized type system (core, config, results)
- High-level user-facing API functions
- Export of results tables and persistence of settings

Basic Usage
-----------
>>> import cda_py
>>> result = cda_py.analyze_pair(channel1, channel2, confinement=roi)
>>> print(result.r.value, result.r.verdict)

Export
------
>>> from cda_py.io import CDAResultExporter
>>> CDAResultExporter().export(result, "output", formats=["csv", "json"])
"""

# High-level API functions (most commonly used)
from .api import analyze_pair, analyze_prepared, calculate_statistics, batch_analyze

# Core types (commonly needed)
from .types import (
    # Core data structures
    Shift, ZERO_SHIFT, ChannelPair, PreparedInputs,
    # Configuration
    CDAOptions, RadiusBoundary, MaskOption,
    # Results
    CalculationResult, SignificanceVerdict, Histogram, StatisticSummary,
    PermutationRun, CDAResult
)

# Core processing (for advanced users)
from .core.algorithms import Correlator, FastCorrelator, TwinStackShifter, ShiftSampler
from .core.processors import (
    PermutationEngine, NullDistribution, SignificanceTester,
    prepare_inputs, create_mask, distance_profile
)

from .errors import CDAError, ConfigurationError, DimensionMismatchError, EmptyRegionError

# Package metadata
__version__ = "0.1.0"

__all__ = [
    # High-level API
    'analyze_pair', 'analyze_prepared', 'calculate_statistics', 'batch_analyze',
    # Types
    'Shift', 'ZERO_SHIFT', 'ChannelPair', 'PreparedInputs',
    'CDAOptions', 'RadiusBoundary', 'MaskOption',
    'CalculationResult', 'SignificanceVerdict', 'Histogram', 'StatisticSummary',
    'PermutationRun', 'CDAResult',
    # Core processing
    'Correlator', 'FastCorrelator', 'TwinStackShifter', 'ShiftSampler',
    'PermutationEngine', 'NullDistribution', 'SignificanceTester',
    'prepare_inputs', 'create_mask', 'distance_profile',
    # Errors
    'CDAError', 'ConfigurationError', 'DimensionMismatchError', 'EmptyRegionError',
]
