"""
Core CDA algorithms.

- correlator: direct and streaming Pearson correlation accumulators
- twin_shifter: confinement-constrained toroidal shifting
- shift_sampler: displacement enumeration and sampling
- significance: percentile limits, verdicts and display histograms
"""

from .correlator import (
    Correlator, FastCorrelator, correlation, fast_correlation, calculate_correlation, integer_sum
)
from .twin_shifter import TwinImageShifter, TwinStackShifter, rotate
from .shift_sampler import (
    ShiftSampler, build_shift_list, enumerate_offsets, sample_keys,
    pack_shift, unpack_shift, ensure_rng
)
from .significance import (
    probability_limits, limit_indices, classify_significance, build_histogram
)

__all__ = [
    'Correlator', 'FastCorrelator', 'correlation', 'fast_correlation', 'calculate_correlation',
    'integer_sum',
    'TwinImageShifter', 'TwinStackShifter', 'rotate',
    'ShiftSampler', 'build_shift_list', 'enumerate_offsets', 'sample_keys',
    'pack_shift', 'unpack_shift', 'ensure_rng',
    'probability_limits', 'limit_indices', 'classify_significance', 'build_histogram',
]
