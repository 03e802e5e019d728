"""
Processing stages of a CDA analysis.
"""

from .mask_processor import (
    as_stack,
    default_mask,
    normalise_mask,
    create_mask,
    intersect_mask,
    union_mask,
    total_intensity,
    prepare_inputs,
)
from .permutation_engine import PermutationEngine
from .significance_processor import (
    NullDistribution,
    SignificanceTester,
    distance_profile,
    statistic_values,
    STATISTICS,
)

__all__ = [
    "as_stack",
    "default_mask",
    "normalise_mask",
    "create_mask",
    "intersect_mask",
    "union_mask",
    "total_intensity",
    "prepare_inputs",
    "PermutationEngine",
    "NullDistribution",
    "SignificanceTester",
    "distance_profile",
    "statistic_values",
    "STATISTICS",
]
