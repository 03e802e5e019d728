"""
Result structures for CDA analysis.
"""

from .calculation_result import CalculationResult
from .significance import SignificanceVerdict, Histogram, StatisticSummary
from .cda_result import PermutationRun, CDAResult

__all__ = [
    'CalculationResult', 'SignificanceVerdict', 'Histogram', 'StatisticSummary',
    'PermutationRun', 'CDAResult'
]
