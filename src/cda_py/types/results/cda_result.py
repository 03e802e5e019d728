"""
Results of a permutation sweep and of a complete CDA analysis.
"""

from typing import NamedTuple, List, Dict, Optional

from ..config.cda_options import CDAOptions
from .calculation_result import CalculationResult
from .significance import StatisticSummary


class PermutationRun(NamedTuple):
    """
    Results collected by a permutation sweep.

    Attributes
    ----------
    results : List[CalculationResult]
        One result per evaluated shift, in no particular order
    requested : int
        Number of shifts submitted to the sweep
    achieved : int
        Number of shifts actually evaluated
    cancelled : bool
        True if the sweep stopped early
    """
    results: List[CalculationResult]
    requested: int
    achieved: int
    cancelled: bool


class CDAResult(NamedTuple):
    """
    Complete results of a CDA analysis.

    Attributes
    ----------
    unshifted : CalculationResult, optional
        Observed statistics at zero displacement (None if cancelled first)
    results : List[CalculationResult]
        All evaluated shifts, including the unshifted baseline
    statistics : Dict[str, StatisticSummary]
        Significance summaries keyed by "M1", "M2" and "R"
    requested : int
        Number of shifts in the shift list
    achieved : int
        Number of shifts evaluated
    cancelled : bool
        True if the sweep stopped early
    denominator1 : float
        Total channel 1 intensity used for M1
    denominator2 : float
        Total channel 2 intensity used for M2
    options : CDAOptions
        Options used for the run
    """
    unshifted: Optional[CalculationResult]
    results: List[CalculationResult]
    statistics: Dict[str, StatisticSummary]
    requested: int
    achieved: int
    cancelled: bool
    denominator1: float
    denominator2: float
    options: CDAOptions

    @property
    def m1(self) -> Optional[StatisticSummary]:
        """M1 summary, or None if the sweep stopped before the unshifted measurement."""
        return self.statistics.get("M1")

    @property
    def m2(self) -> Optional[StatisticSummary]:
        return self.statistics.get("M2")

    @property
    def r(self) -> Optional[StatisticSummary]:
        return self.statistics.get("R")
