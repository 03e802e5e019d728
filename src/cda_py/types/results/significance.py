"""
Significance test results.

This module defines the verdict of a percentile significance test and
the summary reported for each colocalisation statistic.
"""

from enum import Enum
from typing import NamedTuple

import numpy as np


class SignificanceVerdict(Enum):
    """Classification of an observed statistic against its null distribution."""
    SIGNIFICANT_COLOCATED = "Significant (colocated)"
    SIGNIFICANT_NOT_COLOCATED = "Significant (non-colocated)"
    NOT_SIGNIFICANT = "Not significant"

    @property
    def is_significant(self) -> bool:
        return self is not SignificanceVerdict.NOT_SIGNIFICANT


class Histogram(NamedTuple):
    """
    Equal-width histogram of null samples, used for display only.

    Attributes
    ----------
    bin_starts : np.ndarray
        Lower edge of each bin
    interval : float
        Bin width (0 when every sample has the same value)
    counts : np.ndarray
        Number of samples in each bin
    pdf : np.ndarray
        Counts normalised to sum to 1 (zeros when there are no samples)
    """
    bin_starts: np.ndarray
    interval: float
    counts: np.ndarray
    pdf: np.ndarray


class StatisticSummary(NamedTuple):
    """
    Significance summary for one statistic (M1, M2 or R).

    Attributes
    ----------
    name : str
        Statistic name
    value : float
        Observed (unshifted) value
    mean : float
        Mean of the null samples
    std : float
        Sample standard deviation of the null samples
    lower_limit : float
        Lower probability limit
    upper_limit : float
        Upper probability limit
    verdict : SignificanceVerdict
        Classification of the observed value
    samples : int
        Number of null samples
    histogram : Histogram
        Display histogram of the null samples
    """
    name: str
    value: float
    mean: float
    std: float
    lower_limit: float
    upper_limit: float
    verdict: SignificanceVerdict
    samples: int
    histogram: Histogram
