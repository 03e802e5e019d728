"""
Empirical-null percentile significance testing.

Significance decisions use exact positions in the sorted null sample; the
equal-width histogram is only a display aid (probability density) and
plays no part in the decision.
"""

import math
from typing import Tuple

import numpy as np

from ...errors import ConfigurationError
from ...types.results.significance import SignificanceVerdict, Histogram


def check_p_value(p_value: float) -> float:
    if not 0.0 <= p_value <= 1.0:
        raise ConfigurationError(f"p-Value must be between 0 and 1: {p_value}")
    return p_value


def limit_indices(n: int, p_value: float) -> Tuple[int, int]:
    """
    Positions of the lower and upper probability limits in a sorted sample.

    ``lower = ceil(n*p)`` and ``upper = n - ceil(n*p) - 1``, both clamped to
    ``[0, n-1]``. Each tail therefore holds a fraction p of the samples.
    """
    check_p_value(p_value)
    if n <= 0:
        raise ValueError("Probability limits require at least one sample")
    cut = int(math.ceil(n * p_value))
    lower = min(max(cut, 0), n - 1)
    upper = min(max(n - cut - 1, 0), n - 1)
    return lower, upper


def probability_limits(sorted_samples: np.ndarray, p_value: float) -> Tuple[float, float]:
    """
    Lower and upper probability limits of a sorted null sample.

    Parameters
    ----------
    sorted_samples : np.ndarray
        Null samples in ascending order
    p_value : float
        Significance level in [0, 1]

    Returns
    -------
    Tuple[float, float]
        ``(lower_limit, upper_limit)``; both NaN for an empty sample
    """
    check_p_value(p_value)
    n = len(sorted_samples)
    if n == 0:
        return math.nan, math.nan
    lower, upper = limit_indices(n, p_value)
    return float(sorted_samples[lower]), float(sorted_samples[upper])


def classify_significance(value: float, lower_limit: float, upper_limit: float) -> SignificanceVerdict:
    """
    Classify an observed statistic against its probability limits.

    NaN values or limits compare false and are reported as not significant.
    """
    if value >= upper_limit:
        return SignificanceVerdict.SIGNIFICANT_COLOCATED
    if value <= lower_limit:
        return SignificanceVerdict.SIGNIFICANT_NOT_COLOCATED
    return SignificanceVerdict.NOT_SIGNIFICANT


def build_histogram(samples: np.ndarray, bins: int) -> Histogram:
    """
    Equal-width histogram over the finite range of the samples.

    Bin ``k`` starts at ``min + k*interval`` with
    ``interval = (max - min) / bins``; values are assigned by truncation and
    clamped into the last bin, so the bins partition ``[min, max]``.

    Parameters
    ----------
    samples : np.ndarray
        Sample values; non-finite values are ignored
    bins : int
        Number of bins (at least 1)

    Returns
    -------
    Histogram
        Bin starts, width, counts and normalised density
    """
    if bins < 1:
        raise ConfigurationError("Histogram requires at least one bin")

    values = np.asarray(samples, dtype=np.float64)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return Histogram(
            bin_starts=np.zeros(bins),
            interval=0.0,
            counts=np.zeros(bins, dtype=np.int64),
            pdf=np.zeros(bins),
        )

    minimum = float(values.min())
    maximum = float(values.max())
    interval = (maximum - minimum) / bins
    bin_starts = minimum + np.arange(bins) * interval

    if interval > 0:
        index = np.floor((values - minimum) / interval).astype(np.int64)
        index = np.clip(index, 0, bins - 1)
    else:
        index = np.zeros(values.size, dtype=np.int64)

    counts = np.bincount(index, minlength=bins).astype(np.int64)
    pdf = counts / counts.sum()
    return Histogram(bin_starts=bin_starts, interval=interval, counts=counts, pdf=pdf)
