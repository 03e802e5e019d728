"""
Null distribution assembly and per-statistic significance summaries.
"""

import logging
import math
from typing import Dict, Iterable, Tuple

import numpy as np

from ...errors import ConfigurationError
from ...types import CalculationResult, StatisticSummary, SignificanceVerdict
from ..algorithms.significance import (
    build_histogram,
    check_p_value,
    classify_significance,
    probability_limits,
)

logger = logging.getLogger(__name__)

STATISTICS = ("M1", "M2", "R")
_ATTRIBUTES = {"M1": "m1", "M2": "m2", "R": "r"}


def statistic_values(results: Iterable[CalculationResult], name: str) -> np.ndarray:
    """Values of one statistic ("M1", "M2" or "R") across results."""
    if name not in _ATTRIBUTES:
        raise KeyError(f"Unknown statistic: {name}")
    attribute = _ATTRIBUTES[name]
    return np.array([getattr(result, attribute) for result in results], dtype=np.float64)


class NullDistribution:
    """
    Sorted null samples of M1, M2 and R.

    Only results displaced strictly beyond the random radius contribute;
    non-finite values are dropped.

    Parameters
    ----------
    samples : Dict[str, np.ndarray]
        Null samples keyed by statistic name
    """

    def __init__(self, samples: Dict[str, np.ndarray]):
        self._samples = {}
        for name in STATISTICS:
            values = np.asarray(samples.get(name, ()), dtype=np.float64)
            values = values[np.isfinite(values)]
            self._samples[name] = np.sort(values)

    @classmethod
    def from_results(cls, results: Iterable[CalculationResult], random_radius: float) -> "NullDistribution":
        """
        Build the null from sweep results.

        Parameters
        ----------
        results : Iterable[CalculationResult]
            Results of a permutation sweep
        random_radius : float
            Results at or inside this distance are excluded

        Returns
        -------
        NullDistribution
            Sorted finite samples per statistic
        """
        selected = [result for result in results if result.distance > random_radius]
        distribution = cls({name: statistic_values(selected, name) for name in STATISTICS})
        if selected and len(distribution) == 0:
            logger.warning("No finite null samples beyond random radius %s", random_radius)
        elif not selected:
            logger.warning("No shifts beyond random radius %s; significance is undefined", random_radius)
        return distribution

    def __getitem__(self, name: str) -> np.ndarray:
        return self._samples[name]

    def __len__(self) -> int:
        return max(len(values) for values in self._samples.values())

    def limits(self, name: str, p_value: float) -> Tuple[float, float]:
        """Lower and upper probability limits of one statistic."""
        return probability_limits(self._samples[name], p_value)


def _mean_and_std(samples: np.ndarray) -> Tuple[float, float]:
    if samples.size == 0:
        return math.nan, math.nan
    mean = float(samples.mean())
    if samples.size < 2:
        return mean, math.nan
    return mean, float(samples.std(ddof=1))


class SignificanceTester:
    """
    Percentile significance test of observed statistics against a null.

    Parameters
    ----------
    p_value : float, default 0.05
        Fraction of the null in each tail
    histogram_bins : int, default 16
        Number of bins of the display histogram
    """

    def __init__(self, p_value: float = 0.05, histogram_bins: int = 16):
        self.p_value = check_p_value(p_value)
        if histogram_bins < 1:
            raise ConfigurationError("Histogram requires at least one bin")
        self.histogram_bins = histogram_bins

    def summarize(self, name: str, value: float, samples: np.ndarray) -> StatisticSummary:
        """
        Summarise one statistic.

        Parameters
        ----------
        name : str
            Statistic name
        value : float
            Observed value
        samples : np.ndarray
            Sorted finite null samples

        Returns
        -------
        StatisticSummary
            Limits, verdict, null moments and display histogram
        """
        lower, upper = probability_limits(samples, self.p_value)
        if math.isnan(value):
            verdict = SignificanceVerdict.NOT_SIGNIFICANT
        else:
            verdict = classify_significance(value, lower, upper)
        mean, std = _mean_and_std(samples)
        return StatisticSummary(
            name=name,
            value=float(value),
            mean=mean,
            std=std,
            lower_limit=lower,
            upper_limit=upper,
            verdict=verdict,
            samples=int(samples.size),
            histogram=build_histogram(samples, self.histogram_bins),
        )

    def test(self, observed: CalculationResult, null: NullDistribution) -> Dict[str, StatisticSummary]:
        """Summaries of M1, M2 and R keyed by name."""
        summaries = {}
        for name in STATISTICS:
            value = getattr(observed, _ATTRIBUTES[name])
            summaries[name] = self.summarize(name, value, null[name])
            logger.info("%s = %.4f: limits [%.4f, %.4f] over %d samples, %s",
                        name, value, summaries[name].lower_limit, summaries[name].upper_limit,
                        summaries[name].samples, summaries[name].verdict.value)
        return summaries


def distance_profile(
    results: Iterable[CalculationResult],
    name: str,
    include_sub_random: bool = True,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Mean of a statistic at each rounded shift distance.

    Distances are rounded half up to integers. The profile starts at
    distance 0 when sub-random shifts are included, otherwise at 1; empty
    distances are reported as NaN.

    Parameters
    ----------
    results : Iterable[CalculationResult]
        Sweep results
    name : str
        Statistic name ("M1", "M2" or "R")
    include_sub_random : bool, default True
        Start the profile at distance 0

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Integer distances and the mean statistic at each
    """
    results = list(results)
    start = 0 if include_sub_random else 1
    if not results:
        return np.arange(start, start), np.array([], dtype=np.float64)

    bins = np.array([int(result.distance + 0.5) for result in results], dtype=np.int64)
    values = statistic_values(results, name)
    finite = np.isfinite(values)
    stop = int(bins.max()) + 1
    distances = np.arange(start, max(stop, start))

    sums = np.bincount(bins[finite], weights=values[finite], minlength=stop)
    counts = np.bincount(bins[finite], minlength=stop)
    means = np.where(counts > 0, sums / np.maximum(counts, 1), np.nan)
    return distances, means[start:stop]
