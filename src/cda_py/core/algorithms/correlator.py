"""
Pearson correlation accumulators for paired integer intensities.

Two equivalent ways of computing the correlation are provided:

- Direct: store every pair, compute the means, then the mean-centred
  double precision formula.
- Streaming: keep running integer sums and evaluate
  ``n*sum_xy - sum_x*sum_y`` (and the two variance terms) exactly with
  Python's arbitrary-precision integers, converting to float only for the
  final division. The products overflow 64-bit integers for large images
  with 16-bit intensities, so they are never formed in numpy.

Array additions are vectorised in int64 chunks small enough that no chunk
sum can overflow; each chunk is folded into the Python integer totals.
"""

import math
from typing import Optional, Tuple

import numpy as np

# Ceiling for any int64 partial sum built from a chunk of squared values
_INT64_SAFE = 1 << 62


def _as_samples(values) -> np.ndarray:
    array = np.asarray(values)
    if array.ndim != 1:
        array = array.ravel()
    if array.size and array.dtype.kind not in "iub":
        raise TypeError(f"Correlation requires integer samples, got dtype {array.dtype}")
    return array.astype(np.int64, copy=False)


def _paired(x, y, length: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Return the leading pairs of x and y, truncated to the shorter array and length."""
    x = _as_samples(x)
    y = _as_samples(y)
    n = min(x.size, y.size)
    if length is not None:
        n = max(0, min(n, int(length)))
    return x[:n], y[:n]


def integer_sum(values) -> int:
    """
    Exact sum of integer values as a Python integer.

    Values are added in int64 chunks sized so that no chunk total can
    overflow; values too large for that are summed as Python integers.
    """
    array = np.asarray(values).ravel()
    if array.size == 0:
        return 0
    if array.dtype.kind not in "iub":
        raise TypeError(f"Exact sums require integer values, got dtype {array.dtype}")

    largest = max(abs(int(array.min())), abs(int(array.max())))
    if largest >= _INT64_SAFE:
        return sum(int(v) for v in array.tolist())

    array = array.astype(np.int64, copy=False)
    step = max(1, _INT64_SAFE // max(1, largest))
    return sum(int(array[start:start + step].sum()) for start in range(0, array.size, step))


def integer_sums(x: np.ndarray, y: np.ndarray) -> Tuple[int, int, int, int, int]:
    """
    Exact sums of a paired integer sample.

    Parameters
    ----------
    x, y : np.ndarray
        Equal length int64 arrays

    Returns
    -------
    Tuple[int, int, int, int, int]
        ``(sum_x, sum_y, sum_xx, sum_yy, sum_xy)`` as Python integers
    """
    if x.size == 0:
        return 0, 0, 0, 0, 0

    largest = max(abs(int(x.min())), abs(int(x.max())), abs(int(y.min())), abs(int(y.max())))
    square = largest * largest
    if square >= _INT64_SAFE:
        # A single product would overflow int64
        xs = [int(v) for v in x.tolist()]
        ys = [int(v) for v in y.tolist()]
        return (
            sum(xs), sum(ys),
            sum(a * a for a in xs), sum(b * b for b in ys),
            sum(a * b for a, b in zip(xs, ys)),
        )

    step = max(1, _INT64_SAFE // max(1, square))
    sum_x = sum_y = sum_xx = sum_yy = sum_xy = 0
    for start in range(0, x.size, step):
        xs = x[start:start + step]
        ys = y[start:start + step]
        sum_x += int(xs.sum())
        sum_y += int(ys.sum())
        sum_xx += int(np.dot(xs, xs))
        sum_yy += int(np.dot(ys, ys))
        sum_xy += int(np.dot(xs, ys))
    return sum_x, sum_y, sum_xx, sum_yy, sum_xy


def calculate_correlation(sum_x: int, sum_xy: int, sum_xx: int, sum_yy: int, sum_y: int, n: int) -> float:
    """
    Pearson correlation from running sums.

    All intermediate products are exact integers. Returns NaN when there
    are no samples or either channel has zero variance.
    """
    n = int(n)
    if n <= 0:
        return math.nan

    sum_x = int(sum_x)
    sum_y = int(sum_y)
    numerator = n * int(sum_xy) - sum_x * sum_y
    denominator_x = n * int(sum_xx) - sum_x * sum_x
    denominator_y = n * int(sum_yy) - sum_y * sum_y

    if denominator_x == 0 or denominator_y == 0:
        return math.nan

    return numerator / math.sqrt(denominator_x * denominator_y)


def _direct_correlation(x: np.ndarray, y: np.ndarray) -> float:
    n = x.size
    if n == 0:
        return math.nan

    ux = integer_sum(x) / n
    uy = integer_sum(y) / n

    d1 = x - ux
    d2 = y - uy
    p1 = float(np.dot(d1, d1))
    p2 = float(np.dot(d2, d2))
    p3 = float(np.dot(d1, d2))

    if p1 == 0.0 or p2 == 0.0:
        return math.nan
    return p3 / math.sqrt(p1 * p2)


def correlation(x, y, n: Optional[int] = None) -> float:
    """
    Pearson correlation using the mean-centred (direct) formula.

    Parameters
    ----------
    x, y : array_like
        Integer samples; the shorter length is used
    n : int, optional
        Use only the first n pairs

    Returns
    -------
    float
        Correlation, or NaN if undefined
    """
    if x is None or y is None:
        return math.nan
    return _direct_correlation(*_paired(x, y, n))


def fast_correlation(x, y, n: Optional[int] = None) -> float:
    """Pearson correlation using exact running sums (streaming formula)."""
    if x is None or y is None:
        return math.nan
    xs, ys = _paired(x, y, n)
    sum_x, sum_y, sum_xx, sum_yy, sum_xy = integer_sums(xs, ys)
    return calculate_correlation(sum_x, sum_xy, sum_xx, sum_yy, sum_y, xs.size)


class FastCorrelator:
    """
    Streaming correlation accumulator.

    Only the running sums are kept, so the accumulator can absorb any
    number of pairs in constant memory.
    """

    def __init__(self):
        self.clear()

    def add(self, x, y, length: Optional[int] = None):
        """
        Add a single pair or two arrays of pairs.

        Parameters
        ----------
        x, y : int or array_like
            A pair of values, or integer arrays (the shorter length is used)
        length : int, optional
            Add only the first ``length`` pairs of the arrays
        """
        if x is None or y is None:
            return
        if np.ndim(x) == 0 and np.ndim(y) == 0:
            self._add_value(int(x), int(y))
            return
        xs, ys = _paired(x, y, length)
        self._add_arrays(xs, ys)

    def _add_value(self, x: int, y: int):
        self._sum_x += x
        self._sum_y += y
        self._sum_xx += x * x
        self._sum_yy += y * y
        self._sum_xy += x * y
        self._n += 1

    def _add_arrays(self, xs: np.ndarray, ys: np.ndarray):
        sum_x, sum_y, sum_xx, sum_yy, sum_xy = integer_sums(xs, ys)
        self._sum_x += sum_x
        self._sum_y += sum_y
        self._sum_xx += sum_xx
        self._sum_yy += sum_yy
        self._sum_xy += sum_xy
        self._n += xs.size

    def correlation(self) -> float:
        """Correlation of all pairs added so far (NaN if undefined)."""
        return calculate_correlation(
            self._sum_x, self._sum_xy, self._sum_xx, self._sum_yy, self._sum_y, self._n
        )

    def clear(self):
        """Reset the sums."""
        self._sum_x = self._sum_y = 0
        self._sum_xx = self._sum_yy = self._sum_xy = 0
        self._n = 0

    @property
    def n(self) -> int:
        return self._n

    @property
    def sum_x(self) -> int:
        return self._sum_x

    @property
    def sum_y(self) -> int:
        return self._sum_y

    @property
    def sum_xx(self) -> int:
        return self._sum_xx

    @property
    def sum_yy(self) -> int:
        return self._sum_yy

    @property
    def sum_xy(self) -> int:
        return self._sum_xy


class Correlator(FastCorrelator):
    """
    Correlation accumulator that also stores every pair.

    ``correlation()`` uses the direct mean-centred formula on the stored
    pairs; ``fast_correlation()`` uses the running sums. The two agree
    within floating point tolerance, including on NaN results.

    Parameters
    ----------
    capacity : int, default 100
        Initial storage capacity; grows as pairs are added
    """

    def __init__(self, capacity: int = 100):
        capacity = max(0, int(capacity))
        self._x = np.zeros(capacity, dtype=np.int64)
        self._y = np.zeros(capacity, dtype=np.int64)
        super().__init__()

    def _check_capacity(self, length: int):
        min_capacity = self._n + length
        if min_capacity > self._x.size:
            new_capacity = (self._x.size * 3) // 2 + 1
            if new_capacity < min_capacity:
                new_capacity = min_capacity
            x = np.zeros(new_capacity, dtype=np.int64)
            y = np.zeros(new_capacity, dtype=np.int64)
            x[:self._n] = self._x[:self._n]
            y[:self._n] = self._y[:self._n]
            self._x = x
            self._y = y

    def _add_value(self, x: int, y: int):
        self._check_capacity(1)
        self._x[self._n] = x
        self._y[self._n] = y
        super()._add_value(x, y)

    def _add_arrays(self, xs: np.ndarray, ys: np.ndarray):
        self._check_capacity(xs.size)
        self._x[self._n:self._n + xs.size] = xs
        self._y[self._n:self._n + ys.size] = ys
        super()._add_arrays(xs, ys)

    def correlation(self) -> float:
        """Correlation of the stored pairs using the direct formula."""
        return _direct_correlation(self._x[:self._n], self._y[:self._n])

    def fast_correlation(self) -> float:
        """Correlation of the stored pairs using the running sums."""
        return super().correlation()

    def get_x(self) -> np.ndarray:
        return self._x[:self._n].copy()

    def get_y(self) -> np.ndarray:
        return self._y[:self._n].copy()

    @property
    def capacity(self) -> int:
        return self._x.size
