"""
Parallel evaluation of colocalisation statistics over a list of shifts.

Each shift moves channel 2 and its mask within the confinement, then the
overlap of the channel 1 mask, the shifted channel 2 mask and the
confinement is measured. Shifts are evaluated on a thread pool with at most
``workers`` shifts in flight. Cancellation is cooperative: once the cancel
event is set no further shift is dispatched, in-flight shifts finish, and
the collected results are exactly the dispatched prefix of the shift list.
"""

import logging
import math
import os
import threading
from concurrent.futures import ThreadPoolExecutor, FIRST_COMPLETED, wait
from typing import Callable, Iterable, List, Optional

import numpy as np

from ...types import CalculationResult, PermutationRun, PreparedInputs, Shift
from ..algorithms.correlator import FastCorrelator
from ..algorithms.twin_shifter import TwinStackShifter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _manders(total: int, denominator: float) -> float:
    if denominator == 0:
        return math.nan
    return total / denominator


class PermutationEngine:
    """
    Evaluate M1, M2 and R for displaced copies of channel 2.

    The prepared inputs are shared read-only between workers; every worker
    thread keeps its own accumulator and each shift allocates its own
    shifted buffers.

    Parameters
    ----------
    inputs : PreparedInputs
        Masked channels, confinement and Manders' denominators
    workers : int, optional
        Maximum number of shifts evaluated concurrently (default: CPU count)
    """

    def __init__(self, inputs: PreparedInputs, workers: Optional[int] = None):
        pair = inputs.pair
        self.channel1 = pair.channel1
        self.denominator1 = inputs.denominator1
        self.denominator2 = inputs.denominator2
        self.workers = max(1, workers or os.cpu_count() or 1)

        confined = inputs.confinement != 0
        self.confined_count = int(np.count_nonzero(confined))
        self._base_overlap = (pair.mask1 != 0) & confined
        self.shifter = TwinStackShifter(pair.channel2, pair.mask2, inputs.confinement)
        self._local = threading.local()

    def _correlator(self) -> FastCorrelator:
        correlator = getattr(self._local, "correlator", None)
        if correlator is None:
            correlator = FastCorrelator()
            self._local.correlator = correlator
        return correlator

    def calculate(self, shift: Shift) -> CalculationResult:
        """
        Measure the statistics for a single shift.

        Parameters
        ----------
        shift : Shift
            Displacement applied to channel 2 and its mask

        Returns
        -------
        CalculationResult
            Statistics of the overlap after the shift
        """
        shifted, shifted_mask = self.shifter.shift(shift.dx, shift.dy)
        overlap = self._base_overlap & (shifted_mask != 0)

        correlator = self._correlator()
        correlator.clear()
        correlator.add(self.channel1[overlap], shifted[overlap])

        n = correlator.n
        area = 100.0 * n / self.confined_count if self.confined_count else math.nan
        result = CalculationResult(
            shift=shift,
            distance=shift.distance,
            m1=_manders(correlator.sum_x, self.denominator1),
            m2=_manders(correlator.sum_y, self.denominator2),
            r=correlator.correlation(),
            n=n,
            area=area,
        )
        logger.debug("Shift (%d, %d): n=%d M1=%.4f M2=%.4f R=%.4f",
                     shift.dx, shift.dy, n, result.m1, result.m2, result.r)
        return result

    def run(
        self,
        shifts: Iterable[Shift],
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PermutationRun:
        """
        Evaluate every shift in the list.

        Parameters
        ----------
        shifts : Iterable[Shift]
            Shifts to evaluate, dispatched in order
        progress : Callable[[int, int], None], optional
            Called on the calling thread with ``(completed, total)`` after
            each shift completes
        cancel_event : threading.Event, optional
            Stops dispatching further shifts once set

        Returns
        -------
        PermutationRun
            Collected results and the requested and achieved counts
        """
        shifts = list(shifts)
        total = len(shifts)
        completed: List[CalculationResult] = []
        dispatched = 0
        cancelled = False

        def is_cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="cda-worker") as executor:
            pending = set()
            while True:
                # Refill the window in list order
                while len(pending) < self.workers and dispatched < total:
                    if is_cancelled():
                        cancelled = True
                        break
                    pending.add(executor.submit(self.calculate, shifts[dispatched]))
                    dispatched += 1

                if not pending:
                    break

                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    completed.append(future.result())
                    if progress is not None:
                        progress(len(completed), total)

                if cancelled:
                    # Drain the in-flight shifts without dispatching more
                    for future in pending:
                        completed.append(future.result())
                        if progress is not None:
                            progress(len(completed), total)
                    pending = set()

        if cancelled:
            logger.info("Sweep cancelled after %d of %d shifts", len(completed), total)
        else:
            logger.info("Sweep completed %d shifts on %d worker(s)", len(completed), self.workers)

        return PermutationRun(
            results=completed,
            requested=total,
            achieved=len(completed),
            cancelled=cancelled,
        )
