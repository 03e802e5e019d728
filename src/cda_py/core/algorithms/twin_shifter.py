"""
Toroidal shifting of paired images constrained to a confinement mask.

A shift moves pixel values only among the active positions of the
confinement mask. Each row's active sites are rotated by ``dx`` (wrapping
at the number of active sites, not at the image edge), then each column's
active sites are rotated by ``dy``. The two passes are applied in sequence,
so the result is not a pure 2D translation; this composition defines the
permutation used to build the null distribution. The mask shape is
preserved while the content is decorrelated.

Both images of a twin pair (typically a channel and its mask) are moved in
lock-step. Stacks are shifted slice by slice with no shift across z.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from ...errors import DimensionMismatchError

logger = logging.getLogger(__name__)


def rotate(values: np.ndarray, shift: int) -> np.ndarray:
    """
    Rotate a 1D array so that ``out[(i + shift) % k] = values[i]``.

    Negative shifts rotate the other way.
    """
    k = values.shape[0]
    if k == 0:
        return values.copy()
    return np.roll(values, shift % k)


class TwinImageShifter:
    """
    Shift two 2D images together within a confinement mask.

    Parameters
    ----------
    image1 : np.ndarray
        First image, shape (height, width)
    image2 : np.ndarray
        Second image, same shape as image1
    roi : np.ndarray, optional
        Confinement mask; non-zero pixels are active. None shifts the
        entire image.

    Raises
    ------
    DimensionMismatchError
        If the image and mask shapes differ
    """

    def __init__(self, image1: np.ndarray, image2: np.ndarray, roi: Optional[np.ndarray] = None):
        image1 = np.asarray(image1)
        image2 = np.asarray(image2)
        if image1.ndim != 2:
            raise DimensionMismatchError(f"Expected a 2D image, got shape {image1.shape}")
        if image2.shape != image1.shape:
            raise DimensionMismatchError(
                "The first and second channel image dimensions do not match: "
                f"{image1.shape} != {image2.shape}"
            )
        if roi is not None:
            roi = np.asarray(roi)
            if roi.shape != image1.shape:
                raise DimensionMismatchError(
                    "The channel image and confined image dimensions do not match: "
                    f"{image1.shape} != {roi.shape}"
                )

        self.image1 = image1
        self.image2 = image2
        self.height, self.width = image1.shape
        self._full = roi is None
        self.horizontal_sites = self._build_horizontal_sites(roi)
        self.vertical_sites = self._build_vertical_sites(roi)

    def _build_horizontal_sites(self, roi: Optional[np.ndarray]) -> List[np.ndarray]:
        """Active x positions for each row."""
        if roi is None:
            sites = np.arange(self.width)
            return [sites] * self.height
        return [np.flatnonzero(roi[y]) for y in range(self.height)]

    def _build_vertical_sites(self, roi: Optional[np.ndarray]) -> List[np.ndarray]:
        """Active y positions for each column."""
        if roi is None:
            sites = np.arange(self.height)
            return [sites] * self.width
        return [np.flatnonzero(roi[:, x]) for x in range(self.width)]

    def shift(self, dx: int, dy: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Shift both images.

        Parameters
        ----------
        dx : int
            Rotation applied to the active sites of each row
        dy : int
            Rotation applied to the active sites of each column

        Returns
        -------
        Tuple[np.ndarray, np.ndarray]
            New shifted copies of image1 and image2
        """
        result1 = self.image1.copy()
        result2 = self.image2.copy()
        self._shift_x(result1, result2, int(dx))
        self._shift_y(result1, result2, int(dy))
        return result1, result2

    def _shift_x(self, result1: np.ndarray, result2: np.ndarray, shift: int):
        if shift == 0:
            return
        if self._full:
            result1[:] = np.roll(result1, shift, axis=1)
            result2[:] = np.roll(result2, shift, axis=1)
            return
        for y, sites in enumerate(self.horizontal_sites):
            if sites.size == 0:
                continue
            result1[y, sites] = rotate(result1[y, sites], shift)
            result2[y, sites] = rotate(result2[y, sites], shift)

    def _shift_y(self, result1: np.ndarray, result2: np.ndarray, shift: int):
        if shift == 0:
            return
        if self._full:
            result1[:] = np.roll(result1, shift, axis=0)
            result2[:] = np.roll(result2, shift, axis=0)
            return
        for x, sites in enumerate(self.vertical_sites):
            if sites.size == 0:
                continue
            result1[sites, x] = rotate(result1[sites, x], shift)
            result2[sites, x] = rotate(result2[sites, x], shift)


class TwinStackShifter:
    """
    Shift two stacks together, slice by slice, within a confinement stack.

    Parameters
    ----------
    stack1 : np.ndarray
        First stack, shape (slices, height, width)
    stack2 : np.ndarray
        Second stack, same shape as stack1
    roi_stack : np.ndarray, optional
        Confinement stack; non-zero pixels are active

    Raises
    ------
    DimensionMismatchError
        If the stack shapes differ
    """

    def __init__(self, stack1: np.ndarray, stack2: np.ndarray, roi_stack: Optional[np.ndarray] = None):
        stack1 = np.asarray(stack1)
        stack2 = np.asarray(stack2)
        if stack1.ndim != 3:
            raise DimensionMismatchError(f"Expected a 3D stack, got shape {stack1.shape}")
        if stack2.shape != stack1.shape:
            raise DimensionMismatchError(
                f"The first and second stack dimensions do not match: {stack1.shape} != {stack2.shape}"
            )
        if roi_stack is not None:
            roi_stack = np.asarray(roi_stack)
            if roi_stack.shape != stack1.shape:
                raise DimensionMismatchError(
                    f"The first and third stack dimensions do not match: {stack1.shape} != {roi_stack.shape}"
                )

        self.shape = stack1.shape
        self.dtypes = (stack1.dtype, stack2.dtype)
        self.image_shifters = [
            TwinImageShifter(
                stack1[n], stack2[n], roi_stack[n] if roi_stack is not None else None
            )
            for n in range(stack1.shape[0])
        ]
        logger.debug("Prepared twin shifter for %d slice(s) of %dx%d",
                     self.shape[0], self.shape[2], self.shape[1])

    def shift(self, dx: int, dy: int) -> Tuple[np.ndarray, np.ndarray]:
        """Shift both stacks; returns new arrays."""
        result1 = np.empty(self.shape, dtype=self.dtypes[0])
        result2 = np.empty(self.shape, dtype=self.dtypes[1])
        for n, shifter in enumerate(self.image_shifters):
            result1[n], result2[n] = shifter.shift(dx, dy)
        return result1, result2
