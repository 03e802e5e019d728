"""
Mask construction and input preparation.

This module converts ROI sources into 0/255 masks, applies the confinement
policy and computes the Manders' denominators before a sweep starts.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ...errors import ConfigurationError, DimensionMismatchError, EmptyRegionError
from ...types import ChannelPair, PreparedInputs, MaskOption, MASK_ON, MASK_OFF
from ..algorithms.correlator import integer_sum

logger = logging.getLogger(__name__)


def as_stack(array: np.ndarray, name: str = "image") -> np.ndarray:
    """Promote a (height, width) image to a single-slice (1, height, width) stack."""
    array = np.asarray(array)
    if array.ndim == 2:
        return array[np.newaxis]
    if array.ndim == 3:
        return array
    raise DimensionMismatchError(f"{name} must be 2D or 3D, got shape {array.shape}")


def default_mask(shape: Sequence[int]) -> np.ndarray:
    """Mask that covers the entire image."""
    return np.full(tuple(shape), MASK_ON, dtype=np.uint8)


def normalise_mask(mask: np.ndarray) -> np.ndarray:
    """Map every non-zero pixel to 255 and the rest to 0."""
    mask = np.asarray(mask)
    return np.where(mask != 0, MASK_ON, MASK_OFF).astype(np.uint8)


def create_mask(
    roi_image: Optional[np.ndarray],
    option: MaskOption,
    shape: Optional[Sequence[int]] = None,
    min_value: Optional[float] = None,
    bounds: Optional[Tuple[int, int, int, int]] = None,
    roi_shape: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Build a mask from an ROI source image.

    Parameters
    ----------
    roi_image : np.ndarray, optional
        ROI source image or stack
    option : MaskOption
        How the source is converted
    shape : Sequence[int], optional
        Mask shape when no usable source is given (defaults to the source shape)
    min_value : float, optional
        Threshold for MaskOption.MIN_VALUE; pixels at or above it are active
    bounds : Tuple[int, int, int, int], optional
        ``(x, y, width, height)`` rectangle for MaskOption.USE_ROI
    roi_shape : np.ndarray, optional
        Irregular shape within the bounds for MaskOption.USE_ROI; non-zero is inside

    Returns
    -------
    np.ndarray
        uint8 mask with 255 for active pixels
    """
    if shape is None:
        if roi_image is None:
            raise ConfigurationError("A mask shape is required when no ROI image is given")
        shape = np.shape(roi_image)

    if option is MaskOption.NONE or roi_image is None:
        return default_mask(shape)

    roi_image = np.asarray(roi_image)
    if roi_image.shape[-2:] != tuple(shape)[-2:]:
        # A source of a different size cannot be aligned with the channel
        logger.warning("ROI image shape %s does not match %s; using the entire image",
                       roi_image.shape, tuple(shape))
        return default_mask(shape)

    if option is MaskOption.USE_AS_MASK:
        return np.where(roi_image >= 1, MASK_ON, MASK_OFF).astype(np.uint8)

    if option is MaskOption.MIN_VALUE:
        if min_value is None:
            raise ConfigurationError("A minimum value is required for the minimum value mask option")
        return np.where(roi_image >= min_value, MASK_ON, MASK_OFF).astype(np.uint8)

    if option is MaskOption.USE_ROI:
        if bounds is None:
            return default_mask(roi_image.shape)
        x, y, width, height = bounds
        region = np.ones((height, width), dtype=bool)
        if roi_shape is not None:
            region = np.asarray(roi_shape) != 0
            if region.shape != (height, width):
                raise DimensionMismatchError(
                    f"ROI shape {region.shape} does not match its bounds {(height, width)}"
                )
        plane = np.zeros(roi_image.shape[-2:], dtype=np.uint8)
        # Clip the rectangle to the image
        y0, x0 = max(y, 0), max(x, 0)
        y1, x1 = min(y + height, plane.shape[0]), min(x + width, plane.shape[1])
        if y1 > y0 and x1 > x0:
            window = region[y0 - y:y1 - y, x0 - x:x1 - x]
            plane[y0:y1, x0:x1][window] = MASK_ON
        return np.broadcast_to(plane, roi_image.shape).copy()

    raise ConfigurationError(f"Unknown mask option: {option}")


def intersect_mask(target: np.ndarray, mask: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Zero the target outside the mask.

    Returns
    -------
    Tuple[np.ndarray, int]
        Masked copy of the target and the sum of its retained values
    """
    result = np.where(mask != 0, target, 0).astype(target.dtype, copy=False)
    return result, integer_sum(result)


def union_mask(mask: np.ndarray, other: np.ndarray) -> np.ndarray:
    """Pixels active in either mask."""
    return np.where((mask != 0) | (other != 0), MASK_ON, MASK_OFF).astype(np.uint8)


def total_intensity(image: np.ndarray, mask: np.ndarray, confinement: Optional[np.ndarray] = None) -> float:
    """Total image intensity inside the mask, and the confinement if given."""
    selected = mask != 0
    if confinement is not None:
        selected &= confinement != 0
    return float(integer_sum(image[selected]))


def _check_integer(array: np.ndarray, name: str):
    if array.dtype.kind not in "iub":
        raise TypeError(f"{name} must contain integer samples, got dtype {array.dtype}")


def prepare_inputs(
    channel1: np.ndarray,
    channel2: np.ndarray,
    mask1: Optional[np.ndarray] = None,
    mask2: Optional[np.ndarray] = None,
    confinement: Optional[np.ndarray] = None,
    expand_confined: bool = False,
) -> PreparedInputs:
    """
    Validate and restrict the inputs of a CDA analysis.

    Missing masks cover the entire image. By default each channel mask is
    restricted to the confinement; with ``expand_confined`` the confinement
    is instead expanded to include both channel masks. Channel intensities
    outside the confinement are zeroed.

    Parameters
    ----------
    channel1, channel2 : np.ndarray
        Integer images (height, width) or stacks (slices, height, width)
    mask1, mask2 : np.ndarray, optional
        Channel masks; non-zero pixels are active
    confinement : np.ndarray, optional
        Confinement mask; non-zero pixels are active
    expand_confined : bool, default False
        Expand the confinement to include the channel masks

    Returns
    -------
    PreparedInputs
        Masked channels, confinement and Manders' denominators

    Raises
    ------
    DimensionMismatchError
        If any of the inputs disagree in width, height or slice count
    EmptyRegionError
        If neither channel has intensity inside its mask within the confinement
    """
    stack1 = as_stack(channel1, "Channel 1")
    stack2 = as_stack(channel2, "Channel 2")
    _check_integer(stack1, "Channel 1")
    _check_integer(stack2, "Channel 2")
    shape = stack1.shape

    masks = []
    for name, mask in (("Mask 1", mask1), ("Mask 2", mask2), ("Confinement", confinement)):
        masks.append(default_mask(shape) if mask is None else normalise_mask(as_stack(mask, name)))

    for name, array in (("Channel 2", stack2), ("Mask 1", masks[0]),
                        ("Mask 2", masks[1]), ("Confinement", masks[2])):
        if array.shape != shape:
            raise DimensionMismatchError(
                f"Images must be the same width and height and depth: "
                f"channel 1 is {shape}, {name.lower()} is {array.shape}"
            )

    roi1, roi2, confined = masks
    if expand_confined:
        confined = union_mask(union_mask(confined, roi1), roi2)
    else:
        roi1, _ = intersect_mask(roi1, confined)
        roi2, _ = intersect_mask(roi2, confined)

    stack1, _ = intersect_mask(stack1, confined)
    stack2, _ = intersect_mask(stack2, confined)

    denominator1 = total_intensity(stack1, roi1, confined)
    denominator2 = total_intensity(stack2, roi2, confined)
    if denominator1 == 0 and denominator2 == 0:
        raise EmptyRegionError("ROIs do not overlap: no channel intensity inside the confined region")
    for channel, denominator in ((1, denominator1), (2, denominator2)):
        if denominator == 0:
            logger.warning("Channel %d has no intensity inside its mask; M%d will be NaN",
                           channel, channel)

    logger.info("Prepared %d slice(s) of %dx%d: %d confined pixels, denominators %.0f / %.0f",
                shape[0], shape[2], shape[1], int(np.count_nonzero(confined)),
                denominator1, denominator2)

    return PreparedInputs(
        pair=ChannelPair(channel1=stack1, mask1=roi1, channel2=stack2, mask2=roi2),
        confinement=confined,
        denominator1=denominator1,
        denominator2=denominator2,
    )
