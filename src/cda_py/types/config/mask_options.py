"""
Options for building a mask from an ROI source image.
"""

from enum import Enum


class MaskOption(Enum):
    """
    How an ROI source image is converted to a mask.

    NONE covers the entire image. MIN_VALUE keeps pixels at or above a
    minimum value. USE_AS_MASK keeps non-zero pixels. USE_ROI keeps a
    rectangular region, optionally shaped by an irregular ROI mask.
    """
    NONE = "(None)"
    MIN_VALUE = "Min Display Value"
    USE_ROI = "Use ROI"
    USE_AS_MASK = "Use as mask"
