"""
Configuration classes for CDA analysis.
"""

from .cda_options import CDAOptions, RadiusBoundary, MAXIMUM_SUPPORTED_RADIUS
from .mask_options import MaskOption

__all__ = ['CDAOptions', 'RadiusBoundary', 'MaskOption', 'MAXIMUM_SUPPORTED_RADIUS']
