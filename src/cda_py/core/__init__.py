"""
Core CDA algorithms and processing stages.
"""

from . import algorithms, processors

__all__ = ["algorithms", "processors"]
