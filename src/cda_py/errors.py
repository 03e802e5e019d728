"""
Exception classes for CDA colocalisation analysis.

All errors raised by the package derive from ``CDAError``. Input validation
errors also derive from ``ValueError`` so callers that only care about bad
input can catch that instead.
"""


class CDAError(Exception):
    """Base exception for CDA analysis operations."""

    pass


class DimensionMismatchError(CDAError, ValueError):
    """Exception raised when channel, mask or confinement dimensions disagree."""

    pass


class ConfigurationError(CDAError, ValueError):
    """Exception raised for invalid analysis options or shift configuration."""

    pass


class EmptyRegionError(CDAError, ValueError):
    """Exception raised when the channels have no intensity inside the confined region."""

    pass
