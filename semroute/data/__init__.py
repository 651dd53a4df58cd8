"""
Data module: route definition files and labelled query samples.
"""

from semroute.data.loader import (
    MIN_UTTERANCES_PER_ROUTE,
    RouteFileMetadata,
    RouteLoader,
    Sample,
    ValidationResult,
)

__all__ = [
    "MIN_UTTERANCES_PER_ROUTE",
    "RouteFileMetadata",
    "RouteLoader",
    "Sample",
    "ValidationResult",
]
