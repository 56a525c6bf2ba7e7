"""
Output Module
=============

Formatting and writing of reconstructed track points.
"""

from dash2gps.output.formatter import (
    DEFAULT_SEPARATOR,
    DEFAULT_TEMPLATE,
    TrackFormatter,
    TrackWriter,
    validate_template,
)

__all__ = [
    "DEFAULT_SEPARATOR",
    "DEFAULT_TEMPLATE",
    "TrackFormatter",
    "TrackWriter",
    "validate_template",
]
