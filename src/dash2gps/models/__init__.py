"""
Data Models
===========

Typed records for the dash2gps pipeline.

Models:
    Coordinate:
        - LatHemisphere, LonHemisphere: Hemisphere letters
        - DmsFix: Degrees/minutes/seconds reading from one OCR line
        - DecimalCoordinate: Signed decimal degrees

    Track:
        - SpeedUnit: Reporting unit for speed
        - FrameResult: Per-frame worker outcome
        - TrackSegment: Consecutive fix pair used for speed
        - TrackPoint: Output record
"""

from dash2gps.models.coordinate import (
    DecimalCoordinate,
    DmsFix,
    LatHemisphere,
    LonHemisphere,
)
from dash2gps.models.track import (
    FrameResult,
    SpeedUnit,
    TrackPoint,
    TrackSegment,
    haversine_meters,
)

__all__ = [
    # Coordinate
    "LatHemisphere",
    "LonHemisphere",
    "DmsFix",
    "DecimalCoordinate",
    # Track
    "SpeedUnit",
    "FrameResult",
    "TrackSegment",
    "TrackPoint",
    "haversine_meters",
]
