"""
Track Models
============

Records that flow between the workers, the sequencer and the output sink.

    FrameResult  - what a worker learned from one frame (possibly nothing)
    TrackSegment - two consecutive fixes and the time between them
    TrackPoint   - one output record, emitted for every frame with a fix
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from dash2gps.models.coordinate import DecimalCoordinate, DmsFix
from dash2gps.stream.frame import FrameFile


EARTH_RADIUS_METERS = 6371000.0


class SpeedUnit(str, Enum):
    """Unit used when reporting segment speed."""

    KMH = "kmh"
    MPH = "mph"
    MS = "ms"

    def from_meters_per_second(self, value: float) -> float:
        if self is SpeedUnit.KMH:
            return value * 3.6
        if self is SpeedUnit.MPH:
            return value * 3600.0 / 1609.344
        return value


def haversine_meters(start: DecimalCoordinate, end: DecimalCoordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    phi1 = math.radians(start.latitude)
    phi2 = math.radians(end.latitude)
    dphi = math.radians(end.latitude - start.latitude)
    dlambda = math.radians(end.longitude - start.longitude)

    a = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True, slots=True)
class TrackSegment:
    """
    Two consecutive fixes and the elapsed time between them.

    Only used to derive a speed value; not retained afterwards.
    """

    start: DecimalCoordinate
    end: DecimalCoordinate
    elapsed_seconds: float

    @property
    def distance_meters(self) -> float:
        return haversine_meters(self.start, self.end)

    def speed(self, unit: SpeedUnit = SpeedUnit.KMH) -> Optional[float]:
        """Average speed over the segment, None when no time elapsed."""
        if self.elapsed_seconds <= 0:
            return None
        return unit.from_meters_per_second(self.distance_meters / self.elapsed_seconds)


@dataclass(frozen=True, slots=True)
class FrameResult:
    """
    Outcome of processing one frame.

    Every consumed frame produces exactly one result, including frames
    that failed or held no readable fix, so elapsed time can be accounted
    for downstream.

    Attributes:
        frame: Source frame
        fixes: Fixes parsed from the frame's text, in line order
        error: Error description when processing failed
    """

    frame: FrameFile
    fixes: Tuple[DmsFix, ...] = ()
    error: Optional[str] = None

    @property
    def index(self) -> int:
        return self.frame.index

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class TrackPoint:
    """
    One reconstructed position on the track.

    Attributes:
        index: 0-based frame sequence index
        coordinates: All fixes found on the frame (at least one)
        timestamp: Absolute time when the recording start is known
        speed: Speed since the previous fix, in the assembler's unit
    """

    index: int
    coordinates: Tuple[DecimalCoordinate, ...]
    timestamp: Optional[datetime] = None
    speed: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.coordinates:
            raise ValueError("TrackPoint requires at least one coordinate")

    @property
    def primary(self) -> DecimalCoordinate:
        """First coordinate found on the frame."""
        return self.coordinates[0]

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "index": self.index,
            "coordinates": [c.to_dict() for c in self.coordinates],
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "speed": round(self.speed, 2) if self.speed is not None else None,
        }
