"""
Coordinate Models
=================

Geodetic readings decoded from the telemetry overlay.

Two representations are used by the pipeline:
    - DmsFix: degrees/minutes/seconds exactly as read from one text line
    - DecimalCoordinate: signed decimal degrees (South/West negative)

Conversion:
    decimal = degree + minute / 60 + second / 3600, negated for S / W

Example:
    from dash2gps.models.coordinate import DmsFix, LatHemisphere, LonHemisphere

    fix = DmsFix(
        lat_hemisphere=LatHemisphere.NORTH, lat_degree=51, lat_minute=25, lat_second=48,
        lon_hemisphere=LonHemisphere.EAST, lon_degree=0, lon_minute=19, lon_second=20,
    )
    print(fix.to_decimal())  # DecimalCoordinate(lat=51.430000, lon=0.322222)
"""

from dataclasses import dataclass
from enum import Enum


# Components are kept within signed 8-bit range, degrees excepted
COMPONENT_MAX = 127
LATITUDE_DEGREE_MAX = 90
LONGITUDE_DEGREE_MAX = 180


class LatHemisphere(str, Enum):
    """Latitude hemisphere letter as printed on the overlay."""

    NORTH = "N"
    SOUTH = "S"


class LonHemisphere(str, Enum):
    """Longitude hemisphere letter as printed on the overlay."""

    EAST = "E"
    WEST = "W"


@dataclass(frozen=True, slots=True)
class DecimalCoordinate:
    """
    Latitude/longitude in signed decimal degrees.

    Attributes:
        latitude: Degrees, negative in the southern hemisphere
        longitude: Degrees, negative in the western hemisphere
    """

    latitude: float
    longitude: float

    def __repr__(self) -> str:
        return f"DecimalCoordinate(lat={self.latitude:.6f}, lon={self.longitude:.6f})"

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "lat": round(self.latitude, 6),
            "lon": round(self.longitude, 6),
        }


@dataclass(frozen=True, slots=True)
class DmsFix:
    """
    One telemetry reading in degrees-minutes-seconds.

    Produced by the coordinate parser from a single OCR line and consumed
    once by the track assembler. All eight fields are required.

    Attributes:
        lat_hemisphere: N or S
        lat_degree: 0..90
        lat_minute: 0..127 (parser slack above 59 is tolerated)
        lat_second: 0..127
        lon_hemisphere: E or W
        lon_degree: 0..180
        lon_minute: 0..127
        lon_second: 0..127
    """

    lat_hemisphere: LatHemisphere
    lat_degree: int
    lat_minute: int
    lat_second: int

    lon_hemisphere: LonHemisphere
    lon_degree: int
    lon_minute: int
    lon_second: int

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not isinstance(self.lat_hemisphere, LatHemisphere):
            raise ValueError(f"invalid latitude hemisphere: {self.lat_hemisphere!r}")
        if not isinstance(self.lon_hemisphere, LonHemisphere):
            raise ValueError(f"invalid longitude hemisphere: {self.lon_hemisphere!r}")

        _check_range("lat_degree", self.lat_degree, LATITUDE_DEGREE_MAX)
        _check_range("lon_degree", self.lon_degree, LONGITUDE_DEGREE_MAX)
        for name in ("lat_minute", "lat_second", "lon_minute", "lon_second"):
            _check_range(name, getattr(self, name), COMPONENT_MAX)

    def to_decimal(self) -> DecimalCoordinate:
        """Convert to signed decimal degrees."""
        lat = self.lat_degree + self.lat_minute / 60.0 + self.lat_second / 3600.0
        lon = self.lon_degree + self.lon_minute / 60.0 + self.lon_second / 3600.0

        if self.lat_hemisphere is LatHemisphere.SOUTH:
            lat = -lat
        if self.lon_hemisphere is LonHemisphere.WEST:
            lon = -lon

        return DecimalCoordinate(latitude=lat, longitude=lon)

    def __str__(self) -> str:
        return (
            f"{self.lat_hemisphere.value}{self.lat_degree}°{self.lat_minute}'{self.lat_second}\" "
            f"{self.lon_hemisphere.value}{self.lon_degree}°{self.lon_minute}'{self.lon_second}\""
        )


def _check_range(name: str, value: int, upper: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= upper:
        raise ValueError(f"{name} out of range 0..{upper}: {value}")
