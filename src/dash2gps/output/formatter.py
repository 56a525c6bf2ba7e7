"""
Track Output
============

Renders TrackPoints as text lines.

Template placeholders:
    {lat}    latitude, 6 decimals
    {lon}    longitude, 6 decimals
    {time}   ISO 8601 timestamp, empty when unknown
    {speed}  speed with 1 decimal, empty when unknown
    {unit}   speed unit name
    {index}  frame sequence index

Several fixes on one frame are rendered one by one and joined with the
separator, so each frame is always exactly one line.
"""

import logging
import string
import sys
from typing import Dict, Optional, TextIO

from dash2gps.models.coordinate import DecimalCoordinate
from dash2gps.models.track import SpeedUnit, TrackPoint


logger = logging.getLogger(__name__)


DEFAULT_TEMPLATE = "{lat}, {lon}"
DEFAULT_SEPARATOR = " | "
PLACEHOLDERS = ("lat", "lon", "time", "speed", "unit", "index")


def validate_template(template: str) -> str:
    """
    Check that a template only uses known placeholders.

    Raises:
        ValueError: On unknown placeholders or malformed braces
    """
    try:
        fields = [name for _, name, _, _ in string.Formatter().parse(template) if name is not None]
    except ValueError as e:
        raise ValueError(f"Malformed output template {template!r}: {e}") from e

    unknown = [name for name in fields if name not in PLACEHOLDERS]
    if unknown:
        raise ValueError(
            f"Unknown placeholder(s) {', '.join('{' + n + '}' for n in unknown)} "
            f"in output template; allowed: {', '.join('{' + p + '}' for p in PLACEHOLDERS)}"
        )

    # values are pre-rendered strings, so numeric format specs cannot apply
    try:
        template.format_map({name: "0" for name in PLACEHOLDERS})
    except (ValueError, IndexError, KeyError) as e:
        raise ValueError(f"Output template {template!r} cannot be rendered: {e}") from e
    return template


class TrackFormatter:
    """
    Template-based line formatter.

    Attributes:
        template: Per-fix template
        separator: Joins multiple fixes from the same frame
        speed_unit: Reported in {unit}
    """

    def __init__(
        self,
        template: str = DEFAULT_TEMPLATE,
        separator: str = DEFAULT_SEPARATOR,
        speed_unit: SpeedUnit = SpeedUnit.KMH,
    ) -> None:
        self.template = validate_template(template)
        self.separator = separator
        self.speed_unit = speed_unit

    def _values(self, point: TrackPoint, coordinate: DecimalCoordinate) -> Dict[str, str]:
        return {
            "lat": f"{coordinate.latitude:.6f}",
            "lon": f"{coordinate.longitude:.6f}",
            "time": point.timestamp.isoformat() if point.timestamp else "",
            "speed": f"{point.speed:.1f}" if point.speed is not None else "",
            "unit": self.speed_unit.value,
            "index": str(point.index),
        }

    def format(self, point: TrackPoint) -> str:
        """Render one TrackPoint as a single line (no newline)."""
        return self.separator.join(
            self.template.format_map(self._values(point, coordinate))
            for coordinate in point.coordinates
        )


class TrackWriter:
    """
    Output sink writing one formatted line per TrackPoint.

    Usable directly as the TrackSequencer sink.
    """

    def __init__(self, formatter: TrackFormatter, stream: Optional[TextIO] = None) -> None:
        self.formatter = formatter
        self.stream = stream if stream is not None else sys.stdout
        self.lines_written: int = 0

    def __call__(self, point: TrackPoint) -> None:
        self.write(point)

    def write(self, point: TrackPoint) -> None:
        self.stream.write(self.formatter.format(point) + "\n")
        self.stream.flush()
        self.lines_written += 1
