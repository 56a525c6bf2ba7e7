"""
Track Output Tests
==================

Template validation and line rendering.
"""

import io
from datetime import datetime

import pytest

from dash2gps.models.coordinate import DecimalCoordinate
from dash2gps.models.track import SpeedUnit, TrackPoint
from dash2gps.output.formatter import TrackFormatter, TrackWriter, validate_template


def point(*coords, **kwargs) -> TrackPoint:
    return TrackPoint(
        index=kwargs.pop("index", 3),
        coordinates=tuple(DecimalCoordinate(lat, lon) for lat, lon in coords),
        **kwargs,
    )


class TestValidateTemplate:
    """Tests for template checking."""

    @pytest.mark.parametrize("template", [
        "{lat}, {lon}",
        "{time},{lat},{lon},{speed}",
        "{index}: {lat} {lon} {speed} {unit}",
        "no placeholders at all",
        "{{literal}} {lat}",
    ])
    def test_valid(self, template):
        assert validate_template(template) == template

    @pytest.mark.parametrize("template", [
        "{latitude}",
        "{lat} {alt}",
        "{0}",
        "{}",
        "{lat",
        "{lat:.4f}",
    ])
    def test_invalid(self, template):
        with pytest.raises(ValueError):
            validate_template(template)


class TestTrackFormatter:
    """Tests for line rendering."""

    def test_default_template(self):
        line = TrackFormatter().format(point((51.43, 0.322222)))
        assert line == "51.430000, 0.322222"

    def test_negative_hemispheres(self):
        line = TrackFormatter().format(point((-33.8568, -151.2153)))
        assert line == "-33.856800, -151.215300"

    def test_multiple_fixes_single_line(self):
        formatter = TrackFormatter(template="{lat},{lon}", separator=" ; ")
        line = formatter.format(point((1.0, 2.0), (3.0, 4.0)))

        assert line == "1.000000,2.000000 ; 3.000000,4.000000"
        assert "\n" not in line

    def test_time_speed_and_unit(self):
        formatter = TrackFormatter(
            template="{index} {time} {speed}{unit}",
            speed_unit=SpeedUnit.MPH,
        )
        line = formatter.format(
            point((1.0, 2.0), index=7, timestamp=datetime(2021, 6, 6, 12, 42, 29), speed=51.04)
        )
        assert line == "7 2021-06-06T12:42:29 51.0mph"

    def test_unknown_values_render_empty(self):
        formatter = TrackFormatter(template="[{time}] [{speed}]")
        assert formatter.format(point((1.0, 2.0))) == "[] []"

    def test_invalid_template_rejected(self):
        with pytest.raises(ValueError):
            TrackFormatter(template="{altitude}")


class TestTrackWriter:
    """Tests for the output sink."""

    def test_writes_one_line_per_point(self):
        out = io.StringIO()
        writer = TrackWriter(TrackFormatter(), out)

        writer(point((1.0, 2.0)))
        writer(point((3.0, 4.0), (5.0, 6.0)))

        assert out.getvalue() == (
            "1.000000, 2.000000\n"
            "3.000000, 4.000000 | 5.000000, 6.000000\n"
        )
        assert writer.lines_written == 2
