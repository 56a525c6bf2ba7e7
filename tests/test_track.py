"""
Track Assembly Tests
====================

Decimal conversion, elapsed-time accounting, speed and timestamps.
"""

from datetime import datetime
from pathlib import Path

import pytest

from dash2gps.models.coordinate import DecimalCoordinate, DmsFix, LatHemisphere, LonHemisphere
from dash2gps.models.track import FrameResult, SpeedUnit, TrackPoint, TrackSegment, haversine_meters
from dash2gps.signals.track import TrackAssembler
from dash2gps.stream.frame import FrameFile


def make_fix(lat_sec: int = 48, lon_sec: int = 20, lat="N", lon="E") -> DmsFix:
    return DmsFix(
        lat_hemisphere=LatHemisphere(lat),
        lat_degree=51,
        lat_minute=25,
        lat_second=lat_sec,
        lon_hemisphere=LonHemisphere(lon),
        lon_degree=0,
        lon_minute=19,
        lon_second=lon_sec,
    )


def make_result(index: int, *fixes: DmsFix) -> FrameResult:
    frame = FrameFile(path=Path(f"f{index + 1:09d}.jpg"), index=index)
    return FrameResult(frame=frame, fixes=tuple(fixes))


class TestDecimalConversion:
    """Tests for DMS to decimal conversion."""

    def test_north_east(self, sample_fix):
        decimal = sample_fix.to_decimal()
        assert decimal.latitude == pytest.approx(51 + 25 / 60 + 48 / 3600)
        assert decimal.latitude == pytest.approx(51.43, abs=1e-3)
        assert decimal.longitude == pytest.approx(19 / 60 + 20 / 3600)

    def test_south_west_negated(self):
        decimal = make_fix(lat="S", lon="W").to_decimal()
        assert decimal.latitude == pytest.approx(-(51 + 25 / 60 + 48 / 3600))
        assert decimal.longitude == pytest.approx(-(19 / 60 + 20 / 3600))


class TestDmsFixValidation:
    """Tests for DmsFix invariants."""

    def test_rejects_out_of_range_minutes(self):
        with pytest.raises(ValueError):
            make_fix(lat_sec=200)

    def test_rejects_invalid_hemisphere(self):
        with pytest.raises(ValueError):
            DmsFix("X", 1, 2, 3, LonHemisphere.EAST, 1, 2, 3)

    def test_longitude_degrees_up_to_180(self):
        fix = DmsFix(LatHemisphere.NORTH, 10, 0, 0, LonHemisphere.WEST, 179, 59, 59)
        assert fix.to_decimal().longitude < -179


class TestTrackSegment:
    """Tests for distance and speed."""

    def test_haversine_one_degree_latitude(self):
        distance = haversine_meters(DecimalCoordinate(0.0, 0.0), DecimalCoordinate(1.0, 0.0))
        assert distance == pytest.approx(111195, rel=1e-3)

    def test_speed_units(self):
        segment = TrackSegment(
            start=DecimalCoordinate(0.0, 0.0),
            end=DecimalCoordinate(1.0, 0.0),
            elapsed_seconds=3600.0,
        )
        assert segment.speed(SpeedUnit.KMH) == pytest.approx(111.195, rel=1e-3)
        assert segment.speed(SpeedUnit.MS) == pytest.approx(111195 / 3600, rel=1e-3)
        assert segment.speed(SpeedUnit.MPH) == pytest.approx(69.09, rel=1e-3)

    def test_zero_elapsed_has_no_speed(self):
        segment = TrackSegment(DecimalCoordinate(0, 0), DecimalCoordinate(1, 1), 0.0)
        assert segment.speed() is None


class TestTrackAssembler:
    """Tests for the stateful assembler."""

    def test_first_fix_has_no_speed(self, sample_fix):
        assembler = TrackAssembler(interval_seconds=10)
        point = assembler.consume(make_result(0, sample_fix))

        assert isinstance(point, TrackPoint)
        assert point.speed is None
        assert point.timestamp is None

    def test_frame_without_fix_emits_nothing(self):
        assembler = TrackAssembler(interval_seconds=10)
        assert assembler.consume(make_result(0)) is None

    def test_consecutive_fixes_speed(self):
        """Speed uses one sampling interval between adjacent frames."""
        assembler = TrackAssembler(interval_seconds=10, speed_unit=SpeedUnit.MS)
        first, second = make_fix(lat_sec=48), make_fix(lat_sec=45)

        assembler.consume(make_result(0, first))
        point = assembler.consume(make_result(1, second))

        expected = haversine_meters(first.to_decimal(), second.to_decimal()) / 10.0
        assert point.speed == pytest.approx(expected)

    @pytest.mark.parametrize("gap_frames", [1, 3, 7])
    def test_elapsed_accumulates_across_frames_without_fix(self, gap_frames):
        """K fix-less frames between two fixes give (K + 1) intervals."""
        interval = 10.0
        assembler = TrackAssembler(interval_seconds=interval, speed_unit=SpeedUnit.MS)
        first, second = make_fix(lat_sec=48), make_fix(lat_sec=30)

        assembler.consume(make_result(0, first))
        for index in range(1, gap_frames + 1):
            assert assembler.consume(make_result(index)) is None
        assert assembler.elapsed_seconds == pytest.approx(gap_frames * interval)

        point = assembler.consume(make_result(gap_frames + 1, second))

        distance = haversine_meters(first.to_decimal(), second.to_decimal())
        assert point.speed == pytest.approx(distance / ((gap_frames + 1) * interval))
        assert assembler.elapsed_seconds == 0.0

    def test_missing_frames_still_count(self):
        """A frame index gap accrues time even without a result for it."""
        assembler = TrackAssembler(interval_seconds=5, speed_unit=SpeedUnit.MS)
        first, second = make_fix(lat_sec=48), make_fix(lat_sec=40)

        assembler.consume(make_result(2, first))
        point = assembler.consume(make_result(6, second))

        distance = haversine_meters(first.to_decimal(), second.to_decimal())
        assert point.speed == pytest.approx(distance / 20.0)

    def test_out_of_order_result_skipped(self, sample_fix):
        assembler = TrackAssembler(interval_seconds=10)
        assembler.consume(make_result(5, sample_fix))
        assert assembler.consume(make_result(3, sample_fix)) is None

    def test_timestamps_from_start_time(self, sample_fix):
        start = datetime(2020, 11, 24, 17, 48, 59)
        assembler = TrackAssembler(interval_seconds=10, start_time=start)

        point = assembler.consume(make_result(3, sample_fix))
        assert point.timestamp == datetime(2020, 11, 24, 17, 49, 29)

    def test_multiple_fixes_on_one_frame(self):
        """All fixes are kept; the first one drives speed."""
        assembler = TrackAssembler(interval_seconds=10)
        point = assembler.consume(make_result(0, make_fix(lat_sec=48), make_fix(lat_sec=45)))

        assert len(point.coordinates) == 2
        assert assembler.last_fix == point.primary
        assert assembler.points_emitted == 1

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            TrackAssembler(interval_seconds=0)
