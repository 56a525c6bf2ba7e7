"""
Track Assembler
===============

Turns per-frame fixes into TrackPoints with speed and absolute time.

This assembler:
    - Converts every DmsFix on a frame to decimal degrees
    - Accumulates elapsed time across frames without a fix
    - Computes speed from the previous fix over the accumulated time
    - Stamps each point with start_time + index * interval when the
      recording start time is known

Elapsed time:
    Time accrues by sequence index, not by call count:

        elapsed += (index - last_index) * interval

    so K fix-less frames between two fixes give (K + 1) * interval,
    and a frame that never arrived still counts.

The assembler is NOT thread-safe. It must be driven from a single
thread of control in frame order (see TrackSequencer).
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from dash2gps.models.coordinate import DecimalCoordinate
from dash2gps.models.track import FrameResult, SpeedUnit, TrackPoint, TrackSegment


logger = logging.getLogger(__name__)


class TrackAssembler:
    """
    Stateful reconstruction of the track from ordered frame results.

    Attributes:
        interval_seconds: Sampling interval between extracted frames
        start_time: Recording start time, if known
        speed_unit: Unit of TrackPoint.speed

    Example:
        assembler = TrackAssembler(interval_seconds=10)

        for result in ordered_results:
            point = assembler.consume(result)
            if point is not None:
                print(point.primary, point.speed)
    """

    def __init__(
        self,
        interval_seconds: float = 10.0,
        start_time: Optional[datetime] = None,
        speed_unit: SpeedUnit = SpeedUnit.KMH,
    ) -> None:
        """
        Initialize track assembler.

        Args:
            interval_seconds: Time between consecutive frame indices
            start_time: Recording start, enables timestamps when known
            speed_unit: Unit of the computed speeds
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval_seconds = interval_seconds
        self.start_time = start_time
        self.speed_unit = speed_unit

        # Internal state
        self._last_fix: Optional[DecimalCoordinate] = None
        self._last_index: Optional[int] = None
        self._elapsed: float = 0.0
        self._points_emitted: int = 0

    @property
    def elapsed_seconds(self) -> float:
        """Time accumulated since the last fix."""
        return self._elapsed

    @property
    def last_fix(self) -> Optional[DecimalCoordinate]:
        return self._last_fix

    @property
    def points_emitted(self) -> int:
        return self._points_emitted

    def timestamp_for(self, index: int) -> Optional[datetime]:
        """Absolute time of a frame, None without a start time."""
        if self.start_time is None:
            return None
        return self.start_time + timedelta(seconds=index * self.interval_seconds)

    def consume(self, result: FrameResult) -> Optional[TrackPoint]:
        """
        Process the next frame result in sequence order.

        Args:
            result: Outcome of one frame

        Returns:
            TrackPoint when the frame held at least one fix, else None
        """
        index = result.index
        if self._last_index is not None:
            steps = index - self._last_index
            if steps <= 0:
                logger.warning(
                    f"Frame {index} consumed out of order (last was {self._last_index}), skipped"
                )
                return None
            self._elapsed += steps * self.interval_seconds
        self._last_index = index

        if not result.fixes:
            return None

        coordinates = tuple(fix.to_decimal() for fix in result.fixes)
        current = coordinates[0]

        speed = None
        if self._last_fix is not None:
            segment = TrackSegment(
                start=self._last_fix,
                end=current,
                elapsed_seconds=self._elapsed,
            )
            speed = segment.speed(self.speed_unit)

        self._last_fix = current
        self._elapsed = 0.0
        self._points_emitted += 1

        return TrackPoint(
            index=index,
            coordinates=coordinates,
            timestamp=self.timestamp_for(index),
            speed=speed,
        )

    def reset(self) -> None:
        """Reset assembler state."""
        self._last_fix = None
        self._last_index = None
        self._elapsed = 0.0
        self._points_emitted = 0
