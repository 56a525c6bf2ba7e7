"""
Track Sequencer Tests
=====================

Ordered, exactly-once delivery of worker results to the assembler.
"""

import random
import threading
from pathlib import Path

from dash2gps.models.coordinate import DmsFix, LatHemisphere, LonHemisphere
from dash2gps.models.track import FrameResult
from dash2gps.signals.sequencer import TrackSequencer
from dash2gps.signals.track import TrackAssembler
from dash2gps.stream.frame import FrameFile


def fix_for(index: int) -> DmsFix:
    return DmsFix(LatHemisphere.NORTH, 51, 25, index % 60, LonHemisphere.EAST, 0, 19, 20)


def result(index: int, with_fix: bool = True) -> FrameResult:
    frame = FrameFile(path=Path(f"f{index + 1:09d}.jpg"), index=index)
    return FrameResult(frame=frame, fixes=(fix_for(index),) if with_fix else ())


class TestTrackSequencer:
    """Tests for reorder buffering."""

    def test_releases_in_order(self):
        points = []
        sequencer = TrackSequencer(TrackAssembler(interval_seconds=10), points.append)

        for index in (2, 0, 3, 1):
            sequencer.submit(result(index))

        assert [p.index for p in points] == [0, 1, 2, 3]
        assert sequencer.pending == 0
        assert sequencer.next_index == 4

    def test_waits_for_missing_frame(self):
        points = []
        sequencer = TrackSequencer(TrackAssembler(interval_seconds=10), points.append)

        sequencer.submit(result(1))
        sequencer.submit(result(2))

        assert points == []
        assert sequencer.pending == 2

    def test_flush_skips_gaps(self):
        points = []
        sequencer = TrackSequencer(TrackAssembler(interval_seconds=10), points.append)

        for index in (4, 1, 2):
            sequencer.submit(result(index))
        released = sequencer.flush()

        assert released == 3
        assert [p.index for p in points] == [1, 2, 4]

    def test_duplicates_dropped(self):
        points = []
        sequencer = TrackSequencer(TrackAssembler(interval_seconds=10), points.append)

        sequencer.submit(result(0))
        sequencer.submit(result(0))
        sequencer.submit(result(2))
        sequencer.submit(result(2))
        sequencer.flush()

        assert [p.index for p in points] == [0, 2]

    def test_sink_failure_does_not_escape(self):
        """A sink error is counted and later frames are still released."""
        points = []

        def sink(point):
            if point.index == 1:
                raise BrokenPipeError("stdout closed")
            points.append(point)

        sequencer = TrackSequencer(TrackAssembler(interval_seconds=10), sink)
        for index in (1, 0, 2, 3):
            sequencer.submit(result(index))

        assert [p.index for p in points] == [0, 2, 3]
        assert sequencer.sink_errors == 1
        assert sequencer.next_index == 4

    def test_frames_without_fix_advance_sequence(self):
        points = []
        sequencer = TrackSequencer(TrackAssembler(interval_seconds=10), points.append)

        sequencer.submit(result(1, with_fix=False))
        sequencer.submit(result(0))
        sequencer.submit(result(2))

        assert [p.index for p in points] == [0, 2]
        assert points[1].speed is not None

    def test_concurrent_submitters(self):
        """Many threads submitting in random order still yield an ordered track."""
        points = []
        sequencer = TrackSequencer(TrackAssembler(interval_seconds=1), points.append)
        indices = list(range(200))
        random.Random(7).shuffle(indices)
        chunks = [indices[n::4] for n in range(4)]

        threads = [
            threading.Thread(target=lambda c=chunk: [sequencer.submit(result(i)) for i in c])
            for chunk in chunks
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [p.index for p in points] == list(range(200))
