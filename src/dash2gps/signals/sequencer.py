"""
Track Sequencer
===============

Restores frame order between the worker pool and the track assembler.

Workers finish frames in arbitrary order. Speed and time reconstruction
need every frame, once, in index order, so all results funnel through
one sequencer which owns the only TrackAssembler.

    worker 1 ─┐
    worker 2 ─┼─> submit() ─> heap ─> contiguous release ─> assembler ─> sink
    worker N ─┘

Results are released as soon as the run from the next expected index is
contiguous. flush() releases whatever is left (in order, across gaps)
once all workers have exited.
"""

import heapq
import logging
import threading
from typing import Callable, List, Set, Tuple

from dash2gps.models.track import FrameResult, TrackPoint
from dash2gps.signals.track import TrackAssembler


logger = logging.getLogger(__name__)


TrackSink = Callable[[TrackPoint], None]


class TrackSequencer:
    """
    Thread-safe reorder buffer in front of a TrackAssembler.

    Attributes:
        assembler: The single assembler receiving ordered results
        sink: Called with every TrackPoint produced
        next_index: Index the sequencer is waiting for
    """

    def __init__(
        self,
        assembler: TrackAssembler,
        sink: TrackSink,
        first_index: int = 0,
    ) -> None:
        """
        Initialize the sequencer.

        Args:
            assembler: Assembler owned by this sequencer from now on
            sink: Receives TrackPoints in frame order
            first_index: Index of the first expected frame
        """
        self.assembler = assembler
        self.sink = sink

        self._next_index = first_index
        self._heap: List[Tuple[int, int, FrameResult]] = []
        self._queued: Set[int] = set()
        self._counter = 0
        self._sink_errors = 0
        self._lock = threading.Lock()

    @property
    def next_index(self) -> int:
        return self._next_index

    @property
    def sink_errors(self) -> int:
        """Results whose track point could not be assembled or emitted."""
        return self._sink_errors

    @property
    def pending(self) -> int:
        """Results waiting for an earlier frame."""
        with self._lock:
            return len(self._heap)

    def submit(self, result: FrameResult) -> None:
        """Hand over one frame result. Safe to call from any worker."""
        with self._lock:
            index = result.index
            if index < self._next_index or index in self._queued:
                logger.warning(f"Duplicate result for frame {index} dropped")
                return

            self._queued.add(index)
            # counter keeps heap entries comparable without comparing results
            heapq.heappush(self._heap, (index, self._counter, result))
            self._counter += 1

            while self._heap and self._heap[0][0] == self._next_index:
                self._release_head()

    def flush(self) -> int:
        """
        Release every buffered result in index order, skipping gaps.

        Returns:
            Number of results released.
        """
        released = 0
        with self._lock:
            if self._heap:
                logger.info(
                    f"Flushing {len(self._heap)} buffered result(s), "
                    f"first missing frame was {self._next_index}"
                )
            while self._heap:
                self._next_index = self._heap[0][0]
                self._release_head()
                released += 1
        return released

    def _release_head(self) -> None:
        index, _, result = heapq.heappop(self._heap)
        self._queued.discard(index)
        self._next_index = index + 1

        # a failing sink must not propagate into the submitting worker
        try:
            point = self.assembler.consume(result)
            if point is not None:
                self.sink(point)
        except Exception as e:
            self._sink_errors += 1
            logger.error(f"Failed to emit track point for frame {index}: {e}")
