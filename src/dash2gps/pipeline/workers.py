"""
Worker Pool
===========

N threads turning frame paths into FrameResults.

Each worker loop:
    1. Poll the FrameQueue with a short timeout
    2. On timeout: exit if the ShutdownToken was set before the poll
       began, else poll again
    3. On a path: preprocess -> OCR -> parse, synchronously
    4. Submit the FrameResult to the sequencer (also for failed frames)

Termination:
    The pool never sets the token itself. The driver sets it once frame
    extraction is over and every frame path has been enqueued. A worker
    then leaves only after a full poll timeout with an empty queue, so
    frames queued right before shutdown are still processed.

Error Policy:
    Any exception while processing a frame is logged with the frame
    path and counted; the frame becomes an empty result and the worker
    moves on. No retries.
"""

import logging
import threading
from pathlib import Path
from typing import List, Optional

from dash2gps.models.track import FrameResult
from dash2gps.perception.engine import OcrEngine
from dash2gps.perception.preprocessor import FramePreprocessor
from dash2gps.signals.parser import parse_coordinates
from dash2gps.signals.sequencer import TrackSequencer
from dash2gps.stream.frame import FrameFile
from dash2gps.stream.queue import FrameQueue


logger = logging.getLogger(__name__)


DEFAULT_POLL_TIMEOUT = 0.25


class ShutdownToken:
    """
    Cooperative cancellation token shared by the driver and the workers.

    Setting it means "no more frames will be enqueued", not "stop now".
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class FrameProcessor:
    """
    The per-frame pipeline run inside a worker.

    Attributes:
        preprocessor: Overlay isolation
        engine: Text recognition backend
    """

    def __init__(self, preprocessor: FramePreprocessor, engine: OcrEngine) -> None:
        self.preprocessor = preprocessor
        self.engine = engine

    def process(self, frame: FrameFile) -> FrameResult:
        """
        Run preprocessing, recognition and parsing for one frame.

        Raises:
            PreprocessError, OcrError: Per-frame failures, left to the caller
        """
        strip = self.preprocessor.process(frame.path)
        text = self.engine.recognize(strip)
        fixes = tuple(parse_coordinates(text))

        if not fixes:
            logger.debug(f"{frame.path}: no coordinates in {text.strip()!r}")
        return FrameResult(frame=frame, fixes=fixes)


class WorkerPoolMetrics:
    """Metrics for WorkerPool observability."""

    __slots__ = (
        "frames_processed",
        "frames_failed",
        "frames_without_fix",
        "fixes_found",
        "_lock",
    )

    def __init__(self) -> None:
        self.frames_processed: int = 0
        self.frames_failed: int = 0
        self.frames_without_fix: int = 0
        self.fixes_found: int = 0
        self._lock = threading.Lock()

    def record(self, result: FrameResult) -> None:
        with self._lock:
            self.frames_processed += 1
            if not result.ok:
                self.frames_failed += 1
            elif not result.fixes:
                self.frames_without_fix += 1
            self.fixes_found += len(result.fixes)

    def record_unsequenced(self) -> None:
        with self._lock:
            self.frames_processed += 1
            self.frames_failed += 1

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        with self._lock:
            return {
                "frames_processed": self.frames_processed,
                "frames_failed": self.frames_failed,
                "frames_without_fix": self.frames_without_fix,
                "fixes_found": self.fixes_found,
            }


class WorkerPool:
    """
    Fixed-size pool of frame workers sharing one FrameQueue.

    Attributes:
        frames: Queue the workers consume from
        token: Shutdown token observed by every worker
        processor: Per-frame pipeline
        sequencer: Receives every FrameResult
        size: Number of worker threads
        poll_timeout: Seconds each queue poll waits
        metrics: Operational metrics

    Example:
        pool = WorkerPool(frames, token, processor, sequencer, size=4)
        pool.start()
        ...              # frames arrive
        token.set()      # extraction finished
        pool.join()
    """

    def __init__(
        self,
        frames: FrameQueue,
        token: ShutdownToken,
        processor: FrameProcessor,
        sequencer: TrackSequencer,
        size: int = 4,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> None:
        """
        Initialize the worker pool. Threads start on start().

        Args:
            frames: Queue of frame paths to consume
            token: Set by the driver once no more frames will arrive
            processor: Per-frame pipeline run by every worker
            sequencer: Receives each FrameResult
            size: Number of worker threads. Must be >= 1.
            poll_timeout: Seconds per queue poll. Must be positive.
        """
        if size < 1:
            raise ValueError("size must be >= 1")
        if poll_timeout <= 0:
            raise ValueError("poll_timeout must be positive")

        self.frames = frames
        self.token = token
        self.processor = processor
        self.sequencer = sequencer
        self.size = size
        self.poll_timeout = poll_timeout

        self.metrics = WorkerPoolMetrics()
        self._threads: List[threading.Thread] = []

    @property
    def alive(self) -> int:
        """Number of worker threads still running."""
        return sum(1 for t in self._threads if t.is_alive())

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("WorkerPool already started")

        for n in range(self.size):
            thread = threading.Thread(
                target=self._run,
                name=f"dash2gps-worker-{n}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()

        logger.info(f"Started {self.size} worker(s)")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every worker to exit."""
        for thread in self._threads:
            thread.join(timeout)
        logger.info(f"Workers finished: {self.metrics.to_dict()}")

    def _run(self) -> None:
        name = threading.current_thread().name
        logger.debug(f"{name} started")

        while True:
            # the token must already be set when an empty poll starts
            stopping = self.token.is_set()
            path = self.frames.get(timeout=self.poll_timeout)
            if path is None:
                if stopping:
                    break
                continue

            result = self._process(path)
            if result is not None:
                self.metrics.record(result)
                self.sequencer.submit(result)

        logger.debug(f"{name} exiting")

    def _process(self, path: Path) -> Optional[FrameResult]:
        try:
            frame = FrameFile.from_path(path)
        except ValueError as e:
            logger.error(f"{path}: {e}")
            # an unnamed frame cannot be placed in the sequence
            self.metrics.record_unsequenced()
            return None

        try:
            return self.processor.process(frame)
        except Exception as e:
            logger.error(f"{path}: {e}")
            return FrameResult(frame=frame, error=str(e))
