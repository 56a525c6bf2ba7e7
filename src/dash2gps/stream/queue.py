"""
Frame Queue
===========

Thread-safe unbounded channel of frame paths.

This module provides the FrameQueue class, the only hand-off point
between the arrival watcher (and the post-extraction sweep) and the
worker pool.

Design Rules:
    - Unbounded: producers never block, no frame is ever dropped
    - Multiple producers and multiple consumers
    - Per-producer FIFO order
    - Does NOT open or inspect frames
"""

import logging
import queue
import threading
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class FrameQueue:
    """
    Unbounded MPMC queue of frame paths.

    Attributes:
        size: Current number of queued paths
        total_put: Total paths ever enqueued

    Example:
        frames = FrameQueue()

        # Producer (watcher callback)
        frames.put(Path("frames/f000000001.jpg"))

        # Consumer (worker)
        path = frames.get(timeout=0.25)
        if path is None:
            ...  # timed out
    """

    def __init__(self) -> None:
        """Initialize an empty frame queue."""
        self._queue: "queue.Queue[Path]" = queue.Queue()
        self._lock = threading.Lock()
        self._total_put: int = 0
        self._total_get: int = 0

    @property
    def size(self) -> int:
        """Current number of paths in the queue (approximate)."""
        return self._queue.qsize()

    @property
    def total_put(self) -> int:
        """Total paths ever put into the queue."""
        return self._total_put

    def empty(self) -> bool:
        return self._queue.empty()

    def put(self, path: Path) -> None:
        """Enqueue a frame path. Never blocks."""
        self._queue.put_nowait(Path(path))
        with self._lock:
            self._total_put += 1

    def get(self, timeout: Optional[float] = None) -> Optional[Path]:
        """
        Get next frame path.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Returns:
            Next path, or None if timeout occurred.
        """
        try:
            path = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

        with self._lock:
            self._total_get += 1
        return path

    def get_nowait(self) -> Optional[Path]:
        """Get next path without waiting, None when empty."""
        try:
            path = self._queue.get_nowait()
        except queue.Empty:
            return None

        with self._lock:
            self._total_get += 1
        return path

    def metrics(self) -> dict:
        """
        Get queue metrics for observability.

        Returns:
            Dict with size, total_put, total_get
        """
        return {
            "size": self.size,
            "total_put": self._total_put,
            "total_get": self._total_get,
        }
