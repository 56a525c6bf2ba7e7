"""
Frame Arrival Watcher
=====================

Publishes frame files into the FrameQueue as soon as the extractor has
finished writing them.

This module provides the FrameWatcher class which:
    - Registers a recursive watchdog observer on the frames directory
    - Publishes a path only when a write handle on it is closed
    - Ignores every other event kind (create, modify, move, delete,
      open, close without write)
    - Publishes each path at most once
    - Sweeps the directory after extraction for anything not yet seen

Design Rules:
    - Registration failure is fatal (raised as WatcherError)
    - Delivery failure inside the callback is dropped, never raised
    - stop() is idempotent and runs on context exit
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional, Set, Union

from watchdog.events import FileClosedEvent, FileSystemEventHandler
from watchdog.observers import Observer

from dash2gps.stream.queue import FrameQueue


logger = logging.getLogger(__name__)


class WatcherError(Exception):
    """Raised when the directory cannot be watched."""
    pass


class _CloseWriteHandler(FileSystemEventHandler):
    """Forwards close-after-write events to the watcher."""

    def __init__(self, watcher: "FrameWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_closed(self, event: FileClosedEvent) -> None:
        if event.is_directory:
            return
        self._watcher._publish(Path(os.fsdecode(event.src_path)))


class FrameWatcher:
    """
    Watches a directory for completed frame writes.

    Attributes:
        directory: Watched directory
        frames: Queue receiving completed frame paths
        published_count: Number of distinct paths published

    Example:
        frames = FrameQueue()
        with FrameWatcher(workspace / "frames", frames) as watcher:
            run_extractor()
            watcher.stop()
            watcher.sweep()
    """

    def __init__(self, directory: Union[str, Path], frames: FrameQueue) -> None:
        """
        Initialize the watcher. Nothing is registered until start().

        Args:
            directory: Directory the extractor writes frames into
            frames: Queue receiving completed frame paths
        """
        self.directory = Path(directory).resolve()
        self.frames = frames

        self._observer: Optional[Observer] = None
        self._published: Set[Path] = set()
        self._lock = threading.Lock()

    @property
    def published_count(self) -> int:
        with self._lock:
            return len(self._published)

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """
        Register for change notifications.

        Raises:
            WatcherError: If the directory is missing, unreadable, or the
                notification backend refuses the registration
        """
        if self._observer is not None:
            return

        if not self.directory.is_dir():
            raise WatcherError(f"Cannot watch {self.directory}: not a directory")
        if not os.access(self.directory, os.R_OK | os.X_OK):
            raise WatcherError(f"Cannot watch {self.directory}: permission denied")

        observer = Observer()
        try:
            observer.schedule(
                _CloseWriteHandler(self),
                str(self.directory),
                recursive=True,
            )
            observer.start()
        except OSError as e:
            raise WatcherError(f"Failed to start file monitor on {self.directory}: {e}") from e

        self._observer = observer
        logger.info(f"Watching for completed frames in: {self.directory}")

    def stop(self) -> None:
        """Unregister. Safe to call any number of times."""
        observer = self._observer
        if observer is None:
            return
        self._observer = None

        try:
            observer.unschedule_all()
            observer.stop()
            observer.join()
        except Exception as e:
            logger.warning(f"Error while stopping file monitor: {e}")

        logger.debug(f"Stopped watching {self.directory}")

    def sweep(self) -> int:
        """
        Publish files present in the directory but not yet published.

        Call after the extractor exited so every file on disk is complete.

        Returns:
            Number of paths published by the sweep.
        """
        if not self.directory.is_dir():
            return 0

        count = 0
        for path in sorted(p for p in self.directory.rglob("*") if p.is_file()):
            if self._publish(path):
                count += 1

        if count:
            logger.info(f"Sweep published {count} frame(s) missed by the file monitor")
        return count

    def _publish(self, path: Path) -> bool:
        path = path.resolve()
        with self._lock:
            if path in self._published:
                return False
            self._published.add(path)

        try:
            self.frames.put(path)
        except Exception as e:
            logger.debug(f"Dropped frame notification for {path}: {e}")
            return False
        return True

    def __enter__(self) -> "FrameWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def __del__(self) -> None:
        try:
            self.stop()
        except Exception:
            pass
