"""
Stream Module
=============

Frame ingestion for dash2gps.

This module provides the ingestion layer:
    - FrameFile: Typed frame file model (path + sequence index)
    - FrameQueue: Thread-safe unbounded queue of frame paths
    - FrameWatcher: Publishes frames once ffmpeg closed them
    - FrameExtractor: ffmpeg frame extraction
    - infer_start_time: Recording start time from the video file name

Example:
    from dash2gps.stream import FrameExtractor, FrameQueue, FrameWatcher

    frames = FrameQueue()
    with FrameWatcher(frames_dir, frames) as watcher:
        FrameExtractor(interval_seconds=10).run("drive.mp4", frames_dir)
        watcher.stop()
        watcher.sweep()
"""

from dash2gps.stream.frame import FrameFile, FrameNameError
from dash2gps.stream.queue import FrameQueue
from dash2gps.stream.watcher import FrameWatcher, WatcherError
from dash2gps.stream.video import ExtractionError, FrameExtractor, infer_start_time


__all__ = [
    "FrameFile",
    "FrameNameError",
    "FrameQueue",
    "FrameWatcher",
    "WatcherError",
    "FrameExtractor",
    "ExtractionError",
    "infer_start_time",
]
