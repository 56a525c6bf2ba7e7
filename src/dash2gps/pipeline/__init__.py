"""
Pipeline Module
===============

Concurrency and orchestration.

Components:
    - ShutdownToken: Cooperative "no more frames" signal
    - FrameProcessor: Preprocess -> OCR -> parse for one frame
    - WorkerPool: N worker threads on the shared FrameQueue
    - Workspace: Scoped temporary directory
    - PipelineDriver: One end-to-end run
"""

from dash2gps.pipeline.workers import (
    FrameProcessor,
    ShutdownToken,
    WorkerPool,
    WorkerPoolMetrics,
)
from dash2gps.pipeline.driver import PipelineDriver, PipelineStats, Workspace

__all__ = [
    "ShutdownToken",
    "FrameProcessor",
    "WorkerPool",
    "WorkerPoolMetrics",
    "Workspace",
    "PipelineDriver",
    "PipelineStats",
]
