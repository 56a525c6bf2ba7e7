"""
Pipeline Driver
===============

Owns one end-to-end run: workspace, watcher, extractor, workers,
sequencer and output.

Run sequence:
    1. Validate the input and build the OCR engine (fail fast)
    2. Create the workspace (frames/ and frames-resize/)
    3. Start the watcher on frames/, then the worker pool
    4. Run ffmpeg and block until it exits
    5. Stop the watcher and sweep frames/ for anything it missed
    6. Set the shutdown token and join every worker
    7. Flush the sequencer
    8. Remove the workspace (on every exit path)

Fatal errors (ExtractionError, RecognitionDataError, WatcherError,
missing input) propagate to the caller after cleanup.
"""

import logging
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dash2gps.config import Settings
from dash2gps.output.formatter import TrackFormatter, TrackWriter
from dash2gps.perception.engine import OcrEngine
from dash2gps.perception.preprocessor import CropBox, FramePreprocessor
from dash2gps.perception.tesseract_engine import TesseractOcrEngine
from dash2gps.pipeline.workers import FrameProcessor, ShutdownToken, WorkerPool
from dash2gps.signals.sequencer import TrackSequencer, TrackSink
from dash2gps.signals.track import TrackAssembler
from dash2gps.stream.queue import FrameQueue
from dash2gps.stream.video import FrameExtractor, infer_start_time
from dash2gps.stream.watcher import FrameWatcher


logger = logging.getLogger(__name__)


FRAMES_DIR = "frames"
FRAMES_RESIZE_DIR = "frames-resize"


class Workspace:
    """
    Per-run temporary directory, removed on exit.

    Attributes:
        path: Workspace root
        frames_dir: Extractor output
        resize_dir: Preprocessor output
        keep: Leave the directory in place on exit (debugging)

    Example:
        with Workspace() as ws:
            extractor.run(video, ws.frames_dir)
    """

    def __init__(self, root: Optional[Union[str, Path]] = None, keep: bool = False) -> None:
        self.root = Path(root) if root else None
        self.keep = keep
        self.path: Optional[Path] = None

    @property
    def frames_dir(self) -> Path:
        return self._require() / FRAMES_DIR

    @property
    def resize_dir(self) -> Path:
        return self._require() / FRAMES_RESIZE_DIR

    def _require(self) -> Path:
        if self.path is None:
            raise RuntimeError("Workspace has not been created")
        return self.path

    def create(self) -> Path:
        if self.root is not None:
            self.root.mkdir(parents=True, exist_ok=True)

        self.path = Path(tempfile.mkdtemp(
            prefix=f"dash2gps-workspace-{int(time.time())}-",
            dir=str(self.root) if self.root else None,
        ))
        self.frames_dir.mkdir()
        self.resize_dir.mkdir()

        logger.info(f"Using workspace at: {self.path}")
        return self.path

    def remove(self) -> None:
        if self.path is None:
            return
        if self.keep:
            logger.info(f"Keeping workspace at: {self.path}")
        else:
            shutil.rmtree(self.path, ignore_errors=True)
            logger.debug(f"Removed workspace {self.path}")
        self.path = None

    def __enter__(self) -> "Workspace":
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.remove()


@dataclass
class PipelineStats:
    """Summary of one pipeline run."""

    frames_enqueued: int = 0
    frames_processed: int = 0
    frames_failed: int = 0
    fixes_found: int = 0
    points_emitted: int = 0
    output_errors: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        return {
            "frames_enqueued": self.frames_enqueued,
            "frames_processed": self.frames_processed,
            "frames_failed": self.frames_failed,
            "fixes_found": self.fixes_found,
            "points_emitted": self.points_emitted,
            "output_errors": self.output_errors,
            "duration_seconds": round(self.duration_seconds, 2),
        }


class PipelineDriver:
    """
    Runs the frame-to-track pipeline for one video.

    Attributes:
        settings: Validated configuration
        engine: OCR engine; built from settings.ocr when not given
        sink: Receives TrackPoints; a stdout TrackWriter when not given
        extractor: ffmpeg wrapper; built from settings.extraction when not given
    """

    def __init__(
        self,
        settings: Settings,
        engine: Optional[OcrEngine] = None,
        sink: Optional[TrackSink] = None,
        extractor: Optional[FrameExtractor] = None,
    ) -> None:
        """
        Initialize the driver. Components left as None are built from settings.

        Args:
            settings: Validated configuration
            engine: OCR engine override (tests, dry runs)
            sink: TrackPoint receiver override
            extractor: Frame extractor override
        """
        self.settings = settings
        self._engine = engine
        self.sink = sink or TrackWriter(
            TrackFormatter(
                template=settings.output.template,
                separator=settings.output.separator,
                speed_unit=settings.output.speed_unit,
            )
        )
        self.extractor = extractor or FrameExtractor(
            interval_seconds=settings.extraction.interval_seconds,
            width=settings.extraction.width,
            height=settings.extraction.height,
            ffmpeg_binary=settings.extraction.ffmpeg_binary,
        )

    def _build_engine(self) -> OcrEngine:
        if self._engine is not None:
            return self._engine

        ocr = self.settings.ocr
        return TesseractOcrEngine(
            tessdata_dir=ocr.tessdata_dir,
            language=ocr.language,
            dpi=ocr.dpi,
            tesseract_cmd=ocr.tesseract_cmd,
        )

    def run(self, video_path: Union[str, Path]) -> PipelineStats:
        """
        Process one video end to end.

        Args:
            video_path: Input video

        Returns:
            PipelineStats for the run

        Raises:
            FileNotFoundError: If the input video does not exist
            ExtractionError, RecognitionDataError, WatcherError: Fatal errors
        """
        started = time.monotonic()
        video_path = Path(video_path)
        if not video_path.is_file():
            raise FileNotFoundError(f"Input video not found: {video_path}")

        engine = self._build_engine()
        settings = self.settings

        start_time = None
        if settings.start_time.pattern:
            start_time = infer_start_time(
                video_path,
                settings.start_time.pattern,
                settings.start_time.format,
            )

        assembler = TrackAssembler(
            interval_seconds=settings.extraction.interval_seconds,
            start_time=start_time,
            speed_unit=settings.output.speed_unit,
        )
        sequencer = TrackSequencer(assembler, self.sink)
        token = ShutdownToken()
        frames = FrameQueue()

        with Workspace(root=settings.workspace.root, keep=settings.workspace.keep) as workspace:
            crop = CropBox.parse(settings.preprocess.crop) if settings.preprocess.crop else None
            preprocessor = FramePreprocessor(
                output_dir=workspace.resize_dir,
                strip_height=settings.preprocess.strip_height,
                crop=crop,
                contrast=settings.preprocess.contrast,
                brightness=settings.preprocess.brightness,
            )
            pool = WorkerPool(
                frames=frames,
                token=token,
                processor=FrameProcessor(preprocessor, engine),
                sequencer=sequencer,
                size=settings.pipeline.workers,
                poll_timeout=settings.pipeline.poll_timeout_seconds,
            )

            with FrameWatcher(workspace.frames_dir, frames) as watcher:
                pool.start()
                try:
                    self.extractor.run(video_path, workspace.frames_dir)
                except BaseException:
                    self.extractor.terminate()
                    raise
                finally:
                    watcher.stop()
                    watcher.sweep()
                    token.set()
                    pool.join()
                    sequencer.flush()

        metrics = pool.metrics.to_dict()
        stats = PipelineStats(
            frames_enqueued=frames.total_put,
            frames_processed=metrics["frames_processed"],
            frames_failed=metrics["frames_failed"],
            fixes_found=metrics["fixes_found"],
            points_emitted=assembler.points_emitted,
            output_errors=sequencer.sink_errors,
            duration_seconds=time.monotonic() - started,
        )
        logger.info(f"Run summary: {stats.to_dict()}")
        return stats
