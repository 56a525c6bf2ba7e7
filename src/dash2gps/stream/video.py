"""
Video Source
============

Everything the pipeline needs from the input video itself:

    - FrameExtractor: runs ffmpeg to dump one frame per sampling interval
      into the workspace frames directory
    - infer_start_time: recording start time recovered from the file name

ffmpeg invocation:
    ffmpeg -hide_banner -loglevel error -i <input>
        -vf "select=bitor(gte(t-prev_selected_t\\,N)\\,isnan(prev_selected_t)),scale=W:H"
        -vsync 0 f%09d.jpg

The select filter keeps the first frame and then every frame at least
N seconds after the previously selected one. Output names are 1-based
and zero-padded to nine digits.
"""

import logging
import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union


logger = logging.getLogger(__name__)


FRAME_NAME_PATTERN = "f%09d.jpg"


class ExtractionError(Exception):
    """Raised when ffmpeg is missing or fails to extract frames."""
    pass


class FrameExtractor:
    """
    Frame extraction through the ffmpeg command line.

    Attributes:
        interval_seconds: Time between extracted frames
        width: Output frame width in pixels
        height: Output frame height in pixels
        ffmpeg_binary: ffmpeg executable name or path
    """

    def __init__(
        self,
        interval_seconds: float = 10.0,
        width: int = 1920,
        height: int = 1080,
        ffmpeg_binary: str = "ffmpeg",
    ) -> None:
        """
        Initialize the extractor.

        Args:
            interval_seconds: Seconds between extracted frames. Must be positive.
            width: Output frame width
            height: Output frame height
            ffmpeg_binary: ffmpeg executable name or path
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval_seconds = interval_seconds
        self.width = width
        self.height = height
        self.ffmpeg_binary = ffmpeg_binary

        self._process: Optional[subprocess.Popen] = None

    def build_command(self, input_path: Union[str, Path]) -> List[str]:
        """Build the ffmpeg argument list for the given input."""
        interval = f"{self.interval_seconds:g}"
        video_filter = (
            rf"select=bitor(gte(t-prev_selected_t\,{interval})\,isnan(prev_selected_t)),"
            f"scale={self.width}:{self.height}"
        )
        return [
            self.ffmpeg_binary,
            "-hide_banner",
            "-loglevel", "error",
            "-i", str(input_path),
            "-vf", video_filter,
            "-vsync", "0",
            FRAME_NAME_PATTERN,
        ]

    def run(self, input_path: Union[str, Path], output_dir: Union[str, Path]) -> None:
        """
        Extract frames and block until ffmpeg exits.

        Args:
            input_path: Video file
            output_dir: Directory receiving the numbered frames

        Raises:
            ExtractionError: If ffmpeg cannot be started or exits non-zero
        """
        input_path = Path(input_path).resolve()
        cmd = self.build_command(input_path)
        logger.info(f"Extracting one frame every {self.interval_seconds:g}s from {input_path.name}")
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            self._process = subprocess.Popen(cmd, cwd=str(output_dir))
        except FileNotFoundError as e:
            raise ExtractionError(
                f"ffmpeg executable not found ({self.ffmpeg_binary}). "
                "Install ffmpeg or set extraction.ffmpeg_binary"
            ) from e
        except OSError as e:
            raise ExtractionError(f"Failed to start ffmpeg: {e}") from e

        try:
            returncode = self._process.wait()
        finally:
            self._process = None

        if returncode != 0:
            raise ExtractionError(f"ffmpeg process exited with error (status {returncode})")

        logger.info("Frame extraction finished")

    def terminate(self) -> None:
        """Stop a running extraction, if any."""
        process = self._process
        if process is not None and process.poll() is None:
            logger.info("Terminating ffmpeg...")
            process.terminate()


def infer_start_time(
    filename: Union[str, Path],
    pattern: str,
    time_format: str,
) -> Optional[datetime]:
    """
    Recover the recording start time from a video file name.

    The first capture group of ``pattern`` (or the whole match when the
    pattern has no group) is parsed with ``time_format``.

    Args:
        filename: Video path or bare file name
        pattern: Regular expression searched in the file name
        time_format: strptime format for the matched text

    Returns:
        Start time, or None when the name does not match or does not parse

    Example:
        >>> infer_start_time("201124_174859_011_LO.MOV", r"(\\d{6}_\\d{6})", "%y%m%d_%H%M%S")
        datetime.datetime(2020, 11, 24, 17, 48, 59)
    """
    name = Path(filename).name
    match = re.search(pattern, name)
    if match is None:
        logger.warning(f"Start time pattern {pattern!r} did not match {name}")
        return None

    text = match.group(1) if match.groups() else match.group(0)
    try:
        start = datetime.strptime(text, time_format)
    except ValueError as e:
        logger.warning(f"Could not parse start time from {text!r}: {e}")
        return None

    logger.info(f"Recording start time: {start.isoformat(sep=' ')}")
    return start
