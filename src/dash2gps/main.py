"""
dash2gps Command Line
=====================

Entry point for the ``dash2gps`` console script.

Usage:
    dash2gps -i 201124_174859_011_LO.MOV --tessdata ./tessdata
    dash2gps -i drive.mp4 --interval 5 --workers 8 \\
        --template "{time},{lat},{lon},{speed}" \\
        --time-pattern "(\\d{6}_\\d{6})" --time-format "%y%m%d_%H%M%S"

Track lines go to stdout; logs and per-frame errors go to stderr.

Exit codes:
    0   success
    1   fatal error (bad configuration, missing input, ffmpeg or
        recognition data problems, file monitor failure)
    130 interrupted
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

from pydantic import ValidationError

from dash2gps import __version__
from dash2gps.config import load_config, setup_logging
from dash2gps.models.track import SpeedUnit
from dash2gps.perception.tesseract_engine import RecognitionDataError
from dash2gps.pipeline.driver import PipelineDriver
from dash2gps.stream.video import ExtractionError
from dash2gps.stream.watcher import WatcherError


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dash2gps",
        description="Recover a GPS track from telemetry burned into dashcam video",
    )
    parser.add_argument("-i", "--input", required=True, help="Path of the video file")
    parser.add_argument(
        "--interval",
        type=float,
        help="Find locations at this interval in the video, in seconds (default: 10)",
    )
    parser.add_argument("--workers", type=int, help="Number of OCR workers (default: 4)")
    parser.add_argument(
        "--template",
        help="Output line template: {lat} {lon} {time} {speed} {unit} {index} (default: '{lat}, {lon}')",
    )
    parser.add_argument("--separator", help="Separator between several fixes on one frame")
    parser.add_argument(
        "--crop",
        help="Crop frames before OCR: 'left top right bottom', each in px or %%",
    )
    parser.add_argument("--time-pattern", help="Regex locating the start time in the file name")
    parser.add_argument("--time-format", help="strptime format of the matched start time")
    parser.add_argument("--tessdata", help="Directory containing *.traineddata files")
    parser.add_argument("--language", help="Recognition language (default: eng)")
    parser.add_argument(
        "--speed-unit",
        choices=[u.value for u in SpeedUnit],
        help="Unit of {speed} (default: kmh)",
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument(
        "--keep-workspace",
        action="store_true",
        default=None,
        help="Do not delete the temporary workspace",
    )
    parser.add_argument("--log-level", help="Log level (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _overrides(args: argparse.Namespace) -> dict:
    return {
        "extraction": {"interval_seconds": args.interval},
        "pipeline": {"workers": args.workers},
        "preprocess": {"crop": args.crop},
        "ocr": {"tessdata_dir": args.tessdata, "language": args.language},
        "output": {
            "template": args.template,
            "separator": args.separator,
            "speed_unit": args.speed_unit,
        },
        "start_time": {"pattern": args.time_pattern, "format": args.time_format},
        "workspace": {"keep": args.keep_workspace},
        "logging": {"level": args.log_level},
    }


def _handle_sigterm(signum, frame):
    """Handle SIGTERM for graceful shutdown."""
    logger.info("Received SIGTERM, initiating graceful shutdown...")
    raise KeyboardInterrupt


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_config(args.config, overrides=_overrides(args))
    except (FileNotFoundError, ValidationError, ValueError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(settings)
    signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        PipelineDriver(settings).run(args.input)
    except (FileNotFoundError, ExtractionError, RecognitionDataError, WatcherError) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
