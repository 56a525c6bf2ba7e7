"""
dash2gps Configuration
======================

This module handles configuration loading for dash2gps.

Configuration Sources (in order of precedence):
    1. Explicit overrides (command line)
    2. Environment variables
    3. config.yaml file
    4. Default values (lowest priority)

Environment Variable Mapping:
    DASH2GPS_INTERVAL        -> extraction.interval_seconds
    DASH2GPS_FFMPEG          -> extraction.ffmpeg_binary
    DASH2GPS_WORKERS         -> pipeline.workers
    DASH2GPS_TESSDATA        -> ocr.tessdata_dir
    DASH2GPS_LANGUAGE        -> ocr.language
    DASH2GPS_TEMPLATE        -> output.template
    DASH2GPS_KEEP_WORKSPACE  -> workspace.keep
    DASH2GPS_LOG_LEVEL       -> logging.level

Example:
    from dash2gps.config import load_config, setup_logging

    settings = load_config(overrides={"pipeline": {"workers": 8}})
    setup_logging(settings)
    print(settings.extraction.interval_seconds)
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from dash2gps.models.track import SpeedUnit
from dash2gps.output.formatter import DEFAULT_SEPARATOR, DEFAULT_TEMPLATE, validate_template
from dash2gps.perception.preprocessor import (
    DEFAULT_BRIGHTNESS,
    DEFAULT_CONTRAST,
    DEFAULT_STRIP_HEIGHT,
    OVERLAY_DPI,
    CropBox,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ExtractionConfig(BaseModel):
    """Frame extraction (ffmpeg) configuration."""

    interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Seconds between extracted frames",
    )
    width: int = Field(default=1920, ge=16, description="Extracted frame width")
    height: int = Field(default=1080, ge=16, description="Extracted frame height")
    ffmpeg_binary: str = Field(default="ffmpeg", description="ffmpeg executable")


class PreprocessConfig(BaseModel):
    """Overlay preprocessing configuration."""

    strip_height: int = Field(
        default=DEFAULT_STRIP_HEIGHT,
        ge=1,
        description="Height of the bottom overlay strip in pixels",
    )
    crop: Optional[str] = Field(
        default=None,
        description="Crop override: 'left top right bottom' in px or %",
    )
    contrast: float = Field(default=DEFAULT_CONTRAST, description="Contrast adjustment")
    brightness: int = Field(
        default=DEFAULT_BRIGHTNESS,
        ge=-255,
        le=255,
        description="Brightness offset",
    )

    @field_validator("crop")
    @classmethod
    def _check_crop(cls, value: Optional[str]) -> Optional[str]:
        if value:
            CropBox.parse(value)
        return value or None


class OcrConfig(BaseModel):
    """Recognition engine configuration."""

    tessdata_dir: str = Field(
        default=".",
        description="Directory containing *.traineddata files",
    )
    language: str = Field(default="eng", description="Recognition language")
    dpi: int = Field(default=OVERLAY_DPI, ge=70, description="Resolution hint")
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="tesseract executable, when not on PATH",
    )


class PipelineConfig(BaseModel):
    """Worker pool configuration."""

    workers: int = Field(default=4, ge=1, le=64, description="Worker threads")
    poll_timeout_seconds: float = Field(
        default=0.25,
        gt=0,
        lt=1.0,
        description="Queue poll timeout per worker",
    )


class OutputConfig(BaseModel):
    """Track output configuration."""

    template: str = Field(
        default=DEFAULT_TEMPLATE,
        description="Line template: {lat} {lon} {time} {speed} {unit} {index}",
    )
    separator: str = Field(
        default=DEFAULT_SEPARATOR,
        description="Joins several fixes found on one frame",
    )
    speed_unit: SpeedUnit = Field(default=SpeedUnit.KMH, description="Speed unit")

    @field_validator("template")
    @classmethod
    def _check_template(cls, value: str) -> str:
        return validate_template(value)


class StartTimeConfig(BaseModel):
    """Recording start time extraction from the video file name."""

    pattern: Optional[str] = Field(
        default=None,
        description=r"Regex locating the time in the file name, e.g. (\d{6}_\d{6})",
    )
    format: str = Field(
        default="%y%m%d_%H%M%S",
        description="strptime format of the matched text",
    )

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid start time pattern {value!r}: {e}") from e
        return value or None


class WorkspaceConfig(BaseModel):
    """Temporary workspace configuration."""

    root: Optional[str] = Field(
        default=None,
        description="Parent directory for the workspace (system temp if unset)",
    )
    keep: bool = Field(default=False, description="Keep the workspace after the run")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for dash2gps.

    Loads configuration from YAML file, environment variables and
    explicit overrides, in increasing order of precedence.
    """

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    preprocess: PreprocessConfig = Field(default_factory=PreprocessConfig)
    ocr: OcrConfig = Field(default_factory=OcrConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    start_time: StartTimeConfig = Field(default_factory=StartTimeConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Settings:
    """
    Load configuration from YAML file, environment variables and overrides.

    Args:
        config_path: Path to config.yaml. If None, searches common locations.
        overrides: Section -> {field: value} applied last; None values are ignored

    Returns:
        Settings: Loaded configuration

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        pydantic.ValidationError: If the merged configuration is invalid
    """
    if config_path is not None and not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # Find config file
    if config_path is None:
        for path in (Path("config.yaml"), Path("config.yml")):
            if path.exists():
                config_path = str(path)
                break

    config_data: Dict[str, Any] = {}
    if config_path:
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}

    _apply_env_overrides(config_data)
    _apply_overrides(config_data, overrides or {})

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Extraction settings
    if env_interval := os.environ.get("DASH2GPS_INTERVAL"):
        config_data.setdefault("extraction", {})["interval_seconds"] = float(env_interval)
    if env_ffmpeg := os.environ.get("DASH2GPS_FFMPEG"):
        config_data.setdefault("extraction", {})["ffmpeg_binary"] = env_ffmpeg

    # Pipeline settings
    if env_workers := os.environ.get("DASH2GPS_WORKERS"):
        config_data.setdefault("pipeline", {})["workers"] = int(env_workers)

    # OCR settings
    if env_tessdata := os.environ.get("DASH2GPS_TESSDATA"):
        config_data.setdefault("ocr", {})["tessdata_dir"] = env_tessdata
    if env_lang := os.environ.get("DASH2GPS_LANGUAGE"):
        config_data.setdefault("ocr", {})["language"] = env_lang

    # Output settings
    if env_template := os.environ.get("DASH2GPS_TEMPLATE"):
        config_data.setdefault("output", {})["template"] = env_template

    # Workspace settings
    if env_keep := os.environ.get("DASH2GPS_KEEP_WORKSPACE"):
        config_data.setdefault("workspace", {})["keep"] = env_keep.lower() in ("1", "true", "yes")

    # Logging settings
    if env_log := os.environ.get("DASH2GPS_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def _apply_overrides(config_data: dict, overrides: Dict[str, Dict[str, Any]]) -> None:
    for section, values in overrides.items():
        for key, value in values.items():
            if value is not None:
                config_data.setdefault(section, {})[key] = value


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings. Logs go to stderr."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=True,
    )
