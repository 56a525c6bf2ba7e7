"""
Frame Preprocessor
==================

Isolates the telemetry overlay and maximizes its contrast for OCR.

Dashcam overlays are light text on a semi-transparent dark strip along
the bottom of the picture. Cropping to that strip, inverting it and
pushing the contrast far past 1.0 binarizes the strip into dark glyphs
on a light background.

Pipeline:
    1. Read BGR frame (OpenCV)
    2. Crop to the bottom strip, or to the configured CropBox
    3. Grayscale
    4. Invert
    5. Contrast: v' = ((v / 255 - 0.5) * ((100 + c) / 100)^2 + 0.5) * 255
    6. Brightness: v' = v + b
    7. Write PNG beside the source tree (never over it)

Design Rules:
    - Deterministic: identical input gives byte-identical output
    - This is the ONLY place that decodes frame pixels
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np


logger = logging.getLogger(__name__)


# Resolution hint passed to the OCR engine for preprocessed strips
OVERLAY_DPI = 300

DEFAULT_STRIP_HEIGHT = 60
DEFAULT_CONTRAST = -500.0
DEFAULT_BRIGHTNESS = 50

_EDGE_RE = re.compile(r"^(\d+(?:\.\d+)?)(px|%)?$")


class PreprocessError(Exception):
    """Raised when a frame cannot be decoded or written."""
    pass


@dataclass(frozen=True, slots=True)
class CropEdge:
    """One crop inset, in pixels or in percent of the frame dimension."""

    value: float
    percent: bool = False

    def to_pixels(self, dimension: int) -> int:
        if self.percent:
            return int(round(dimension * self.value / 100.0))
        return int(self.value)


@dataclass(frozen=True, slots=True)
class CropBox:
    """
    Insets removed from each frame edge before OCR.

    Format: "left top right bottom", each value either pixels
    ("12", "12px") or percent ("10%").

    Example:
        # keep the bottom 8% of the frame
        CropBox.parse("0 92% 0 0")
    """

    left: CropEdge
    top: CropEdge
    right: CropEdge
    bottom: CropEdge

    @classmethod
    def parse(cls, text: str) -> "CropBox":
        parts = text.split()
        if len(parts) != 4:
            raise ValueError(
                f"Crop must be 'left top right bottom', got {text!r}"
            )

        edges = []
        for part in parts:
            match = _EDGE_RE.match(part.strip().lower())
            if match is None:
                raise ValueError(f"Invalid crop value {part!r} (use px or %)")
            edges.append(CropEdge(float(match.group(1)), match.group(2) == "%"))

        return cls(*edges)

    def window(self, height: int, width: int) -> Tuple[int, int, int, int]:
        """Return (y1, y2, x1, x2) for an image of the given size."""
        x1 = self.left.to_pixels(width)
        y1 = self.top.to_pixels(height)
        x2 = width - self.right.to_pixels(width)
        y2 = height - self.bottom.to_pixels(height)

        if x1 >= x2 or y1 >= y2:
            raise ValueError(
                f"Crop leaves an empty image for {width}x{height}: "
                f"x {x1}..{x2}, y {y1}..{y2}"
            )
        return y1, y2, x1, x2


def adjust_contrast(image: np.ndarray, contrast: float) -> np.ndarray:
    """
    Contrast adjustment around mid-grey.

    Negative values below -100 flip back past zero into a very steep
    curve, which is what binarizes the overlay.
    """
    factor = ((100.0 + contrast) / 100.0) ** 2
    scaled = image.astype(np.float32) / 255.0
    adjusted = ((scaled - 0.5) * factor + 0.5) * 255.0
    return np.clip(np.rint(adjusted), 0.0, 255.0).astype(np.uint8)


def brighten(image: np.ndarray, value: int) -> np.ndarray:
    shifted = image.astype(np.int16) + int(value)
    return np.clip(shifted, 0, 255).astype(np.uint8)


class FramePreprocessor:
    """
    Overlay isolation for one frame at a time.

    Stateless apart from configuration, safe to share across workers:
    each call writes to a path derived from its own source name.

    Attributes:
        output_dir: Directory receiving the preprocessed PNGs
        strip_height: Height of the bottom strip in pixels
        crop: Optional CropBox overriding the bottom strip
        contrast: Contrast adjustment value
        brightness: Brightness offset
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        strip_height: int = DEFAULT_STRIP_HEIGHT,
        crop: Optional[CropBox] = None,
        contrast: float = DEFAULT_CONTRAST,
        brightness: int = DEFAULT_BRIGHTNESS,
    ) -> None:
        """
        Initialize the preprocessor.

        Args:
            output_dir: Existing directory for the PNG output
            strip_height: Bottom strip height in pixels. Must be >= 1.
            crop: Crop override; replaces the bottom strip when set
            contrast: Contrast adjustment value
            brightness: Offset added after the contrast step
        """
        if strip_height < 1:
            raise ValueError("strip_height must be >= 1")

        self.output_dir = Path(output_dir)
        self.strip_height = strip_height
        self.crop = crop
        self.contrast = contrast
        self.brightness = brightness

    def output_path(self, source: Path) -> Path:
        return self.output_dir / f"{source.stem}.png"

    def transform(self, bgr: np.ndarray) -> np.ndarray:
        """
        Apply the overlay transform to a decoded BGR image.

        Args:
            bgr: Image as np.ndarray (H, W, 3), dtype=uint8

        Returns:
            Single-channel uint8 strip ready for OCR
        """
        height, width = bgr.shape[:2]

        if self.crop is not None:
            y1, y2, x1, x2 = self.crop.window(height, width)
        else:
            y1, y2, x1, x2 = max(0, height - self.strip_height), height, 0, width

        strip = bgr[y1:y2, x1:x2]
        gray = cv2.cvtColor(strip, cv2.COLOR_BGR2GRAY)
        inverted = cv2.bitwise_not(gray)

        return brighten(adjust_contrast(inverted, self.contrast), self.brightness)

    def process(self, source: Union[str, Path]) -> Path:
        """
        Preprocess one frame file.

        Args:
            source: Extracted frame image

        Returns:
            Path of the written PNG

        Raises:
            PreprocessError: If the image cannot be decoded or written
        """
        source = Path(source)
        bgr = cv2.imread(str(source), cv2.IMREAD_COLOR)
        if bgr is None:
            raise PreprocessError(f"Failed to decode image: {source}")

        try:
            result = self.transform(bgr)
        except ValueError as e:
            raise PreprocessError(f"Cannot crop {source.name}: {e}") from e

        target = self.output_path(source)
        ok, encoded = cv2.imencode(".png", result)
        if not ok:
            raise PreprocessError(f"Failed to encode preprocessed image for {source.name}")

        try:
            target.write_bytes(encoded.tobytes())
        except OSError as e:
            raise PreprocessError(f"Failed to write {target}: {e}") from e

        logger.debug(f"Preprocessed {source.name} -> {target.name} ({result.shape[1]}x{result.shape[0]})")
        return target
