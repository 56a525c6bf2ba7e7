"""
Perception Module
=================

Overlay preprocessing and text recognition.

The rest of the pipeline consumes ONLY the raw text produced here.

Components:
    - FramePreprocessor: Crops and binarizes the telemetry strip
    - CropBox: Optional crop override (px or %)
    - OcrEngine: Protocol for recognition backends
    - MockOcrEngine: Deterministic engine for testing
    - TesseractOcrEngine: Tesseract via pytesseract (production)
"""

from dash2gps.perception.preprocessor import (
    OVERLAY_DPI,
    CropBox,
    FramePreprocessor,
    PreprocessError,
)
from dash2gps.perception.engine import MockOcrEngine, OcrEngine, OcrError
from dash2gps.perception.tesseract_engine import (
    RecognitionDataError,
    TesseractOcrEngine,
)

__all__ = [
    "OVERLAY_DPI",
    "CropBox",
    "FramePreprocessor",
    "PreprocessError",
    "OcrEngine",
    "OcrError",
    "MockOcrEngine",
    "TesseractOcrEngine",
    "RecognitionDataError",
]
