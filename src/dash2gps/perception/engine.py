"""
OCR Engine
==========

Recognition abstraction for the overlay strip.

This module provides the OcrEngine protocol and MockOcrEngine
implementation. The pipeline only ever sees raw text from an engine,
never engine internals.

Design Rules:
    - Takes the path of a preprocessed image
    - Returns the raw text, line breaks preserved
    - Failures surface as OcrError (recoverable, per frame)
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


logger = logging.getLogger(__name__)


class OcrError(Exception):
    """Raised when recognition fails for one image."""
    pass


class OcrEngine(Protocol):
    """
    Protocol for recognition backends.

    Implemented by:
        - MockOcrEngine (tests, dry runs)
        - TesseractOcrEngine (production)
    """

    def recognize(self, image_path: Path) -> str:
        """
        Recognize text in an image.

        Args:
            image_path: Preprocessed overlay strip

        Returns:
            Raw recognized text
        """
        ...


class MockOcrEngine:
    """
    Deterministic engine returning canned text.

    Text is looked up by image stem, so ``frames-resize/f000000003.png``
    resolves the ``"f000000003"`` entry. Unknown images return the
    default text.

    Attributes:
        texts: Mapping of image stem to recognized text
        default: Text for images without an entry
        fail: Stems for which recognition raises OcrError
    """

    def __init__(
        self,
        texts: Optional[Dict[str, str]] = None,
        default: str = "",
        fail: Optional[set] = None,
    ) -> None:
        self.texts = dict(texts or {})
        self.default = default
        self.fail = set(fail or ())
        self.calls: int = 0

    def recognize(self, image_path: Union[str, Path]) -> str:
        self.calls += 1
        stem = Path(image_path).stem
        if stem in self.fail:
            raise OcrError(f"Mock recognition failure for {stem}")
        return self.texts.get(stem, self.default)
