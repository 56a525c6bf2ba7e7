"""
Tesseract OCR Engine
====================

Production recognition engine backed by Tesseract, via pytesseract.

This engine:
    - Verifies the tesseract executable and the tessdata directory at
      construction (fail fast)
    - Uses a fixed language and a fixed DPI hint matching the
      preprocessor's output scale
    - Converts every engine failure into OcrError so a bad frame
      never takes the worker pool down

Design Rules:
    - Misconfiguration is fatal (RecognitionDataError)
    - Per-image failures are recoverable (OcrError)
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pytesseract

from dash2gps.perception.engine import OcrError
from dash2gps.perception.preprocessor import OVERLAY_DPI


logger = logging.getLogger(__name__)


TRAINEDDATA_SUFFIX = ".traineddata"


class RecognitionDataError(Exception):
    """Raised when the tesseract executable or its tessdata directory is unusable."""
    pass


class TesseractOcrEngine:
    """
    OCR engine using the Tesseract command line through pytesseract.

    Attributes:
        tessdata_dir: Directory holding ``*.traineddata`` files
        language: Recognition language (e.g. "eng")
        dpi: Resolution hint for the preprocessed strip
    """

    def __init__(
        self,
        tessdata_dir: Union[str, Path],
        language: str = "eng",
        dpi: int = OVERLAY_DPI,
        tesseract_cmd: Optional[str] = None,
    ) -> None:
        """
        Initialize the Tesseract engine.

        Args:
            tessdata_dir: Directory holding the language data
            language: Language passed to tesseract with -l
            dpi: Resolution hint for the preprocessed strips
            tesseract_cmd: tesseract executable, when not on PATH

        Raises:
            RecognitionDataError: If tessdata_dir holds no usable language data
                or the tesseract executable cannot be run
        """
        self.tessdata_dir = Path(tessdata_dir).resolve()
        self.language = language
        self.dpi = dpi

        self._check_data_dir()

        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionDataError(
                "tesseract executable not found. Install Tesseract or set "
                "ocr.tesseract_cmd to its path"
            ) from e
        logger.debug(f"Using tesseract {version}")

        self._config = f'--tessdata-dir "{self.tessdata_dir}" --dpi {self.dpi}'

        logger.info(
            f"TesseractOcrEngine initialized: language={language}, "
            f"dpi={dpi}, tessdata={self.tessdata_dir}"
        )

    def _check_data_dir(self) -> None:
        if not self.tessdata_dir.is_dir():
            raise RecognitionDataError(
                f"Recognition data directory not found: {self.tessdata_dir}. "
                f"Download {self.language}{TRAINEDDATA_SUFFIX} from "
                "https://github.com/tesseract-ocr/tessdata and pass its folder with --tessdata"
            )

        available = sorted(p.stem for p in self.tessdata_dir.glob(f"*{TRAINEDDATA_SUFFIX}"))
        if not available:
            raise RecognitionDataError(
                f"No {TRAINEDDATA_SUFFIX} files in {self.tessdata_dir}. "
                f"Download {self.language}{TRAINEDDATA_SUFFIX} from "
                "https://github.com/tesseract-ocr/tessdata into that folder"
            )
        if self.language not in available:
            raise RecognitionDataError(
                f"Language '{self.language}' not found in {self.tessdata_dir} "
                f"(available: {', '.join(available)})"
            )

    def recognize(self, image_path: Union[str, Path]) -> str:
        """
        Run Tesseract on one preprocessed image.

        Raises:
            OcrError: On any engine or image failure
        """
        try:
            return pytesseract.image_to_string(
                str(image_path),
                lang=self.language,
                config=self._config,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise OcrError(f"tesseract executable not found: {e}") from e
        except pytesseract.TesseractError as e:
            raise OcrError(f"tesseract failed on {Path(image_path).name}: {e.message}") from e
        except (OSError, RuntimeError, ValueError) as e:
            raise OcrError(f"Recognition failed on {Path(image_path).name}: {e}") from e
