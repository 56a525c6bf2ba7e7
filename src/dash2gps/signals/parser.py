"""
Coordinate Parser
=================

Extracts DMS fixes from noisy OCR text.

Overlay lines look like:

    N51°25 48” E0°19 20” 51MPH 12:42:29 06/06/2021

but OCR routinely mangles separators, swaps 0 for O or Q and adds
stray punctuation:

    N51°25" 9” EQ° 20" 49” 53MPH 12:43:49 06/06/2021

Matching:
    1. Replace the zero look-alikes O and Q with 0
    2. Per physical line, find: hemisphere letter, degree digits, the
       degree sign, minute digits, second digits, first for latitude
       (N/S) and then for longitude (E/W). Runs of non-digits between
       fields are skipped.
    3. A line is rejected only when a field is missing or out of range

The pattern is compiled once at import and shared by every worker.
"""

import logging
import re
from typing import List, Optional

from dash2gps.models.coordinate import DmsFix, LatHemisphere, LonHemisphere


logger = logging.getLogger(__name__)


ZERO_LOOKALIKES = ("O", "Q")

DMS_PATTERN = re.compile(
    r"([NS])[^\d]*(\d*)[^°]*°[^\d]*(\d*)[^\d]*(\d*)"
    r".*"
    r"([EW])[^\d]*(\d*)[^°]*°[^\d]*(\d*)[^\d]*(\d*)"
)


def normalize_text(text: str) -> str:
    """Replace characters OCR commonly reads instead of the digit 0."""
    for char in ZERO_LOOKALIKES:
        text = text.replace(char, "0")
    return text


def parse_line(line: str) -> Optional[DmsFix]:
    """
    Parse one physical line of OCR text.

    Args:
        line: A single line (no line breaks)

    Returns:
        DmsFix, or None when the line does not hold a complete reading
    """
    match = DMS_PATTERN.search(normalize_text(line))
    if match is None:
        return None

    groups = match.groups()
    numbers = (groups[1], groups[2], groups[3], groups[5], groups[6], groups[7])
    if not all(numbers):
        logger.debug(f"Incomplete reading skipped: {line.strip()!r}")
        return None

    try:
        return DmsFix(
            lat_hemisphere=LatHemisphere(groups[0]),
            lat_degree=int(groups[1]),
            lat_minute=int(groups[2]),
            lat_second=int(groups[3]),
            lon_hemisphere=LonHemisphere(groups[4]),
            lon_degree=int(groups[5]),
            lon_minute=int(groups[6]),
            lon_second=int(groups[7]),
        )
    except ValueError as e:
        logger.debug(f"Implausible reading skipped ({e}): {line.strip()!r}")
        return None


def parse_coordinates(text: str) -> List[DmsFix]:
    """
    Parse every line of an OCR result.

    Lines without a complete reading are skipped; that is not an error.

    Args:
        text: Raw OCR output, possibly multi-line

    Returns:
        Fixes in line order (possibly empty)
    """
    fixes = []
    for line in text.splitlines():
        fix = parse_line(line)
        if fix is not None:
            fixes.append(fix)
    return fixes
