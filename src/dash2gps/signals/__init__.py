"""
Signals Module
==============

From raw OCR text to an ordered track.

Components:
    - parse_coordinates / parse_line: Noise-tolerant DMS parsing
    - TrackAssembler: Decimal conversion, speed and timestamps
    - TrackSequencer: Reorders worker results before assembly
"""

from dash2gps.signals.parser import DMS_PATTERN, normalize_text, parse_coordinates, parse_line
from dash2gps.signals.track import TrackAssembler
from dash2gps.signals.sequencer import TrackSequencer, TrackSink

__all__ = [
    "DMS_PATTERN",
    "normalize_text",
    "parse_line",
    "parse_coordinates",
    "TrackAssembler",
    "TrackSequencer",
    "TrackSink",
]
