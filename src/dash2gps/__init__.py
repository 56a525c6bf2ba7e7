"""
dash2gps
========

Recover an approximate GPS track from dashcam footage whose telemetry
(latitude/longitude, speed, clock) is burned into the picture as text.

Components:
    - stream: Frame extraction, arrival watching and the frame queue
    - perception: Overlay preprocessing and OCR engines
    - signals: Coordinate parsing, ordering and track assembly
    - pipeline: Worker pool, shutdown token and the pipeline driver
    - output: Track point formatting and writing

Example:
    from dash2gps.config import load_config
    from dash2gps.pipeline import PipelineDriver

    settings = load_config(overrides={"ocr": {"tessdata_dir": "./tessdata"}})
    stats = PipelineDriver(settings).run("201124_174859_011_LO.MOV")
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
