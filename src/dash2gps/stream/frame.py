"""
Frame File Model
================

Internal representation of one extracted frame image.

The extractor names frames with a zero-padded, 1-based counter
(``f000000001.jpg``). The sequence index used everywhere else in the
pipeline is 0-based, so ``f000000001.jpg`` is frame 0.

Design Rules:
    - Immutable once created
    - Does NOT read or decode pixel data
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union


_SEQUENCE_RE = re.compile(r"(\d+)(?!.*\d)")


class FrameNameError(ValueError):
    """Raised when a frame file name carries no sequence number."""
    pass


@dataclass(frozen=True, slots=True)
class FrameFile:
    """
    Frame image written by the extractor.

    Attributes:
        path: Location of the image inside the workspace
        index: 0-based sequence index
        completed_at: Write completion time (file mtime, POSIX seconds)
    """

    path: Path
    index: int
    completed_at: float = 0.0

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FrameFile":
        """
        Build a FrameFile from an extractor output path.

        Raises:
            FrameNameError: If the stem holds no digits, or numbers the
                frame 0 (extractor numbering starts at 1)
        """
        path = Path(path)
        match = _SEQUENCE_RE.search(path.stem)
        if match is None:
            raise FrameNameError(f"No sequence number in frame name: {path.name}")

        number = int(match.group(1))
        if number < 1:
            raise FrameNameError(f"Frame numbers start at 1: {path.name}")

        try:
            completed_at = os.stat(path).st_mtime
        except OSError:
            completed_at = 0.0

        return cls(path=path, index=number - 1, completed_at=completed_at)

    def __repr__(self) -> str:
        return f"FrameFile(index={self.index}, path={self.path.name})"
