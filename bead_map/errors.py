# bead_map/errors.py
from __future__ import annotations

"""
Error types raised by bead_map. All are fatal for the current run.
"""

from typing import Optional


class BeadMapError(Exception):
    """Base class for every bead_map failure."""


class InvalidDimensions(BeadMapError, ValueError):
    """A grid or raster size would be zero, or a size factor is not positive."""


class TextureLoadError(BeadMapError, OSError):
    """The bead texture tile could not be read or decoded."""


class ImageReadError(BeadMapError, OSError):
    """The source image could not be opened or fully decoded."""


class ImageWriteError(BeadMapError, OSError):
    """The output PNG could not be written."""


class PaletteParseError(BeadMapError, ValueError):
    """A palette file line is malformed or the file cannot be read."""

    def __init__(
        self, message: str, line_no: Optional[int] = None, line: Optional[str] = None
    ) -> None:
        self.line_no = line_no
        self.line = line
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class EmptyPaletteError(BeadMapError, ValueError):
    """No palette entries to quantize against."""


__all__ = [
    "BeadMapError",
    "InvalidDimensions",
    "TextureLoadError",
    "ImageReadError",
    "ImageWriteError",
    "PaletteParseError",
    "EmptyPaletteError",
]
