# bead_map/image_io.py
from __future__ import annotations

"""
Image I/O helpers (RGBA, 8-bit) and texture loading.

Read and write failures surface as ImageReadError / ImageWriteError so the
CLI reports them like any other run error.
"""

import struct
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import U8Image
from .errors import ImageReadError, ImageWriteError, TextureLoadError

# Pillow raises any of these for unreadable, truncated or corrupt files.
_DECODE_ERRORS = (UnidentifiedImageError, OSError, SyntaxError, struct.error)


def load_image_rgba(path: Path) -> U8Image:
    """Load an image with Pillow, apply EXIF orientation, return uint8 [H,W,4]."""
    try:
        with Image.open(path) as im0:
            im = ImageOps.exif_transpose(im0).convert("RGBA")
            im.load()
    except _DECODE_ERRORS as exc:
        raise ImageReadError(f"cannot read image {path}: {exc}") from exc
    return np.array(im, dtype=np.uint8)


def read_image_size(path: Path) -> Tuple[int, int]:
    """(width, height) from the image header, without decoding pixels."""
    try:
        with Image.open(path) as im:
            return im.size
    except _DECODE_ERRORS as exc:
        raise ImageReadError(f"cannot read image {path}: {exc}") from exc


def save_png_rgba(path: Path, image: U8Image) -> Path:
    """Save a uint8 [H,W,4] raster as PNG, creating parent folders."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(np.ascontiguousarray(image)).save(path, format="PNG")
    except OSError as exc:
        raise ImageWriteError(f"cannot write {path}: {exc}") from exc
    return path


def load_texture(path: Path) -> U8Image:
    """Load the bead texture tile; any read or decode failure is a TextureLoadError."""
    try:
        tile = load_image_rgba(path)
    except ImageReadError as exc:
        raise TextureLoadError(f"cannot load texture {path}: {exc.__cause__}") from exc
    if tile.shape[0] == 0 or tile.shape[1] == 0:
        raise TextureLoadError(f"texture {path} is empty")
    return tile


__all__ = ["load_image_rgba", "read_image_size", "save_png_rgba", "load_texture"]
