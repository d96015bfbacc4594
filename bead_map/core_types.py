# bead_map/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Literal, Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA raster or (N, 3) colour rows
Lab = NDArray[np.float32]  # (..., 3) CIE Lab
DistanceMatrix = NDArray[np.float64]  # (N, P)

FrequencyTable = Dict[str, int]  # palette name -> bead count, sorted by name

DistanceName = Literal["rgb", "lab"]
FilterName = Literal["nearest", "triangle", "catmull_rom", "gaussian", "lanczos3"]

PaletteScorer = Callable[[U8Image, "Palette"], DistanceMatrix]

# Pixels with alpha below this are treated as empty bead slots.
ALPHA_THRESHOLD = 128
TRANSPARENT_PIXEL: RGBATuple = (255, 255, 255, 0)

# Value objects


@dataclass(frozen=True)
class PaletteEntry:
    """Named bead colour."""

    name: str
    rgb: RGBTuple


@dataclass(frozen=True, eq=False)
class Palette:
    """
    Ordered bead palette with precomputed colour rows.

    Order matters: on equal distance the earlier entry wins.
    """

    entries: Tuple[PaletteEntry, ...]
    rgb: U8Image = field(repr=False)  # uint8 [P,3]
    lab: Lab = field(repr=False)  # float32 [P,3]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> PaletteEntry:
        return self.entries[index]

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.entries]


# Small helpers


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse 'rrggbb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if s.startswith("#"):
        s = s[1:]
    if len(s) != 6 or any(c not in "0123456789abcdef" for c in s):
        raise ValueError(f"expected 6 hex digits, got {hex_str!r}")
    value = int(s, 16)
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def assert_u8_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) raster and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError(f"expected uint8 (H,W,4) image, got {image.dtype} {image.shape}")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBATuple",
    "HexStr",
    "U8Image",
    "Lab",
    "DistanceMatrix",
    "FrequencyTable",
    "DistanceName",
    "FilterName",
    "PaletteScorer",
    # constants
    "ALPHA_THRESHOLD",
    "TRANSPARENT_PIXEL",
    # value objects
    "PaletteEntry",
    "Palette",
    # helpers
    "rgb_to_hex",
    "hex_to_rgb",
    "assert_u8_rgba",
]
