# bead_map/compose.py
from __future__ import annotations

"""
Output rendering for a quantized bead grid.

Modes:
  flat  : every bead becomes a scale x scale block of its colour.
  tiled : every bead becomes a copy of the texture tile multiplied by the bead
          colour, channel by channel (R, G, B and A): out = bead * tile // 255.

Exports:
  scale_flat(grid, scale)
  composite_tiles(grid, tile, workers=1)
  render_bead_tile(size=16)
  compose(grid, scale=None, tile=None, workers=1)
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw

from .core_types import U8Image, assert_u8_rgba
from .errors import InvalidDimensions, TextureLoadError
from .utils import split_rows_into_parts

DEFAULT_TILE_SIZE = 16


def scale_flat(grid: U8Image, scale: int) -> U8Image:
    """Nearest-neighbour upscale by an integer factor."""
    if scale < 1:
        raise InvalidDimensions(f"output scale must be >= 1, got {scale}")
    return np.repeat(np.repeat(grid, scale, axis=0), scale, axis=1)


def _multiply_rows(cells: U8Image, tile: U8Image) -> U8Image:
    """Expand a block of bead rows into textured output rows."""
    rows, cols = cells.shape[:2]
    tile_h, tile_w = tile.shape[:2]
    prod = (
        cells[:, None, :, None, :].astype(np.uint16)
        * tile[None, :, None, :, :].astype(np.uint16)
    ) // 255
    return prod.astype(np.uint8).reshape(rows * tile_h, cols * tile_w, 4)


def composite_tiles(grid: U8Image, tile: U8Image, *, workers: int = 1) -> U8Image:
    """
    Multiply-blend the texture tile over every bead.

    Output shape is (H * tile_h, W * tile_w, 4). Row spans of beads are
    rendered on a thread pool; each output pixel depends only on its bead
    and the tile position.
    """
    grid = assert_u8_rgba(grid)
    tile = assert_u8_rgba(tile)
    height, width = grid.shape[:2]
    tile_h, tile_w = tile.shape[:2]
    if tile_h == 0 or tile_w == 0:
        raise TextureLoadError("texture tile is empty")

    spans = split_rows_into_parts(height, workers)
    if len(spans) <= 1:
        return _multiply_rows(grid, tile)

    out = np.empty((height * tile_h, width * tile_w, 4), dtype=np.uint8)
    with ThreadPoolExecutor(max_workers=len(spans)) as pool:
        futures = [pool.submit(_multiply_rows, grid[s:e], tile) for s, e in spans]
        for (s, e), fut in zip(spans, futures):
            out[s * tile_h : e * tile_h] = fut.result()
    return out


def render_bead_tile(size: int = DEFAULT_TILE_SIZE) -> U8Image:
    """
    Built-in texture: a light grey ring bead with a hole and a highlight,
    transparent around the bead.
    """
    if size < 4:
        raise InvalidDimensions(f"bead tile size must be >= 4, got {size}")
    # Draw at 4x and shrink for smooth edges.
    big = size * 4
    img = Image.new("RGBA", (big, big), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    pad = big // 16
    draw.ellipse((pad, pad, big - 1 - pad, big - 1 - pad), fill=(200, 200, 200, 255))
    inner = big // 8
    # Highlight sits up and to the left of centre.
    draw.ellipse(
        (pad + inner // 2, pad + inner // 2, big - 1 - pad - inner, big - 1 - pad - inner),
        fill=(250, 250, 250, 255),
    )
    hole = big * 5 // 16
    draw.ellipse((hole, hole, big - 1 - hole, big - 1 - hole), fill=(0, 0, 0, 0))
    tile = img.resize((size, size), resample=Image.Resampling.LANCZOS)
    return np.array(tile, dtype=np.uint8)


def compose(
    grid: U8Image,
    *,
    scale: Optional[int] = None,
    tile: Optional[U8Image] = None,
    workers: int = 1,
) -> U8Image:
    """Flat mode when scale is given, tiled mode otherwise (built-in tile by default)."""
    if scale is not None:
        return scale_flat(grid, scale)
    if tile is None:
        tile = render_bead_tile()
    return composite_tiles(grid, tile, workers=workers)


__all__ = [
    "DEFAULT_TILE_SIZE",
    "scale_flat",
    "composite_tiles",
    "render_bead_tile",
    "compose",
]
