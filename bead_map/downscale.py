# bead_map/downscale.py
from __future__ import annotations

"""
Source image -> bead grid downscaling.

Each bead covers a density x density block of source pixels. The grid size is
(W // density, H // density); the filter only decides how the source pixels
are weighted for each bead.

Filters:
  nearest     : Pillow NEAREST
  triangle    : Pillow BILINEAR
  catmull_rom : Pillow BICUBIC (a = -0.5, the Catmull-Rom spline)
  lanczos3    : Pillow LANCZOS
  gaussian    : separable numpy resampler, sigma 0.5, support 3
"""

import math
from typing import Callable, Dict, Tuple

import numpy as np
from PIL import Image

from .core_types import FilterName, U8Image, assert_u8_rgba
from .errors import InvalidDimensions

Resampler = Callable[[U8Image, Tuple[int, int]], U8Image]

GAUSSIAN_SIGMA = 0.5
GAUSSIAN_SUPPORT = 3.0


def bead_grid_size(width: int, height: int, density: int) -> Tuple[int, int]:
    """Grid (width, height) for a source size and density; rejects empty grids."""
    if density < 1:
        raise InvalidDimensions(f"bead density must be >= 1, got {density}")
    grid_w, grid_h = width // density, height // density
    if grid_w == 0 or grid_h == 0:
        raise InvalidDimensions(
            f"density {density} on a {width}x{height} image gives a "
            f"{grid_w}x{grid_h} bead grid"
        )
    return grid_w, grid_h


# Pillow-backed filters


def _pillow_resampler(resample: Image.Resampling) -> Resampler:
    # Pillow filters RGBA premultiplied, so transparent neighbours do not darken
    # edge beads. The numpy gaussian path below filters straight channels.
    def run(image: U8Image, size: Tuple[int, int]) -> U8Image:
        resized = Image.fromarray(image).resize(size, resample=resample)
        return np.array(resized.convert("RGBA"), dtype=np.uint8)

    return run


# Gaussian (numpy)


def _gaussian_kernel(x: np.ndarray) -> np.ndarray:
    s2 = GAUSSIAN_SIGMA * GAUSSIAN_SIGMA
    return np.exp(-(x * x) / (2.0 * s2)) / math.sqrt(2.0 * math.pi * s2)


def _axis_weights(src_len: int, dst_len: int) -> np.ndarray:
    """
    Normalised (dst_len, src_len) weight matrix for one axis.

    The kernel is stretched by the downscale ratio so every source pixel
    under a bead contributes.
    """
    ratio = src_len / dst_len
    stretch = max(ratio, 1.0)
    centres = (np.arange(dst_len, dtype=np.float64) + 0.5) * ratio
    src_pos = np.arange(src_len, dtype=np.float64) + 0.5
    x = (src_pos[None, :] - centres[:, None]) / stretch
    weights = np.where(np.abs(x) < GAUSSIAN_SUPPORT, _gaussian_kernel(x), 0.0)
    return weights / weights.sum(axis=1, keepdims=True)


def _gaussian_resample(image: U8Image, size: Tuple[int, int]) -> U8Image:
    dst_w, dst_h = size
    src_h, src_w = image.shape[:2]
    wy = _axis_weights(src_h, dst_h)
    wx = _axis_weights(src_w, dst_w)
    src = image.astype(np.float64)
    rows = np.einsum("ys,swc->ywc", wy, src)
    out = np.einsum("xs,ysc->yxc", wx, rows)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


DOWNSCALE_FILTERS: Dict[str, Resampler] = {
    "nearest": _pillow_resampler(Image.Resampling.NEAREST),
    "triangle": _pillow_resampler(Image.Resampling.BILINEAR),
    "catmull_rom": _pillow_resampler(Image.Resampling.BICUBIC),
    "gaussian": _gaussian_resample,
    "lanczos3": _pillow_resampler(Image.Resampling.LANCZOS),
}


def downscale(image: U8Image, density: int, filter_name: FilterName) -> U8Image:
    """
    Resample an RGBA raster down to its bead grid.

    Returns a new uint8 (H//density, W//density, 4) array; the input is not
    modified. Raises InvalidDimensions when the grid would be empty and
    ValueError for an unknown filter.
    """
    image = assert_u8_rgba(image)
    try:
        resample = DOWNSCALE_FILTERS[filter_name]
    except KeyError:
        choices = ", ".join(DOWNSCALE_FILTERS)
        raise ValueError(
            f"unknown downscale filter {filter_name!r} (choose from {choices})"
        ) from None

    height, width = image.shape[:2]
    size = bead_grid_size(width, height, density)
    if size == (width, height):
        return image.copy()
    return resample(np.ascontiguousarray(image), size)


__all__ = [
    "GAUSSIAN_SIGMA",
    "GAUSSIAN_SUPPORT",
    "DOWNSCALE_FILTERS",
    "bead_grid_size",
    "downscale",
]
