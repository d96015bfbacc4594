# bead_map/quantize.py
from __future__ import annotations

"""
Bead grid quantization.

Every bead with alpha >= 128 takes the colour of its nearest palette entry
(first entry wins on equal distance) and becomes fully opaque. Beads below
the threshold become (255, 255, 255, 0) and are not counted.

Distances are computed once per distinct colour, in bounded blocks.
Row spans are classified on a thread pool. Each span returns its own
per-palette-index tally; the tallies are merged once all spans finish.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from .core_types import (
    ALPHA_THRESHOLD,
    TRANSPARENT_PIXEL,
    DistanceName,
    FrequencyTable,
    Palette,
    PaletteScorer,
    U8Image,
    assert_u8_rgba,
)
from .distance import get_distance
from .errors import EmptyPaletteError
from .utils import split_rows_into_parts

# Source colours x palette entries scored per block; bounds the distance matrix.
CHUNK_CELLS = 1 << 20


def _nearest_indices(
    colours: U8Image, palette: Palette, scorer: PaletteScorer
) -> np.ndarray:
    """Nearest palette index per colour row, scored in blocks of CHUNK_CELLS."""
    step = max(1, CHUNK_CELLS // len(palette))
    nearest = np.empty((colours.shape[0],), dtype=np.intp)
    for start in range(0, colours.shape[0], step):
        block = colours[start : start + step]
        nearest[start : start + step] = np.argmin(scorer(block, palette), axis=1)
    return nearest


def _quantize_rows(
    rows: U8Image, palette: Palette, scorer: PaletteScorer
) -> Tuple[U8Image, np.ndarray]:
    """Quantize a block of rows; returns (new rows, int64 [P] index counts)."""
    flat = rows.reshape(-1, 4)
    out = np.empty_like(flat)
    counts = np.zeros((len(palette),), dtype=np.int64)

    opaque = flat[:, 3] >= ALPHA_THRESHOLD
    out[~opaque] = TRANSPARENT_PIXEL
    if np.any(opaque):
        # Identical colours share one distance row.
        rgb = flat[opaque, :3].astype(np.uint32)
        keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
        uniq_keys, inverse = np.unique(keys, return_inverse=True)
        uniq = np.stack(
            [(uniq_keys >> 16) & 0xFF, (uniq_keys >> 8) & 0xFF, uniq_keys & 0xFF],
            axis=1,
        ).astype(np.uint8)
        nearest = _nearest_indices(uniq, palette, scorer)[inverse.reshape(-1)]
        out[opaque, :3] = palette.rgb[nearest]
        out[opaque, 3] = 255
        counts += np.bincount(nearest, minlength=len(palette))
    return out.reshape(rows.shape), counts


def frequency_from_counts(palette: Palette, counts: np.ndarray) -> FrequencyTable:
    """Fold per-index counts into a name -> count table sorted by name."""
    by_name: FrequencyTable = {}
    for entry, count in zip(palette.entries, counts.tolist()):
        if count > 0:
            by_name[entry.name] = by_name.get(entry.name, 0) + int(count)
    return dict(sorted(by_name.items()))


def quantize(
    grid: U8Image,
    palette: Palette,
    distance: DistanceName = "lab",
    *,
    workers: int = 1,
) -> Tuple[FrequencyTable, U8Image]:
    """
    Map every visible bead to its nearest palette colour.

    Args:
      grid     : uint8 [H,W,4] bead grid (left untouched)
      palette  : ordered palette; must not be empty
      distance : "rgb" or "lab"
      workers  : threads used for row spans
    Returns:
      (frequency table, new uint8 [H,W,4] grid)
    """
    grid = assert_u8_rgba(grid)
    if len(palette) == 0:
        raise EmptyPaletteError("palette has no entries")
    scorer = get_distance(distance)

    spans = split_rows_into_parts(grid.shape[0], workers)
    if len(spans) <= 1:
        out, counts = _quantize_rows(grid, palette, scorer)
        return frequency_from_counts(palette, counts), out

    out = np.empty_like(grid)
    with ThreadPoolExecutor(max_workers=len(spans)) as pool:
        futures = [
            pool.submit(_quantize_rows, grid[s:e], palette, scorer) for s, e in spans
        ]
        tallies: List[np.ndarray] = []
        for (s, e), fut in zip(spans, futures):
            rows, counts = fut.result()
            out[s:e] = rows
            tallies.append(counts)
    return frequency_from_counts(palette, np.sum(tallies, axis=0)), out


__all__ = ["quantize", "frequency_from_counts"]
