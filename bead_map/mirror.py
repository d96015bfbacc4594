# bead_map/mirror.py
from __future__ import annotations

"""Left-right mirroring of the bead grid, for patterns ironed from the back."""

from .core_types import U8Image


def mirror_rows(grid: U8Image) -> U8Image:
    """
    Reverse every row of grid in place and return it.

    Columns are swapped pairwise from both ends toward the centre; an odd
    middle column stays put. Applying it twice restores the grid.
    """
    width = grid.shape[1]
    left, right = 0, width - 1
    while left < right:
        # Fancy indexing copies the right-hand side before the write.
        grid[:, [left, right]] = grid[:, [right, left]]
        left += 1
        right -= 1
    return grid


__all__ = ["mirror_rows"]
