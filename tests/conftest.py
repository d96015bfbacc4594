from __future__ import annotations

import numpy as np
import pytest

from bead_map.palette_data import build_palette

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = (0, 0, 0, 0)


def rgba(rows) -> np.ndarray:
    """Nested lists of RGBA tuples to a uint8 [H,W,4] array."""
    return np.array(rows, dtype=np.uint8)


@pytest.fixture
def red_blue_palette():
    return build_palette([("Red", (255, 0, 0)), ("Blue", (0, 0, 255))])


@pytest.fixture
def scenario_image() -> np.ndarray:
    # [opaque red, opaque blue], [transparent, opaque red]
    return rgba([[RED, BLUE], [CLEAR, RED]])
