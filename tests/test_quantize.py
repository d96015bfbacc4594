from __future__ import annotations

import importlib
import tracemalloc

import numpy as np
import pytest

from bead_map.core_types import TRANSPARENT_PIXEL
from bead_map.distance import pairwise_lab, pairwise_rgb
from bead_map.errors import EmptyPaletteError
from bead_map.palette_data import build_palette
from bead_map.quantize import frequency_from_counts, quantize

from conftest import BLUE, RED, rgba

quantize_module = importlib.import_module("bead_map.quantize")


def random_grid(seed: int, height: int = 17, width: int = 11) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)


@pytest.fixture
def small_palette():
    return build_palette(
        [
            ("White", (255, 255, 255)),
            ("Black", (0, 0, 0)),
            ("Red", (237, 28, 36)),
            ("Green", (14, 185, 104)),
            ("Blue", (40, 80, 158)),
        ]
    )


@pytest.mark.parametrize("distance", ["rgb", "lab"])
def test_low_alpha_becomes_transparent_white_and_uncounted(distance, red_blue_palette):
    grid = rgba([[(255, 0, 0, 127), (0, 0, 255, 0), (3, 4, 5, 128)]])
    freq, out = quantize(grid, red_blue_palette, distance)
    assert tuple(out[0, 0]) == TRANSPARENT_PIXEL
    assert tuple(out[0, 1]) == TRANSPARENT_PIXEL
    assert out[0, 2, 3] == 255
    assert sum(freq.values()) == 1


@pytest.mark.parametrize("distance", ["rgb", "lab"])
def test_tie_goes_to_first_palette_entry(distance):
    palette = build_palette([("First", (50, 60, 70)), ("Second", (50, 60, 70))])
    freq, out = quantize(rgba([[(10, 10, 10, 255)]]), palette, distance)
    assert freq == {"First": 1}
    assert tuple(out[0, 0]) == (50, 60, 70, 255)


def test_rgb_tie_between_distinct_colours_goes_first():
    palette = build_palette([("Up", (110, 100, 100)), ("Down", (90, 100, 100))])
    freq, _ = quantize(rgba([[(100, 100, 100, 255)]]), palette, "rgb")
    assert freq == {"Up": 1}
    reordered = build_palette([("Down", (90, 100, 100)), ("Up", (110, 100, 100))])
    freq, _ = quantize(rgba([[(100, 100, 100, 255)]]), reordered, "rgb")
    assert freq == {"Down": 1}


@pytest.mark.parametrize("distance", ["rgb", "lab"])
@pytest.mark.parametrize("workers", [1, 3, 8])
def test_frequency_total_matches_visible_beads(distance, workers, small_palette):
    grid = random_grid(seed=workers)
    freq, out = quantize(grid, small_palette, distance, workers=workers)
    visible = int(np.count_nonzero(grid[..., 3] >= 128))
    assert sum(freq.values()) == visible
    assert int(np.count_nonzero(out[..., 3] == 255)) == visible


@pytest.mark.parametrize("distance", ["rgb", "lab"])
def test_parallel_matches_single_thread(distance, small_palette):
    grid = random_grid(seed=42, height=33, width=9)
    freq1, out1 = quantize(grid, small_palette, distance, workers=1)
    freq4, out4 = quantize(grid, small_palette, distance, workers=4)
    assert freq1 == freq4
    assert np.array_equal(out1, out4)


def test_output_colours_come_from_palette(small_palette):
    grid = random_grid(seed=3)
    _, out = quantize(grid, small_palette, "lab", workers=2)
    opaque = out[out[..., 3] == 255][:, :3]
    allowed = {tuple(c) for c in small_palette.rgb.tolist()}
    assert {tuple(c) for c in opaque.tolist()} <= allowed


def test_input_grid_is_not_modified(red_blue_palette):
    grid = rgba([[RED, (10, 0, 200, 255)], [(0, 0, 0, 0), BLUE]])
    before = grid.copy()
    quantize(grid, red_blue_palette, "rgb")
    assert np.array_equal(grid, before)


def test_frequency_sorted_by_name_and_only_used():
    palette = build_palette(
        [("zeta", (0, 0, 0)), ("alpha", (255, 255, 255)), ("mid", (128, 128, 128))]
    )
    grid = rgba([[(250, 250, 250, 255), (5, 5, 5, 255), (0, 0, 0, 255)]])
    freq, _ = quantize(grid, palette, "rgb")
    assert list(freq) == ["alpha", "zeta"]
    assert freq == {"alpha": 1, "zeta": 2}


def test_duplicate_names_accumulate():
    palette = build_palette([("Red", (255, 0, 0)), ("Red", (128, 0, 0))])
    freq = frequency_from_counts(palette, np.array([2, 3]))
    assert freq == {"Red": 5}


def test_empty_palette_is_an_error():
    with pytest.raises(EmptyPaletteError):
        quantize(rgba([[RED]]), build_palette([]), "lab")


def test_fully_transparent_grid_counts_nothing(red_blue_palette):
    grid = np.zeros((3, 4, 4), dtype=np.uint8)
    freq, out = quantize(grid, red_blue_palette, "lab", workers=2)
    assert freq == {}
    assert np.all(out == np.array(TRANSPARENT_PIXEL, dtype=np.uint8))


@pytest.mark.parametrize("distance", ["rgb", "lab"])
def test_blocked_scoring_matches_full_matrix(distance, small_palette, monkeypatch):
    grid = random_grid(seed=7, height=40, width=30)
    grid[..., 3] = 255
    expected = pairwise_rgb if distance == "rgb" else pairwise_lab
    nearest = np.argmin(expected(grid[..., :3], small_palette.rgb), axis=1)
    monkeypatch.setattr(quantize_module, "CHUNK_CELLS", 7)
    _, out = quantize(grid, small_palette, distance)
    assert np.array_equal(out[..., :3].reshape(-1, 3), small_palette.rgb[nearest])


def test_repeated_colours_map_like_single_pixels(small_palette):
    grid = np.tile(rgba([[(200, 30, 40, 255), (20, 90, 150, 255)]]), (50, 20, 1))
    freq, out = quantize(grid, small_palette, "lab", workers=3)
    assert freq == {"Blue": 1000, "Red": 1000}
    assert tuple(out[7, 4]) == (237, 28, 36, 255)
    assert tuple(out[7, 5]) == (40, 80, 158, 255)


def test_large_grid_memory_stays_bounded():
    palette = build_palette(
        [(f"c{i}", (i * 30, 255 - i * 30, (i * 67) % 256)) for i in range(8)]
    )
    grid = random_grid(seed=11, height=1000, width=1000)
    grid[..., 3] = 255
    tracemalloc.start()
    try:
        freq, _ = quantize(grid, palette, "lab")
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    assert sum(freq.values()) == 1_000_000
    assert peak < 150 * 1024 * 1024
