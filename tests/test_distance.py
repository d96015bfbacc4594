from __future__ import annotations

import itertools

import numpy as np
import pytest

from bead_map.colour_convert import rgb_to_lab
from bead_map.distance import (
    DISTANCE_METRICS,
    distance_lab,
    distance_rgb,
    get_distance,
    pairwise_lab,
    pairwise_rgb,
    score_lab,
    score_rgb,
)
from bead_map.palette_data import build_palette

SAMPLES = [
    (0, 0, 0),
    (255, 255, 255),
    (1, 1, 1),
    (255, 0, 0),
    (0, 128, 255),
    (12, 200, 77),
    (128, 128, 128),
]

SCALAR = [distance_rgb, distance_lab]


@pytest.mark.parametrize("dist", SCALAR)
def test_distance_to_self_is_zero(dist):
    for c in SAMPLES:
        assert dist(c, c) == 0.0


@pytest.mark.parametrize("dist", SCALAR)
def test_distance_is_symmetric_and_non_negative(dist):
    for a, b in itertools.combinations(SAMPLES, 2):
        assert dist(a, b) == dist(b, a)
        assert dist(a, b) > 0.0


def test_rgb_distance_is_sum_of_squares():
    assert distance_rgb((255, 0, 0), (0, 0, 255)) == 2 * 255.0**2
    assert distance_rgb((10, 20, 30), (13, 16, 30)) == 25.0


def test_rgb_distance_does_not_wrap_uint8():
    src = np.array([[0, 0, 0]], dtype=np.uint8)
    pal = np.array([[255, 255, 255]], dtype=np.uint8)
    assert pairwise_rgb(src, pal)[0, 0] == 3 * 255.0**2


def test_lab_white_and_black_reference_values():
    lab = rgb_to_lab(np.array([[255, 255, 255], [0, 0, 0]], dtype=np.uint8))
    assert lab[0, 0] == pytest.approx(100.0, abs=0.05)
    assert lab[0, 1] == pytest.approx(0.0, abs=0.05)
    assert lab[0, 2] == pytest.approx(0.0, abs=0.05)
    assert np.allclose(lab[1], 0.0, atol=1e-4)


def test_lab_treats_low_values_as_8bit():
    # (1, 1, 1) is almost black, not white
    lab = rgb_to_lab(np.array([1, 1, 1], dtype=np.uint8))
    assert lab[0] < 1.0


def test_lab_separates_what_rgb_ties():
    # Equal RGB steps; green reads much brighter than blue.
    black, green, blue = (0, 0, 0), (0, 60, 0), (0, 0, 60)
    assert distance_rgb(black, green) == distance_rgb(black, blue)
    assert distance_lab(black, green) > distance_lab(black, blue)


def test_pairwise_shape_matches_rows_and_palette():
    src = np.array(SAMPLES, dtype=np.uint8)
    pal = np.array(SAMPLES[:3], dtype=np.uint8)
    assert pairwise_rgb(src, pal).shape == (len(SAMPLES), 3)
    assert pairwise_lab(src, pal).shape == (len(SAMPLES), 3)


def test_scalar_and_pairwise_agree():
    src = np.array(SAMPLES, dtype=np.uint8)
    mat = pairwise_lab(src, src)
    for i, a in enumerate(SAMPLES):
        for j, b in enumerate(SAMPLES):
            assert mat[i, j] == pytest.approx(distance_lab(a, b), rel=1e-5, abs=1e-3)


def test_registry_is_closed():
    assert set(DISTANCE_METRICS) == {"rgb", "lab"}
    assert get_distance("rgb") is score_rgb
    assert get_distance("lab") is score_lab
    with pytest.raises(ValueError, match="unknown distance"):
        get_distance("cie2000")  # type: ignore[arg-type]


def test_scorers_use_palette_rows():
    palette = build_palette([("Black", (0, 0, 0)), ("Teal", (16, 174, 166))])
    src = np.array(SAMPLES, dtype=np.uint8)
    assert np.array_equal(score_rgb(src, palette), pairwise_rgb(src, palette.rgb))
    assert np.allclose(score_lab(src, palette), pairwise_lab(src, palette.rgb))
