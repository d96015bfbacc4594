# bead_map/distance.py
from __future__ import annotations

"""
Colour distance metrics.

Two closed choices, selected once per run:
  rgb : squared Euclidean distance of the 8-bit channels.
  lab : squared Euclidean distance in CIE Lab (D65). Default.

The pairwise forms score N source colours against P palette colours at once
and return an (N, P) matrix; the scalar forms go through them so both agree.
The palette scorers in DISTANCE_METRICS reuse the palette's precomputed rows.
"""

from typing import Dict, Optional

import numpy as np

from .colour_convert import rgb_to_lab
from .core_types import (
    DistanceMatrix,
    DistanceName,
    Lab,
    Palette,
    PaletteScorer,
    RGBTuple,
    U8Image,
)


def _squared_euclidean(src: np.ndarray, pal: np.ndarray) -> DistanceMatrix:
    diff = src[:, None, :] - pal[None, :, :]
    return np.sum(diff * diff, axis=2)


def pairwise_rgb(src_rgb: U8Image, pal_rgb: U8Image) -> DistanceMatrix:
    """Squared RGB distance, channels widened to float64."""
    src = np.asarray(src_rgb, dtype=np.float64).reshape(-1, 3)
    pal = np.asarray(pal_rgb, dtype=np.float64).reshape(-1, 3)
    return _squared_euclidean(src, pal)


def pairwise_lab(
    src_rgb: U8Image, pal_rgb: U8Image, pal_lab: Optional[Lab] = None
) -> DistanceMatrix:
    """
    Squared Lab distance between the RGB rows after conversion.
    pal_lab, when given, must be rgb_to_lab(pal_rgb) and skips that conversion.
    """
    src = rgb_to_lab(np.asarray(src_rgb).reshape(-1, 3)).astype(np.float64)
    if pal_lab is None:
        pal_lab = rgb_to_lab(np.asarray(pal_rgb).reshape(-1, 3))
    pal = np.asarray(pal_lab, dtype=np.float64).reshape(-1, 3)
    return _squared_euclidean(src, pal)


def distance_rgb(a: RGBTuple, b: RGBTuple) -> float:
    return float(pairwise_rgb(np.array([a]), np.array([b]))[0, 0])


def distance_lab(a: RGBTuple, b: RGBTuple) -> float:
    return float(pairwise_lab(np.array([a]), np.array([b]))[0, 0])


def score_rgb(src_rgb: U8Image, palette: Palette) -> DistanceMatrix:
    return pairwise_rgb(src_rgb, palette.rgb)


def score_lab(src_rgb: U8Image, palette: Palette) -> DistanceMatrix:
    return pairwise_lab(src_rgb, palette.rgb, palette.lab)


DISTANCE_METRICS: Dict[str, PaletteScorer] = {
    "rgb": score_rgb,
    "lab": score_lab,
}


def get_distance(name: DistanceName) -> PaletteScorer:
    """Look up a palette scorer by name; raises ValueError for unknown names."""
    try:
        return DISTANCE_METRICS[name]
    except KeyError:
        choices = ", ".join(sorted(DISTANCE_METRICS))
        raise ValueError(f"unknown distance {name!r} (choose from {choices})") from None


__all__ = [
    "pairwise_rgb",
    "pairwise_lab",
    "distance_rgb",
    "distance_lab",
    "score_rgb",
    "score_lab",
    "DISTANCE_METRICS",
    "get_distance",
]
