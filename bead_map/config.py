# bead_map/config.py
from __future__ import annotations

"""
Run configuration, passed explicitly to the pipeline.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from .core_types import DistanceName, FilterName
from .distance import DISTANCE_METRICS
from .downscale import DOWNSCALE_FILTERS
from .errors import InvalidDimensions
from .utils import default_workers

DEFAULT_DENSITY = 1
DEFAULT_DISTANCE: DistanceName = "lab"
DEFAULT_FILTER: FilterName = "catmull_rom"
DEFAULT_PALETTE_FILE = "palette.txt"
OUTPUT_SUFFIX = ".perlur.png"

OutputMode = Literal["flat", "tiled"]


@dataclass(frozen=True)
class PipelineConfig:
    """
    Settings for one run.

    density          : source pixels per bead side (>= 1)
    distance         : "rgb" | "lab"
    downscale_filter : "nearest" | "triangle" | "catmull_rom" | "gaussian" | "lanczos3"
    mirror           : flip rows left-right after quantizing
    scale            : flat output scale; None selects tiled texture output
    workers          : threads for quantizing and tiling
    """

    density: int = DEFAULT_DENSITY
    distance: DistanceName = DEFAULT_DISTANCE
    downscale_filter: FilterName = DEFAULT_FILTER
    mirror: bool = False
    scale: Optional[int] = None
    workers: int = field(default_factory=default_workers)

    def __post_init__(self) -> None:
        if self.distance not in DISTANCE_METRICS:
            raise ValueError(f"unknown distance {self.distance!r}")
        if self.downscale_filter not in DOWNSCALE_FILTERS:
            raise ValueError(f"unknown downscale filter {self.downscale_filter!r}")
        if self.density < 1:
            raise InvalidDimensions(f"bead density must be >= 1, got {self.density}")
        if self.scale is not None and self.scale < 1:
            raise InvalidDimensions(f"output scale must be >= 1, got {self.scale}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    @property
    def output_mode(self) -> OutputMode:
        return "tiled" if self.scale is None else "flat"


__all__ = [
    "DEFAULT_DENSITY",
    "DEFAULT_DISTANCE",
    "DEFAULT_FILTER",
    "DEFAULT_PALETTE_FILE",
    "OUTPUT_SUFFIX",
    "OutputMode",
    "PipelineConfig",
]
