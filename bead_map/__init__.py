"""
bead_map package.

Purpose:
  Turn images into bead patterns: downscale to a bead grid, snap every bead to
  a named palette colour, and render the grid flat or with a bead texture.
  See bead_map.cli for the command line.

Public API:
  run_pipeline   : in-memory source raster -> BeadResult.
  process_image  : file in, PNG out, returns BeadResult.
  PipelineConfig : run settings (density, distance, filter, mirror, scale).
  load_palette / build_palette : palette construction.
  downscale, quantize, mirror_rows, compose : individual stages.

Quick start:
  from bead_map import PipelineConfig, build_palette, run_pipeline
"""

__version__ = "0.1.0"

from .compose import compose, composite_tiles, render_bead_tile, scale_flat
from .config import PipelineConfig
from .core_types import Palette, PaletteEntry
from .distance import distance_lab, distance_rgb
from .downscale import downscale
from .errors import (
    BeadMapError,
    EmptyPaletteError,
    ImageReadError,
    ImageWriteError,
    InvalidDimensions,
    PaletteParseError,
    TextureLoadError,
)
from .mirror import mirror_rows
from .palette_data import build_palette, load_palette, parse_palette_lines
from .pipeline import BeadResult, process_image, run_pipeline
from .quantize import quantize

__all__ = [
    "__version__",
    "BeadResult",
    "PipelineConfig",
    "Palette",
    "PaletteEntry",
    "BeadMapError",
    "EmptyPaletteError",
    "ImageReadError",
    "ImageWriteError",
    "InvalidDimensions",
    "PaletteParseError",
    "TextureLoadError",
    "build_palette",
    "load_palette",
    "parse_palette_lines",
    "distance_rgb",
    "distance_lab",
    "downscale",
    "quantize",
    "mirror_rows",
    "compose",
    "composite_tiles",
    "render_bead_tile",
    "scale_flat",
    "run_pipeline",
    "process_image",
]
