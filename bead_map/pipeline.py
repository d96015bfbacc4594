# bead_map/pipeline.py
from __future__ import annotations

"""
End-to-end bead pattern pipeline.

  source -> downscale -> quantize -> [mirror] -> compose

run_pipeline() works on in-memory rasters only. process_image() adds the file
boundary: texture and source are loaded first and the output is written only
after every stage succeeded.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .compose import compose
from .config import OUTPUT_SUFFIX, PipelineConfig
from .core_types import FrequencyTable, Palette, U8Image
from .downscale import downscale
from .image_io import load_image_rgba, load_texture, save_png_rgba
from .mirror import mirror_rows
from .quantize import quantize
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string


@dataclass
class BeadResult:
    """Frequency table, quantized bead grid, and the rendered output raster."""

    frequency: FrequencyTable
    grid: U8Image
    image: U8Image

    @property
    def total(self) -> int:
        return sum(self.frequency.values())


def default_output_path(src_path: Path) -> Path:
    """<stem>.perlur.png next to the input."""
    return src_path.with_name(f"{src_path.stem}{OUTPUT_SUFFIX}")


def run_pipeline(
    source: U8Image,
    palette: Palette,
    config: PipelineConfig,
    *,
    tile: Optional[U8Image] = None,
    debug: bool = False,
) -> BeadResult:
    """
    Turn an RGBA source raster into a bead pattern.

    tile is the texture for tiled output; None uses the built-in bead tile.
    It is ignored when config.scale is set.
    """
    t0 = time.perf_counter()
    small = downscale(source, config.density, config.downscale_filter)
    t1 = time.perf_counter()
    frequency, grid = quantize(
        small, palette, config.distance, workers=config.workers
    )
    if config.mirror:
        mirror_rows(grid)
    t2 = time.perf_counter()
    image = compose(grid, scale=config.scale, tile=tile, workers=config.workers)
    t3 = time.perf_counter()

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Grid", f"{grid.shape[1]}x{grid.shape[0]}"),
                    ("Output", f"{image.shape[1]}x{image.shape[0]}"),
                    ("Downscale", format_seconds_compact(t1 - t0)),
                    ("Quantize", format_seconds_compact(t2 - t1)),
                    ("Compose", format_seconds_compact(t3 - t2)),
                ]
            )
        )
    return BeadResult(frequency=frequency, grid=grid, image=image)


def process_image(
    src_path: Path,
    out_path: Optional[Path],
    palette: Palette,
    config: PipelineConfig,
    *,
    texture_path: Optional[Path] = None,
    debug: bool = False,
) -> BeadResult:
    """
    Load, convert, and save one image. Returns the result; the written path
    is out_path or default_output_path(src_path).
    """
    tile = None
    if config.output_mode == "tiled" and texture_path is not None:
        tile = load_texture(texture_path)

    source = load_image_rgba(src_path)
    if debug:
        debug_log(f"Loaded {src_path.name} ({source.shape[1]}x{source.shape[0]})")

    result = run_pipeline(source, palette, config, tile=tile, debug=debug)
    save_png_rgba(out_path or default_output_path(src_path), result.image)
    return result


__all__ = ["BeadResult", "default_output_path", "run_pipeline", "process_image"]
