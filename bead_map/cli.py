# bead_map/cli.py
from __future__ import annotations

"""
Command-line entry point.

Usage:
  bead-map INPUT [-o OUT] [-b DENSITY] [-s SCALE | --perla TILE]
           [--dist rgb|lab] [--filter NAME] [-p PALETTE] [-m] [--workers N] [--debug]

Output:
  PNG. If --out is omitted, writes <stem>.perlur.png next to INPUT.
  Prints the bead count per palette colour and the total.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import (
    DEFAULT_DENSITY,
    DEFAULT_DISTANCE,
    DEFAULT_FILTER,
    DEFAULT_PALETTE_FILE,
    PipelineConfig,
)
from .core_types import FrequencyTable, Palette, rgb_to_hex
from .distance import DISTANCE_METRICS
from .downscale import DOWNSCALE_FILTERS, bead_grid_size
from .errors import BeadMapError
from .image_io import read_image_size
from .palette_data import load_palette
from .pipeline import default_output_path, process_image
from .utils import (
    debug_log,
    default_workers,
    error,
    format_seconds_compact,
    log,
    print_banner,
    print_config_line,
    warn,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bead-map",
        description="Turn an image into a bead pattern using a named colour palette.",
    )
    parser.add_argument("input_img", type=Path, help="The image to convert")
    parser.add_argument(
        "-o",
        "--out",
        dest="output_path",
        type=Path,
        default=None,
        help="Output file. Defaults to the input path with the extension .perlur.png",
    )
    parser.add_argument(
        "-b",
        "--bead-density",
        type=int,
        default=DEFAULT_DENSITY,
        help="Source pixels per bead side",
    )
    parser.add_argument(
        "--dist",
        dest="distance",
        choices=list(DISTANCE_METRICS),
        default=DEFAULT_DISTANCE,
        help="Colour distance used to pick the palette colour for each bead",
    )
    parser.add_argument(
        "--filter",
        dest="downscale_filter",
        choices=list(DOWNSCALE_FILTERS),
        default=DEFAULT_FILTER,
        help="Filter used to downscale the image BEAD_DENSITY times",
    )
    parser.add_argument(
        "-p",
        "--palette",
        type=Path,
        default=Path(DEFAULT_PALETTE_FILE),
        help="Palette file: one colour name, a space, and the RGB hex value per line",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "-s", "--output-scale", type=int, default=None, help="Scale of the flat output"
    )
    output.add_argument(
        "--perla",
        type=Path,
        default=None,
        help="Bead texture multiplied by each bead colour (default: built-in bead)",
    )
    parser.add_argument(
        "-m", "--mirror", action="store_true", help="Mirror the pattern left-right"
    )
    parser.add_argument(
        "--workers", type=int, default=default_workers(), help="Internal threads"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose timing details")
    return parser


def report_frequency(frequency: FrequencyTable) -> int:
    """Print 'name: count' lines in name order, then the total. Returns the total."""
    total = 0
    for name, count in frequency.items():
        total += count
        log(f"{name}: {count}")
    log(f" Total: {total}")
    return total


def _debug_palette(palette: Palette) -> None:
    debug_log(f"Palette {len(palette)} colours")
    for entry in palette:
        debug_log(f"  {entry.name} {rgb_to_hex(entry.rgb)}")


def _check_density(src: Path, density: int) -> None:
    """Reject densities that would leave no beads, before any work starts."""
    width, height = read_image_size(src)
    bead_grid_size(width, height, density)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    t_start = time.perf_counter()

    src: Path = args.input_img
    if not src.exists():
        error(f"not found: {src}")
        return 2

    print_banner(src.name)
    try:
        config = PipelineConfig(
            density=args.bead_density,
            distance=args.distance,
            downscale_filter=args.downscale_filter,
            mirror=args.mirror,
            scale=args.output_scale,
            workers=args.workers,
        )
        if args.debug:
            print_config_line(
                "run",
                [
                    ("Density", config.density),
                    ("Distance", config.distance),
                    ("Filter", config.downscale_filter),
                    ("Mirror", config.mirror),
                    ("Output", config.output_mode),
                    ("Workers", config.workers),
                ],
                debug=True,
            )
        _check_density(src, config.density)
        palette = load_palette(args.palette)
        if args.debug:
            _debug_palette(palette)
        out_path = args.output_path or default_output_path(src)
        result = process_image(
            src,
            out_path,
            palette,
            config,
            texture_path=args.perla,
            debug=args.debug,
        )
    except (BeadMapError, ValueError) as exc:
        error(str(exc))
        return 1

    if not result.frequency:
        warn("no visible beads (every pixel has alpha < 128)")
    report_frequency(result.frequency)
    log(f"Wrote {out_path}")
    if args.debug:
        debug_log(f"Total {format_seconds_compact(time.perf_counter() - t_start)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
