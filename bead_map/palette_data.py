# bead_map/palette_data.py
from __future__ import annotations

"""
Palette file parsing and builders.

Palette files hold one bead colour per line: a name, a single space, then the
RGB value as six hex digits, e.g.

  White ffffff
  Red ff0000

Exports:
  parse_palette_lines(lines) -> list[(name, RGBTuple)]
  load_palette(path) -> Palette
  build_palette(name_rgb_pairs) -> Palette
"""

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .colour_convert import rgb_to_lab
from .core_types import Palette, PaletteEntry, RGBTuple, hex_to_rgb
from .errors import PaletteParseError


def parse_palette_lines(lines: Iterable[str]) -> List[Tuple[str, RGBTuple]]:
    """
    Parse 'name hex' lines in order. Blank lines are skipped.
    Raises PaletteParseError naming the 1-based line number.
    """
    pairs: List[Tuple[str, RGBTuple]] = []
    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        name, sep, hex_part = line.partition(" ")
        if not sep or not name:
            raise PaletteParseError("expected '<name> <hex>'", line_no, raw)
        try:
            rgb = hex_to_rgb(hex_part)
        except ValueError as exc:
            raise PaletteParseError(str(exc), line_no, raw) from exc
        pairs.append((name, rgb))
    return pairs


def build_palette(name_rgb_pairs: Sequence[Tuple[str, RGBTuple]]) -> Palette:
    """Convert ordered (name, rgb) pairs into a Palette with uint8 RGB and float32 Lab rows."""
    entries = tuple(
        PaletteEntry(name=str(name), rgb=(int(r), int(g), int(b)))
        for name, (r, g, b) in name_rgb_pairs
    )
    rgb = np.array([e.rgb for e in entries], dtype=np.uint8).reshape(-1, 3)
    rgb.setflags(write=False)
    lab = rgb_to_lab(rgb)
    lab.setflags(write=False)
    return Palette(entries=entries, rgb=rgb, lab=lab)


def load_palette(path: Path) -> Palette:
    """Read and build a palette from a text file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PaletteParseError(f"cannot read palette {path}: {exc}") from exc
    return build_palette(parse_palette_lines(text.splitlines()))


__all__ = ["parse_palette_lines", "build_palette", "load_palette"]
