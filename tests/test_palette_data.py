from __future__ import annotations

import numpy as np
import pytest

from bead_map.colour_convert import rgb_to_lab
from bead_map.core_types import PaletteEntry, hex_to_rgb, rgb_to_hex
from bead_map.errors import PaletteParseError
from bead_map.palette_data import build_palette, load_palette, parse_palette_lines


def test_parse_lines_in_order():
    pairs = parse_palette_lines(["Red ff0000", "  Blue 0000FF  ", "", "Teal #10aea6"])
    assert pairs == [
        ("Red", (255, 0, 0)),
        ("Blue", (0, 0, 255)),
        ("Teal", (16, 174, 166)),
    ]


@pytest.mark.parametrize(
    "line, line_no",
    [
        ("Red", 1),
        ("Red ff00", 1),
        ("Red gg0000", 1),
        ("Red ff0000ff", 1),
    ],
)
def test_parse_rejects_malformed_lines(line, line_no):
    with pytest.raises(PaletteParseError) as info:
        parse_palette_lines([line])
    assert info.value.line_no == line_no
    assert info.value.line == line


def test_parse_error_reports_line_number():
    with pytest.raises(PaletteParseError, match="line 3"):
        parse_palette_lines(["Red ff0000", "", "oops"])


def test_build_palette_keeps_order_and_duplicates():
    palette = build_palette([("B", (0, 0, 1)), ("A", (0, 0, 2)), ("B", (0, 0, 3))])
    assert palette.names == ["B", "A", "B"]
    assert palette[1] == PaletteEntry("A", (0, 0, 2))
    assert palette.rgb.dtype == np.uint8
    assert palette.rgb.shape == (3, 3)
    assert not palette.rgb.flags.writeable


def test_build_palette_precomputes_lab_rows():
    palette = build_palette([("White", (255, 255, 255)), ("Teal", (16, 174, 166))])
    assert palette.lab.dtype == np.float32
    assert palette.lab.shape == (2, 3)
    assert np.array_equal(palette.lab, rgb_to_lab(palette.rgb))
    assert not palette.lab.flags.writeable


def test_empty_palette_has_empty_rows():
    palette = build_palette([])
    assert palette.rgb.shape == (0, 3)
    assert palette.lab.shape == (0, 3)


def test_load_palette(tmp_path):
    path = tmp_path / "palette.txt"
    path.write_text("White ffffff\nBlack 000000\n", encoding="utf-8")
    palette = load_palette(path)
    assert len(palette) == 2
    assert [e.rgb for e in palette] == [(255, 255, 255), (0, 0, 0)]


def test_load_palette_missing_file(tmp_path):
    with pytest.raises(PaletteParseError, match="cannot read palette"):
        load_palette(tmp_path / "nope.txt")


def test_hex_round_trip_helpers():
    assert hex_to_rgb("#0A0b0C") == (10, 11, 12)
    assert rgb_to_hex((10, 11, 12)) == "#0a0b0c"
