import struct
from itertools import pairwise

import pytest
from PIL import Image

from xettacast.font import Font, FontError, read_cmap

UPEM = 1000
A_RECT = (100, 0, 600, 700)
B_RECT = (50, 0, 450, 400)
A_ADVANCE = 700
# (character, advance, outline rectangle)
GLYPHS = [
    (None, 500, None),
    (" ", 250, None),
    ("A", A_ADVANCE, A_RECT),
    ("B", 500, B_RECT),
]


def _checksum(blob):
    padded = blob + b"\0" * (-len(blob) % 4)
    return sum(struct.unpack(f">{len(padded) // 4}I", padded)) & 0xFFFFFFFF


def _sfnt(tables):
    tags = sorted(tables)
    count = len(tags)
    power = 1 << (count.bit_length() - 1)
    header = struct.pack(
        ">IHHHH", 0x00010000, count, power * 16, power.bit_length() - 1, count * 16 - power * 16
    )
    records = b""
    body = b""
    start = 12 + 16 * count
    for tag in tags:
        blob = tables[tag]
        records += struct.pack(">4sIII", tag, _checksum(blob), start + len(body), len(blob))
        body += blob + b"\0" * (-len(blob) % 4)
    return header + records + body


def _cmap4(mapping):
    codes = sorted(mapping) + [0xFFFF]
    seg = len(codes)
    deltas = [(mapping.get(code, 1) - code) & 0xFFFF for code in codes]
    power = 1 << (seg.bit_length() - 1)
    body = (
        struct.pack(f">{seg}H", *codes)
        + b"\0\0"
        + struct.pack(f">{seg}H", *codes)
        + struct.pack(f">{seg}H", *deltas)
        + struct.pack(f">{seg}H", *([0] * seg))
    )
    head = struct.pack(
        ">HHHHHHH", 4, 14 + len(body), 0, seg * 2, power * 2, power.bit_length() - 1, seg * 2 - power * 2
    )
    return struct.pack(">HHHHI", 0, 1, 3, 1, 12) + head + body


def _cmap12(groups):
    body = b"".join(struct.pack(">III", *group) for group in groups)
    sub = struct.pack(">HHIII", 12, 0, 16 + len(body), 0, len(groups)) + body
    return struct.pack(">HHHHI", 0, 1, 3, 10, 12) + sub


def _rect_glyph(x0, y0, x1, y1):
    points = [(x0, y0), (x0, y1), (x1, y1), (x1, y0)]
    steps = list(pairwise([(0, 0)] + points))
    dx = [b[0] - a[0] for a, b in steps]
    dy = [b[1] - a[1] for a, b in steps]
    return (
        struct.pack(">hhhhh", 1, x0, y0, x1, y1)
        + struct.pack(">HH", 3, 0)
        + bytes([1] * 4)
        + struct.pack(">4h", *dx)
        + struct.pack(">4h", *dy)
    )


def _build_font():
    count = len(GLYPHS)
    glyf = b""
    loca = [0]
    hmtx = b""
    for _char, advance, rect in GLYPHS:
        if rect is not None:
            glyf += _rect_glyph(*rect)
        loca.append(len(glyf))
        hmtx += struct.pack(">Hh", advance, rect[0] if rect else 0)
    head = struct.pack(
        ">IIIIHHqqhhhhHHhhh",
        0x00010000, 0x00010000, 0, 0x5F0F3CF5, 0, UPEM, 0, 0,
        50, 0, 600, 700, 0, 8, 2, 0, 0,
    )
    hhea = struct.pack(
        ">IhhhHhhhhhhhhhhhH",
        0x00010000, 800, -200, 0, A_ADVANCE, 0, 0, 600, 1, 0, 0, 0, 0, 0, 0, 0, count,
    )
    maxp = struct.pack(">IHHHHHHHHHHHHHH", 0x00010000, count, 4, 1, 0, 0, 2, 0, 0, 0, 0, 0, 0, 0, 0)
    post = struct.pack(">IIhhIIIII", 0x00030000, 0, -100, 50, 0, 0, 0, 0, 0)
    mapping = {ord(char): gid for gid, (char, _a, _r) in enumerate(GLYPHS) if char}
    return _sfnt(
        {
            b"head": head,
            b"hhea": hhea,
            b"maxp": maxp,
            b"hmtx": hmtx,
            b"cmap": _cmap4(mapping),
            b"loca": struct.pack(f">{len(loca)}H", *(offset // 2 for offset in loca)),
            b"glyf": glyf,
            b"post": post,
        }
    )


def _px(units, scale):
    return units * scale / UPEM


@pytest.fixture(scope="module")
def font_bytes():
    return _build_font()


@pytest.fixture(scope="module")
def font(font_bytes):
    return Font(font_bytes, 100.0)


def test_read_cmap_format4(font_bytes):
    assert read_cmap(font_bytes) == {" ": 1, "A": 2, "B": 3}


def test_read_cmap_format12_supplementary():
    data = _sfnt({b"cmap": _cmap12([(0x41, 0x43, 10), (0x1F600, 0x1F601, 20)])})
    assert read_cmap(data) == {"A": 10, "B": 11, "C": 12, "\U0001F600": 20, "\U0001F601": 21}


def test_read_cmap_format4_range_offset():
    seg = 2
    ends = struct.pack(">2H", ord("c"), 0xFFFF)
    starts = struct.pack(">2H", ord("a"), 0xFFFF)
    deltas = struct.pack(">2H", 0, 1)
    ranges = struct.pack(">2H", 4, 0)
    glyph_ids = struct.pack(">3H", 5, 0, 7)
    body = ends + b"\0\0" + starts + deltas + ranges + glyph_ids
    head = struct.pack(">HHHHHHH", 4, 14 + len(body), 0, seg * 2, 4, 1, 0)
    data = _sfnt({b"cmap": struct.pack(">HHHHI", 0, 1, 3, 1, 12) + head + body})
    assert read_cmap(data) == {"a": 5, "c": 7}


def test_read_cmap_rejects_garbage():
    with pytest.raises(FontError):
        read_cmap(b"definitely not a font file")


def test_read_cmap_requires_cmap_table():
    with pytest.raises(FontError):
        read_cmap(_sfnt({b"post": b"\0" * 32}))


def test_font_rejects_garbage():
    with pytest.raises(FontError):
        Font(b"\0" * 64, 50.0)


def test_font_covers_every_mapped_char(font, font_bytes):
    assert font.glyph_count == len(read_cmap(font_bytes))
    assert set(font.glyphs) == {" ", "A", "B"}


def test_glyph_metadata(font):
    glyph = font.glyphs["A"]
    assert glyph.id == "A"
    assert glyph.name == "glyphA"
    assert glyph.bearing == (0.0, 0.0)
    assert glyph.advance[0] == pytest.approx(_px(A_ADVANCE, 100), abs=1)
    assert glyph.advance[1] == 0.0


def test_filled_glyph_bitmap(font):
    glyph = font.glyphs["A"]
    x0, y0, x1, y1 = A_RECT
    assert glyph.width == pytest.approx(_px(x1 - x0, 100), abs=2)
    assert glyph.height == pytest.approx(_px(y1 - y0, 100), abs=2)
    assert len(glyph.bitmap) == glyph.width * glyph.height
    assert glyph.bitmap[(glyph.height // 2) * glyph.width + glyph.width // 2] == 255
    assert glyph.origin[0] == pytest.approx(_px(x0, 100), abs=2)
    assert glyph.origin[1] == pytest.approx(_px(y0, 100), abs=2)


def test_glyph_proportions(font):
    a, b = font.glyphs["A"], font.glyphs["B"]
    assert b.width < a.width
    assert b.height < a.height
    assert abs(b.width - b.height) <= 2


def test_blank_glyph_is_empty(font):
    space = font.glyphs[" "]
    assert (space.width, space.height, space.bitmap) == (0, 0, b"")
    assert space.advance[0] == pytest.approx(_px(250, 100), abs=1)


def test_scale_grows_glyphs(font_bytes, font):
    large = Font(font_bytes, 200.0)
    assert large.glyphs["A"].width == pytest.approx(2 * font.glyphs["A"].width, abs=3)
    assert large.glyphs["A"].height == pytest.approx(2 * font.glyphs["A"].height, abs=3)


def test_save_bitmaps_round_trip(font, tmp_path):
    font.save_bitmaps(tmp_path)
    assert sorted(path.name for path in tmp_path.iterdir()) == [f"{ord('A')}.png", f"{ord('B')}.png"]
    glyph = font.glyphs["B"]
    with Image.open(tmp_path / f"{ord('B')}.png") as image:
        assert image.size == (glyph.width, glyph.height)
        assert image.convert("L").tobytes() == glyph.bitmap


def test_save_bitmaps_missing_directory(font, tmp_path):
    with pytest.raises(FontError):
        font.save_bitmaps(tmp_path / "missing")