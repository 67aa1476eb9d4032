"""Rasterised glyphs of every character a TrueType or OpenType font maps."""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Callable

from PIL import Image, ImageDraw, ImageFont

log = logging.getLogger(__name__)

_SFNT_VERSIONS = (b"\x00\x01\x00\x00", b"OTTO", b"true", b"typ1")
# Extra room around the measured box so that no ink is clipped while drawing.
_PAD = 2


class FontError(Exception):
    """Raised when a font cannot be read or its glyphs cannot be written out."""


@dataclass(frozen=True)
class FontGlyph:
    """One rasterised character: an 8-bit coverage bitmap and its metrics."""

    id: str
    name: str
    advance: tuple[float, float]
    bearing: tuple[float, float]
    # Offset of the bitmap's bottom-left corner from the pen position, y up.
    origin: tuple[float, float]
    bitmap: bytes
    width: int
    height: int


def _add(mapping: dict[str, int], code: int, glyph: int) -> None:
    if glyph and code <= 0x10FFFF and not 0xD800 <= code <= 0xDFFF:
        mapping.setdefault(chr(code), glyph)


def _format0(data: bytes, offset: int) -> dict[str, int]:
    mapping: dict[str, int] = {}
    for code, glyph in enumerate(data[offset + 6 : offset + 6 + 256]):
        _add(mapping, code, glyph)
    return mapping


def _format4(data: bytes, offset: int) -> dict[str, int]:
    (seg_x2,) = struct.unpack_from(">H", data, offset + 6)
    count = seg_x2 // 2
    ends_at = offset + 14
    starts_at = ends_at + seg_x2 + 2
    deltas_at = starts_at + seg_x2
    ranges_at = deltas_at + seg_x2
    ends = struct.unpack_from(f">{count}H", data, ends_at)
    starts = struct.unpack_from(f">{count}H", data, starts_at)
    deltas = struct.unpack_from(f">{count}H", data, deltas_at)
    ranges = struct.unpack_from(f">{count}H", data, ranges_at)

    mapping: dict[str, int] = {}
    segments = zip(starts, ends, deltas, ranges)
    for segment, (start, end, delta, range_offset) in enumerate(segments):
        for code in range(start, min(end, 0xFFFE) + 1):
            if range_offset == 0:
                glyph = (code + delta) & 0xFFFF
            else:
                at = ranges_at + 2 * segment + range_offset + 2 * (code - start)
                (glyph,) = struct.unpack_from(">H", data, at)
                if glyph:
                    glyph = (glyph + delta) & 0xFFFF
            _add(mapping, code, glyph)
    return mapping


def _format6(data: bytes, offset: int) -> dict[str, int]:
    first, count = struct.unpack_from(">HH", data, offset + 6)
    glyphs = struct.unpack_from(f">{count}H", data, offset + 10)
    mapping: dict[str, int] = {}
    for code, glyph in enumerate(glyphs, start=first):
        _add(mapping, code, glyph)
    return mapping


def _format12(data: bytes, offset: int) -> dict[str, int]:
    (count,) = struct.unpack_from(">I", data, offset + 12)
    groups = data[offset + 16 : offset + 16 + 12 * count]
    if len(groups) != 12 * count:
        raise FontError("Truncated cmap subtable")
    mapping: dict[str, int] = {}
    for start, end, first_glyph in struct.iter_unpack(">III", groups):
        for code in range(start, min(end, 0x10FFFF) + 1):
            _add(mapping, code, first_glyph + code - start)
    return mapping


_PARSERS: dict[int, Callable[[bytes, int], dict[str, int]]] = {
    0: _format0,
    4: _format4,
    6: _format6,
    12: _format12,
}


def _rank(platform: int, encoding: int, fmt: int) -> int | None:
    if fmt not in _PARSERS:
        return None
    if platform == 0 or (platform == 3 and encoding in (1, 10)):
        return 0 if fmt == 12 else 1
    if platform == 3 and encoding == 0:
        return 2
    return None


def _tables(data: bytes) -> dict[bytes, tuple[int, int]]:
    base = 0
    if data[:4] == b"ttcf":
        (count,) = struct.unpack_from(">I", data, 8)
        if count == 0:
            raise FontError("Empty font collection")
        (base,) = struct.unpack_from(">I", data, 12)
    if data[base : base + 4] not in _SFNT_VERSIONS:
        raise FontError("Not a TrueType or OpenType font")
    (count,) = struct.unpack_from(">H", data, base + 4)
    directory = data[base + 12 : base + 12 + 16 * count]
    if len(directory) != 16 * count:
        raise FontError("Truncated table directory")
    return {
        tag: (offset, length)
        for tag, _checksum, offset, length in struct.iter_unpack(">4sIII", directory)
    }


def read_cmap(data: bytes) -> dict[str, int]:
    """Map every character the font covers to its glyph index, in code order."""
    data = bytes(data)
    try:
        tables = _tables(data)
        if b"cmap" not in tables:
            raise FontError("Font has no cmap table")
        cmap_at, _length = tables[b"cmap"]
        _version, count = struct.unpack_from(">HH", data, cmap_at)
        records = data[cmap_at + 4 : cmap_at + 4 + 8 * count]
        if len(records) != 8 * count:
            raise FontError("Truncated cmap table")
        candidates = []
        for platform, encoding, sub in struct.iter_unpack(">HHI", records):
            (fmt,) = struct.unpack_from(">H", data, cmap_at + sub)
            rank = _rank(platform, encoding, fmt)
            if rank is not None:
                candidates.append((rank, cmap_at + sub, fmt))
        if not candidates:
            raise FontError("Font has no Unicode cmap subtable")
        _, offset, fmt = min(candidates)
        mapping = _PARSERS[fmt](data, offset)
    except (struct.error, ValueError) as exc:
        raise FontError(f"Failed to create font: {exc}") from exc
    return dict(sorted(mapping.items(), key=lambda item: ord(item[0])))


def _empty_glyph(char: str, advance: float) -> FontGlyph:
    return FontGlyph(
        id=char,
        name=f"glyph{char}",
        advance=(advance, 0.0),
        bearing=(0.0, 0.0),
        origin=(0.0, 0.0),
        bitmap=b"",
        width=0,
        height=0,
    )


def _rasterize(face: ImageFont.FreeTypeFont, char: str) -> FontGlyph:
    advance = float(face.getlength(char))
    left, top, right, bottom = face.getbbox(char, anchor="ls")
    # A line break cannot be drawn as a single glyph; it has no ink anyway.
    if right <= left or bottom <= top or char in "\n\r":
        return _empty_glyph(char, advance)

    canvas = Image.new("L", (right - left + 2 * _PAD, bottom - top + 2 * _PAD), 0)
    ImageDraw.Draw(canvas).text(
        (_PAD - left, _PAD - top), char, font=face, fill=255, anchor="ls"
    )
    ink = canvas.getbbox()
    if ink is None:
        return _empty_glyph(char, advance)
    ink_left, ink_top, ink_right, ink_bottom = ink
    bitmap = canvas.crop(ink)
    return FontGlyph(
        id=char,
        name=f"glyph{char}",
        advance=(advance, 0.0),
        bearing=(0.0, 0.0),
        origin=(
            float(left - _PAD + ink_left),
            float(-(top - _PAD + ink_bottom)),
        ),
        bitmap=bitmap.tobytes(),
        width=ink_right - ink_left,
        height=ink_bottom - ink_top,
    )


class Font:
    """All glyphs of a font rasterised at ``scale`` pixels per em."""

    def __init__(self, data: bytes, scale: float) -> None:
        data = bytes(data)
        chars = read_cmap(data)
        size = int(scale) if float(scale).is_integer() else scale
        try:
            face = ImageFont.truetype(io.BytesIO(data), size)
        except (OSError, ValueError) as exc:
            raise FontError(f"Failed to create font: {exc}") from exc

        self.glyphs: dict[str, FontGlyph] = {
            char: _rasterize(face, char) for char in chars
        }
        self.glyph_count = len(self.glyphs)

        widths = [glyph.width for glyph in self.glyphs.values()]
        heights = [glyph.height for glyph in self.glyphs.values()]
        total = (float(sum(widths)), float(sum(heights)))
        log.info("Max size: %s", (float(max(widths, default=0)), float(max(heights, default=0))))
        log.info("Total size: %s", total)
        if self.glyph_count:
            log.info(
                "Average size: %s",
                (total[0] / self.glyph_count, total[1] / self.glyph_count),
            )
        log.info("Glyph count: %d", self.glyph_count)
        log.info("Font created")

    def save_bitmaps(self, directory: str | PathLike[str]) -> None:
        """Write each non-empty glyph as ``<code point>.png`` into ``directory``."""
        target = Path(directory)
        for char, glyph in self.glyphs.items():
            if not glyph.bitmap:
                continue
            image = Image.frombytes("L", (glyph.width, glyph.height), glyph.bitmap)
            try:
                image.save(target / f"{ord(char)}.png")
            except OSError as exc:
                raise FontError(f"Failed to save image: {exc}") from exc