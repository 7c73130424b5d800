"""
Decoder for the RATTA_RLE layer bitmaps.

The stream is a sequence of ``(color_code, length_byte)`` pairs:

    0x00-0x7F  run of ``length_byte + 1`` pixels
    0xFF       run of 0x4000 pixels
    0x80-0xFE  "continued" run; held back until the next pair decides
               whether it merges (same color) or stands on its own

Runs routinely overshoot the end of the bitmap, so every write is clipped
to the ``width * height`` pixel budget instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from .errors import LayerDecodeError

RGBA = Tuple[int, int, int, int]

SPECIAL_LENGTH_MARKER = 0xFF
SPECIAL_LENGTH = 0x4000
CONTINUATION_FLAG = 0x80
HELD_SHIFT = 7

TRANSPARENT: RGBA = (0, 0, 0, 0)
# Row index used for pixels no run ever reached.
UNWRITTEN = 256

COLORCODE_BLACK = 0x61
COLORCODE_BACKGROUND = 0x62
COLORCODE_DARK_GRAY = 0x63
COLORCODE_GRAY = 0x64
COLORCODE_WHITE = 0x65
COLORCODE_MARKER_BLACK = 0x66
COLORCODE_MARKER_DARK_GRAY = 0x67
COLORCODE_MARKER_GRAY = 0x68
COLORCODE_DARK_GRAY_X2 = 0x9D
COLORCODE_MARKER_DARK_GRAY_X2 = 0x9E
COLORCODE_GRAY_X2 = 0xC9
COLORCODE_MARKER_GRAY_X2 = 0xCA


@dataclass(frozen=True)
class Palette:
    name: str
    colors: Dict[int, RGBA] = field(repr=False)
    default: RGBA = TRANSPARENT

    def rgba(self, code: int) -> RGBA:
        return self.colors.get(code, self.default)

    def lookup_table(self) -> np.ndarray:
        table = np.empty((UNWRITTEN + 1, 4), dtype=np.uint8)
        table[:UNWRITTEN] = self.default
        for code, color in self.colors.items():
            table[code] = color
        table[UNWRITTEN] = TRANSPARENT
        return table


_BLACK: RGBA = (0, 0, 0, 255)
_DARK_GRAY: RGBA = (169, 169, 169, 255)
_GRAY: RGBA = (128, 128, 128, 255)
_WHITE: RGBA = (255, 255, 255, 255)

NOTE_PALETTE = Palette(
    name="note",
    colors={
        COLORCODE_BLACK: _BLACK,
        COLORCODE_BACKGROUND: (255, 255, 255, 0),
        COLORCODE_DARK_GRAY: _DARK_GRAY,
        COLORCODE_GRAY: _GRAY,
        COLORCODE_WHITE: _WHITE,
        COLORCODE_MARKER_BLACK: _BLACK,
        COLORCODE_MARKER_DARK_GRAY: _DARK_GRAY,
        COLORCODE_MARKER_GRAY: _GRAY,
        COLORCODE_DARK_GRAY_X2: _DARK_GRAY,
        COLORCODE_GRAY_X2: _GRAY,
        COLORCODE_MARKER_DARK_GRAY_X2: _DARK_GRAY,
        COLORCODE_MARKER_GRAY_X2: _GRAY,
    },
)


def _held_length(length_byte: int, shift: int = HELD_SHIFT) -> int:
    return ((length_byte & 0x7F) + 1) << shift


def _tail_length(length_byte: int, gap: int) -> int:
    """Largest held-run length that still fits in ``gap`` pixels, else 0."""

    for shift in range(HELD_SHIFT, -1, -1):
        candidate = _held_length(length_byte, shift)
        if candidate <= gap:
            return candidate
    return 0


def iter_runs(data: bytes, capacity: int) -> Iterator[Tuple[int, int]]:
    """
    Yield ``(color_code, pixel_count)`` runs in output order.

    ``capacity`` is the pixel budget of the target bitmap; it only matters for
    a continued run left pending when the input ends.
    """

    emitted = 0
    holder: Optional[Tuple[int, int]] = None
    for idx in range(1, len(data), 2):
        color = data[idx - 1]
        length = data[idx]

        if holder is not None:
            held_color, held_length = holder
            holder = None
            if color == held_color:
                merged = 1 + length + _held_length(held_length)
                yield color, merged
                emitted += merged
                continue
            flushed = _held_length(held_length)
            yield held_color, flushed
            emitted += flushed

        if length == SPECIAL_LENGTH_MARKER:
            yield color, SPECIAL_LENGTH
            emitted += SPECIAL_LENGTH
        elif length & CONTINUATION_FLAG:
            holder = (color, length)
        else:
            yield color, length + 1
            emitted += length + 1

    if holder is not None:
        held_color, held_length = holder
        tail = _tail_length(held_length, capacity - emitted)
        if tail > 0:
            yield held_color, tail


def decode_rle(
    data: bytes,
    width: int,
    height: int,
    palette: Palette = NOTE_PALETTE,
) -> np.ndarray:
    """Decode a RATTA_RLE stream into a ``(height, width, 4)`` uint8 array."""

    if width <= 0 or height <= 0:
        raise LayerDecodeError(f"Cannot decode a {width}x{height} bitmap")
    capacity = width * height
    codes = np.full(capacity, UNWRITTEN, dtype=np.uint16)
    position = 0
    for color, length in iter_runs(data, capacity):
        if position >= capacity:
            break
        codes[position : position + length] = color
        position += length
    return palette.lookup_table()[codes].reshape(height, width, 4)
