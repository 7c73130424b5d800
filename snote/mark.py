"""
Reader and renderer for Supernote ``.mark`` files (PDF annotation overlays).

A ``.mark`` file uses the same block/tag container as a ``.note`` file but
starts with the literal ``mark`` type tag, keys its pages by PDF page number
(``PAGE<n>`` footer tags) and paints its layers onto a transparent canvas
with a translucent highlighter palette.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from .blocks import footer_address, read_block
from .deflate_io import maybe_inflate
from .entities import DEFAULT_CODEC, LAYER_NAMES, MarkDocument, MarkLayer, MarkPage, Raster
from .errors import InvalidFormatError, LayerDecodeError, UnknownCodecError
from .rle import (
    COLORCODE_BACKGROUND,
    COLORCODE_BLACK,
    COLORCODE_DARK_GRAY,
    COLORCODE_GRAY,
    COLORCODE_MARKER_BLACK,
    COLORCODE_MARKER_DARK_GRAY,
    COLORCODE_MARKER_DARK_GRAY_X2,
    COLORCODE_MARKER_GRAY,
    COLORCODE_MARKER_GRAY_X2,
    COLORCODE_WHITE,
    TRANSPARENT,
    Palette,
    decode_rle,
)
from .tags import TagMap, parse_tag_block, tag_int, tag_text

LOGGER = logging.getLogger(__name__)

FILE_TYPE = "mark"
FILE_TYPE_SIZE = 4
SIGNATURE_END = 24
DEFAULT_EQUIPMENT = "unknown"
ANNOTATION_PAGE_SIZE = (1404, 1872)
PAGE_KEY_PATTERN = re.compile(r"PAGE([0-9]+)")
NUMBER_TOKEN = re.compile(r"[0-9]+")

MARK_PALETTE = Palette(
    name="mark",
    colors={
        COLORCODE_BLACK: (0, 0, 0, 255),
        COLORCODE_BACKGROUND: TRANSPARENT,
        COLORCODE_DARK_GRAY: (100, 100, 100, 255),
        COLORCODE_GRAY: (180, 180, 180, 255),
        COLORCODE_WHITE: (255, 255, 255, 255),
        COLORCODE_MARKER_BLACK: (0, 0, 0, 200),
        COLORCODE_MARKER_DARK_GRAY: (100, 100, 100, 180),
        COLORCODE_MARKER_GRAY: (180, 180, 180, 150),
        COLORCODE_MARKER_DARK_GRAY_X2: (100, 100, 100, 180),
        COLORCODE_MARKER_GRAY_X2: (180, 180, 180, 150),
    },
    # Magenta keeps unknown color codes visible.
    default=(255, 0, 255, 255),
)


def mark_path_for(pdf_path: Union[str, Path]) -> Path:
    """Annotations for ``book.pdf`` live next to it in ``book.pdf.mark``."""

    path = Path(pdf_path)
    return path.with_name(path.name + ".mark")


def annotation_dimensions(equipment: str) -> Tuple[int, int]:
    # A5X, A6X and their X2 successors all annotate on the same canvas.
    return ANNOTATION_PAGE_SIZE


def parse_total_path(total_path: Optional[str]) -> Optional[Tuple[int, int]]:
    """``"c 0 0 1404 1872"`` -> ``(1404, 1872)``: the last two numeric tokens."""

    if not total_path:
        return None
    numbers = [int(token) for token in total_path.split() if NUMBER_TOKEN.fullmatch(token)]
    if len(numbers) < 2:
        return None
    width, height = numbers[-2], numbers[-1]
    if width > 0 and height > 0:
        return width, height
    return None


def _page_addresses(footer_tags: TagMap) -> List[Tuple[int, int]]:
    pages: List[Tuple[int, int]] = []
    for key in footer_tags:
        match = PAGE_KEY_PATTERN.fullmatch(key)
        if match is None:
            continue
        pages.append((int(match.group(1)), tag_int(footer_tags, key)))
    pages.sort(key=lambda item: item[0])
    return pages


def _parse_mark_page(buffer: bytes, page_number: int, address: int) -> MarkPage:
    label = f"page {page_number}"
    page_tags = parse_tag_block(buffer, address, label=label)
    layers: List[MarkLayer] = []
    for slot in LAYER_NAMES:
        layer_address = tag_int(page_tags, slot)
        if layer_address == 0:
            continue
        layer_label = f"{label} {slot}"
        layer_tags = parse_tag_block(buffer, layer_address, label=layer_label)
        bitmap_address = tag_int(layer_tags, "LAYERBITMAP")
        bitmap = read_block(buffer, bitmap_address, label=f"{layer_label} bitmap")
        if slot != "MAINLAYER" and bitmap is None:
            continue
        layers.append(
            MarkLayer(
                name=tag_text(layer_tags, "LAYERNAME", slot),
                codec=tag_text(layer_tags, "LAYERPROTOCOL", DEFAULT_CODEC),
                bitmap=bitmap,
                total_path=tag_text(layer_tags, "TOTALPATH"),
            )
        )
    return MarkPage(page_number=page_number, layers=tuple(layers))


def parse_mark(buffer: bytes) -> MarkDocument:
    """Parse a complete ``.mark`` buffer into an immutable MarkDocument."""

    file_type = buffer[:FILE_TYPE_SIZE].decode("utf-8", errors="replace")
    if file_type != FILE_TYPE:
        raise InvalidFormatError(f"Invalid .mark file: expected 'mark', got {file_type!r}")
    signature = buffer[FILE_TYPE_SIZE:SIGNATURE_END].decode("utf-8", errors="replace")

    footer_tags = parse_tag_block(buffer, footer_address(buffer), label="footer")
    header_tags = parse_tag_block(buffer, tag_int(footer_tags, "FILE_FEATURE"), label="header")
    equipment = tag_text(header_tags, "APPLY_EQUIPMENT", DEFAULT_EQUIPMENT)

    pages = tuple(
        _parse_mark_page(buffer, page_number, address)
        for page_number, address in _page_addresses(footer_tags)
    )
    LOGGER.debug("snote.mark.parsed equipment=%s pages=%d", equipment, len(pages))
    return MarkDocument(signature=signature, file_type=file_type, equipment=equipment, pages=pages)


def list_annotated_pages(mark: MarkDocument) -> List[int]:
    return [page.page_number for page in mark.pages]


def find_page(mark: MarkDocument, page_number: int) -> Optional[MarkPage]:
    for page in mark.pages:
        if page.page_number == page_number:
            return page
    return None


def canvas_dimensions(mark: MarkDocument, page: MarkPage) -> Tuple[int, int]:
    for layer in page.layers:
        dims = parse_total_path(layer.total_path)
        if dims is not None:
            return dims
    return annotation_dimensions(mark.equipment)


def decode_mark_layer(layer: MarkLayer, width: int, height: int) -> np.ndarray:
    if layer.codec != DEFAULT_CODEC:
        raise UnknownCodecError(layer.name, layer.codec)
    if not layer.bitmap:
        raise LayerDecodeError(f"{layer.name}: layer has no bitmap")
    return decode_rle(maybe_inflate(layer.bitmap), width, height, MARK_PALETTE)


def render_annotation_layer(mark: MarkDocument, page_number: int) -> Optional[Raster]:
    """
    Render every annotation layer of PDF page ``page_number`` (1-indexed).

    Returns ``None`` when the page carries no annotations.  The result is
    transparent wherever nothing was drawn so it can be laid over the PDF.
    """

    page = find_page(mark, page_number)
    if page is None or not page.layers:
        return None

    width, height = canvas_dimensions(mark, page)
    canvas = Image.new("RGBA", (width, height), TRANSPARENT)
    warnings: List[str] = []
    for layer in page.layers:
        if not layer.bitmap:
            continue
        layer_width, layer_height = parse_total_path(layer.total_path) or (width, height)
        try:
            pixels = decode_mark_layer(layer, layer_width, layer_height)
        except LayerDecodeError as exc:
            LOGGER.warning("snote.mark.layer_skipped page=%d layer=%s: %s", page_number, layer.name, exc)
            warnings.append(f"page {page_number} {layer.name}: {exc}")
            continue
        image = Image.fromarray(pixels)
        if image.size != canvas.size:
            image = image.resize(canvas.size, Image.Resampling.BILINEAR)
        canvas.alpha_composite(image)

    return Raster(width=width, height=height, pixels=np.array(canvas), warnings=tuple(warnings))
