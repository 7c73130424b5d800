"""
Parser for Supernote ``.note`` notebooks.

The container is a flat buffer of length-prefixed blocks addressed by
absolute offset.  The trailing four bytes point at the footer, the footer
tags point at the header and every page, each page points at its layers and
each layer points at its RLE bitmap:

    footer -> FILE_FEATURE (header), PAGE<n> (pages)
    page   -> LAYERSEQ, MAINLAYER/LAYER1/LAYER2/LAYER3/BGLAYER
    layer  -> LAYERBITMAP, LAYERPROTOCOL
"""

from __future__ import annotations

import logging
import re
from typing import List, Mapping, Tuple

from .blocks import footer_address, read_block
from .entities import DEFAULT_CODEC, LAYER_NAMES, Layer, NoteDocument, Page
from .errors import InvalidSignatureError
from .tags import TagValue, group_nested, parse_int, parse_tag_block, tag_int, tag_text

LOGGER = logging.getLogger(__name__)

SIGNATURE_SIZE = 24
SIGNATURE_PATTERN = re.compile(r"^noteSN_FILE_VER_(\d{8})")
DEFAULT_HEADER_ADDRESS = 24
DEFAULT_EQUIPMENT = "unknown"
DEFAULT_PAGE_SIZE = (1404, 1872)
EQUIPMENT_PAGE_SIZES = {
    "N5": (1920, 2560),
}


def page_size_for(equipment: str) -> Tuple[int, int]:
    return EQUIPMENT_PAGE_SIZES.get(equipment, DEFAULT_PAGE_SIZE)


def read_signature(buffer: bytes) -> Tuple[str, int]:
    signature = buffer[:SIGNATURE_SIZE].decode("utf-8", errors="replace")
    match = SIGNATURE_PATTERN.match(signature)
    if match is None:
        raise InvalidSignatureError(f"Invalid Supernote file: unexpected signature {signature!r}")
    return signature, int(match.group(1))


def _parse_layer(buffer: bytes, page_tags: Mapping[str, TagValue], name: str, label: str) -> Layer:
    address = tag_int(page_tags, name)
    if address == 0:
        return Layer(name=name)
    layer_label = f"{label} {name}"
    layer_tags = parse_tag_block(buffer, address, label=layer_label)
    bitmap_address = tag_int(layer_tags, "LAYERBITMAP")
    bitmap = read_block(buffer, bitmap_address, label=f"{layer_label} bitmap")
    return Layer(
        name=name,
        codec=tag_text(layer_tags, "LAYERPROTOCOL", DEFAULT_CODEC),
        bitmap=bitmap,
    )


def _parse_page(buffer: bytes, index: int, address: int) -> Page:
    label = f"page {index}"
    page_tags = parse_tag_block(buffer, address, label=label)
    sequence = tag_text(page_tags, "LAYERSEQ", "MAINLAYER")
    layers = tuple(_parse_layer(buffer, page_tags, name, label) for name in LAYER_NAMES)
    return Page(index=index, layers=layers, render_order=tuple(sequence.split(",")))


def parse_note(buffer: bytes) -> NoteDocument:
    """Parse a complete ``.note`` buffer into an immutable NoteDocument."""

    signature, version = read_signature(buffer)

    footer_tags = parse_tag_block(buffer, footer_address(buffer), label="footer")
    footer = group_nested(footer_tags, "_", ["PAGE"])

    feature = footer.get("FILE", {}).get("FEATURE")
    header_address = parse_int("FILE_FEATURE", feature) if feature else DEFAULT_HEADER_ADDRESS
    header_tags = parse_tag_block(buffer, header_address, label="header")
    equipment = tag_text(header_tags, "APPLY_EQUIPMENT", DEFAULT_EQUIPMENT)
    page_width, page_height = page_size_for(equipment)

    page_addresses: List[Tuple[int, int]] = []
    for key, value in footer.get("PAGE", {}).items():
        page_addresses.append((parse_int(f"PAGE{key}", key), parse_int(f"PAGE{key}", value)))
    page_addresses.sort(key=lambda item: item[0])

    pages = tuple(_parse_page(buffer, index, address) for index, address in page_addresses)
    LOGGER.debug(
        "snote.note.parsed version=%d equipment=%s pages=%d size=%dx%d",
        version,
        equipment,
        len(pages),
        page_width,
        page_height,
    )
    return NoteDocument(
        signature=signature,
        version=version,
        page_width=page_width,
        page_height=page_height,
        equipment=equipment,
        pages=pages,
    )
