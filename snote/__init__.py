"""
Core Supernote .note/.mark decoding utilities split into modules for reuse.
"""

from .blocks import footer_address, read_block, read_uint32
from .compositor import composite_over, iter_page_rasters, layers_to_render, render_page, to_grayscale
from .entities import (
    DEFAULT_CODEC,
    LAYER_NAMES,
    Layer,
    MarkDocument,
    MarkLayer,
    MarkPage,
    NoteDocument,
    Page,
    Raster,
)
from .errors import (
    DecodeError,
    InvalidFormatError,
    InvalidSignatureError,
    LayerDecodeError,
    MalformedTagError,
    OutOfBoundsError,
    UnknownCodecError,
)
from .export import encode_png, save_png, to_data_url
from .mark import (
    MARK_PALETTE,
    list_annotated_pages,
    mark_path_for,
    parse_mark,
    parse_total_path,
    render_annotation_layer,
)
from .note import parse_note, read_signature
from .rle import NOTE_PALETTE, SPECIAL_LENGTH, Palette, decode_rle, iter_runs
from .tags import RepeatedTag, ScalarTag, extract_tags, group_nested, tag_int, tag_text

__all__ = [
    "footer_address",
    "read_block",
    "read_uint32",
    "composite_over",
    "iter_page_rasters",
    "layers_to_render",
    "render_page",
    "to_grayscale",
    "DEFAULT_CODEC",
    "LAYER_NAMES",
    "Layer",
    "MarkDocument",
    "MarkLayer",
    "MarkPage",
    "NoteDocument",
    "Page",
    "Raster",
    "DecodeError",
    "InvalidFormatError",
    "InvalidSignatureError",
    "LayerDecodeError",
    "MalformedTagError",
    "OutOfBoundsError",
    "UnknownCodecError",
    "encode_png",
    "save_png",
    "to_data_url",
    "MARK_PALETTE",
    "list_annotated_pages",
    "mark_path_for",
    "parse_mark",
    "parse_total_path",
    "render_annotation_layer",
    "parse_note",
    "read_signature",
    "NOTE_PALETTE",
    "SPECIAL_LENGTH",
    "Palette",
    "decode_rle",
    "iter_runs",
    "RepeatedTag",
    "ScalarTag",
    "extract_tags",
    "group_nested",
    "tag_int",
    "tag_text",
]
