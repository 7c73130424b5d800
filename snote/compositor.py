"""
Compose the layers of a ``.note`` page into a single RGBA raster.

Layers are painted over an opaque white canvas in the *reverse* of the
page's LAYERSEQ, so the first declared layer ends up on top.  The finished
page is converted to grayscale unless the caller asks for color.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .entities import DEFAULT_CODEC, Layer, NoteDocument, Page, Raster
from .errors import LayerDecodeError, UnknownCodecError
from .rle import NOTE_PALETTE, Palette, decode_rle

LOGGER = logging.getLogger(__name__)

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def decode_layer(layer: Layer, width: int, height: int, palette: Palette = NOTE_PALETTE) -> np.ndarray:
    if layer.codec != DEFAULT_CODEC:
        raise UnknownCodecError(layer.name, layer.codec)
    if not layer.bitmap:
        raise LayerDecodeError(f"{layer.name}: layer has no bitmap")
    return decode_rle(layer.bitmap, width, height, palette)


def layers_to_render(page: Page) -> List[Layer]:
    """Layers in painting order: LAYERSEQ minus empty layers, reversed."""

    layers = [page.layer(name) for name in page.render_order]
    present = [layer for layer in layers if layer is not None and layer.has_bitmap]
    present.reverse()
    return present


def composite_over(canvas: np.ndarray, layer: np.ndarray) -> None:
    """Source-over ``layer`` onto ``canvas`` in place (both H x W x 4 uint8)."""

    src_alpha = layer[..., 3]

    opaque = src_alpha == 255
    canvas[opaque, :3] = layer[opaque, :3]
    canvas[opaque, 3] = 255

    partial = (src_alpha > 0) & (src_alpha < 255)
    if not partial.any():
        return
    src = layer[partial].astype(np.float64)
    dst = canvas[partial].astype(np.float64)
    s_a = src[:, 3]
    d_a = dst[:, 3]
    keep = 1 - s_a / 255
    out_a = s_a + d_a * keep
    visible = out_a > 0
    out = dst.copy()
    out[:, :3] = (
        src[:, :3] * s_a[:, None] + dst[:, :3] * d_a[:, None] * keep[:, None]
    ) / np.where(visible, out_a, 1)[:, None]
    out[:, 3] = out_a
    out[~visible] = dst[~visible]
    canvas[partial] = out.astype(np.uint8)


def to_grayscale(canvas: np.ndarray) -> None:
    """Replace RGB with rounded luma in place; alpha is left alone."""

    rgb = canvas[..., :3].astype(np.float64)
    luma = rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] + rgb[..., 2] * LUMA_WEIGHTS[2]
    gray = np.floor(luma + 0.5).clip(0, 255).astype(np.uint8)
    canvas[..., 0] = gray
    canvas[..., 1] = gray
    canvas[..., 2] = gray


def render_page(document: NoteDocument, page_index: int, *, grayscale: bool = True) -> Optional[Raster]:
    """
    Render the page at position ``page_index`` of ``document.pages``.

    Returns ``None`` for an index outside the document.  Layers that fail to
    decode are skipped; their messages end up in ``Raster.warnings``.
    """

    if page_index < 0 or page_index >= len(document.pages):
        return None
    page = document.pages[page_index]
    width, height = document.page_width, document.page_height

    canvas = np.full((height, width, 4), 255, dtype=np.uint8)
    warnings: List[str] = []
    for layer in layers_to_render(page):
        try:
            pixels = decode_layer(layer, width, height)
        except LayerDecodeError as exc:
            LOGGER.warning("snote.render.layer_skipped page=%d layer=%s: %s", page.index, layer.name, exc)
            warnings.append(f"page {page.index} {layer.name}: {exc}")
            continue
        composite_over(canvas, pixels)

    if grayscale:
        to_grayscale(canvas)
    return Raster(width=width, height=height, pixels=canvas, warnings=tuple(warnings))


def iter_page_rasters(document: NoteDocument, *, grayscale: bool = True) -> Iterator[Tuple[int, Raster]]:
    for position in range(len(document.pages)):
        raster = render_page(document, position, grayscale=grayscale)
        if raster is not None:
            yield position, raster
