"""Tests for page compositing and tone mapping."""

import logging

import numpy as np

from builders import build_note, solid_bitmap
from snote.compositor import (
    composite_over,
    iter_page_rasters,
    layers_to_render,
    render_page,
    to_grayscale,
)
from snote.note import parse_note


def test_minimal_note_renders_white(minimal_note):
    """A 2x2 white square over the white canvas stays white and opaque."""
    document = parse_note(minimal_note)
    raster = render_page(document, 0)
    assert (raster.width, raster.height) == (1404, 1872)
    assert raster.pixels.shape == (1872, 1404, 4)
    assert (raster.pixels[:2, :2] == 255).all()
    assert (raster.pixels == 255).all()
    assert raster.warnings == ()


def test_first_declared_layer_is_on_top(layered_note):
    """MAINLAYER is declared first, so it is painted last."""
    raster = render_page(parse_note(layered_note), 0)
    assert (raster.pixels[..., :3] == 0).all()
    assert (raster.pixels[..., 3] == 255).all()


def test_reversed_sequence_puts_background_on_top():
    """Swapping LAYERSEQ swaps the visible layer."""
    buffer = build_note(
        [
            {
                "MAINLAYER": solid_bitmap(0x61, 1404, 1872),
                "BGLAYER": solid_bitmap(0x64, 1404, 1872),
            }
        ],
        layer_seq=["BGLAYER,MAINLAYER"],
    )
    raster = render_page(parse_note(buffer), 0)
    assert (raster.pixels[..., :3] == 128).all()


def test_layers_to_render_skips_missing_and_unknown():
    """Names without a bitmap or outside the canonical set are dropped."""
    buffer = build_note(
        [{"MAINLAYER": b"\x61\x00", "LAYER2": b"\x61\x00"}],
        layer_seq=["MAINLAYER,LAYER1,LAYER2,BOGUS"],
    )
    page = parse_note(buffer).pages[0]
    assert [layer.name for layer in layers_to_render(page)] == ["LAYER2", "MAINLAYER"]


def test_page_index_out_of_range(minimal_note):
    """Indexes outside the document return None."""
    document = parse_note(minimal_note)
    assert render_page(document, 1) is None
    assert render_page(document, -1) is None


def test_unknown_codec_is_skipped_with_warning(caplog):
    """A non-RLE layer is left out and reported, the rest still renders."""
    buffer = build_note(
        [
            {
                "MAINLAYER": solid_bitmap(0x61, 1404, 1872),
                "LAYER1": solid_bitmap(0x64, 1404, 1872),
            }
        ],
        layer_seq=["LAYER1,MAINLAYER"],
        codecs={"LAYER1": "PNG"},
    )
    with caplog.at_level(logging.WARNING, logger="snote.compositor"):
        raster = render_page(parse_note(buffer), 0)
    assert len(raster.warnings) == 1
    assert "LAYER1" in raster.warnings[0]
    assert "PNG" in caplog.text
    assert (raster.pixels[..., :3] == 0).all()


def test_grayscale_uses_rounded_luma():
    """Luma weights are applied with round-half-up, alpha is untouched."""
    canvas = np.zeros((1, 2, 4), dtype=np.uint8)
    canvas[0, 0] = (255, 0, 0, 255)
    canvas[0, 1] = (0, 0, 255, 80)
    to_grayscale(canvas)
    assert tuple(canvas[0, 0]) == (76, 76, 76, 255)
    assert tuple(canvas[0, 1]) == (29, 29, 29, 80)


def test_grayscale_pass_toggle(layered_note):
    """The grayscale pass can be skipped by the caller."""
    document = parse_note(layered_note)
    assert render_page(document, 0, grayscale=False).pixels[0, 0].tolist() == [0, 0, 0, 255]


def test_composite_skips_transparent_and_overwrites_opaque():
    """Alpha 0 leaves the canvas alone, alpha 255 replaces it."""
    canvas = np.full((1, 2, 4), 255, dtype=np.uint8)
    layer = np.array([[[10, 20, 30, 0], [10, 20, 30, 255]]], dtype=np.uint8)
    composite_over(canvas, layer)
    assert canvas[0, 0].tolist() == [255, 255, 255, 255]
    assert canvas[0, 1].tolist() == [10, 20, 30, 255]


def test_composite_partial_alpha_over_empty():
    """Translucent pixels over a transparent canvas keep their color."""
    canvas = np.zeros((1, 1, 4), dtype=np.uint8)
    layer = np.array([[[10, 20, 30, 128]]], dtype=np.uint8)
    composite_over(canvas, layer)
    assert canvas[0, 0].tolist() == [10, 20, 30, 128]


def test_composite_partial_alpha_over_white():
    """Source-over blends a translucent black into the white canvas."""
    canvas = np.full((1, 1, 4), 255, dtype=np.uint8)
    layer = np.array([[[0, 0, 0, 102]]], dtype=np.uint8)
    composite_over(canvas, layer)
    r, g, b, a = canvas[0, 0].tolist()
    assert r == g == b
    assert abs(r - 153) <= 1
    assert a in (254, 255)


def test_iter_page_rasters_yields_every_page():
    """Every page is rendered lazily in order."""
    buffer = build_note([{"MAINLAYER": b"\x61\x00"}, {}, {"MAINLAYER": b"\x65\x00"}])
    document = parse_note(buffer)
    rendered = list(iter_page_rasters(document))
    assert [position for position, _ in rendered] == [0, 1, 2]
    assert rendered[0][1].pixels[0, 0].tolist() == [0, 0, 0, 255]
