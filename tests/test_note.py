"""Tests for the .note container parser."""

import pytest

from builders import BlockWriter, NOTE_SIGNATURE, build_note, solid_bitmap
from snote.entities import LAYER_NAMES
from snote.errors import InvalidSignatureError, MalformedTagError, OutOfBoundsError
from snote.note import parse_note


def test_parse_minimal_note(minimal_note):
    """Signature, version and the single page are picked up."""
    document = parse_note(minimal_note)
    assert document.signature == "noteSN_FILE_VER_20200000"
    assert document.version == 20200000
    assert len(document.pages) == 1
    page = document.pages[0]
    assert page.index == 1
    assert page.render_order == ("MAINLAYER",)
    assert [layer.name for layer in page.layers] == list(LAYER_NAMES)
    assert page.layer("MAINLAYER").bitmap == bytes([0x65, 0x03])
    assert page.layer("MAINLAYER").codec == "RATTA_RLE"
    assert page.layer("BGLAYER").bitmap is None


def test_invalid_signature_rejected():
    """Anything but noteSN_FILE_VER_<8 digits> is refused."""
    buffer = build_note([{}], signature=b"noteSN_FILE_VER_2020XXXX")
    with pytest.raises(InvalidSignatureError):
        parse_note(buffer)


def test_empty_buffer_rejected():
    """An empty buffer has no signature."""
    with pytest.raises(InvalidSignatureError):
        parse_note(b"")


def test_equipment_n5_uses_large_page():
    """N5 devices use 1920x2560 pages."""
    document = parse_note(build_note([{}], equipment="N5"))
    assert document.equipment == "N5"
    assert (document.page_width, document.page_height) == (1920, 2560)


@pytest.mark.parametrize("equipment", [None, "N6", "A5X"])
def test_other_equipment_uses_default_page(equipment):
    """Every other device uses 1404x1872 pages."""
    document = parse_note(build_note([{}], equipment=equipment))
    assert (document.page_width, document.page_height) == (1404, 1872)
    if equipment is None:
        assert document.equipment == "unknown"


def test_pages_sorted_numerically():
    """PAGE10 comes after PAGE2."""
    pages = [{"MAINLAYER": bytes([0x61, n])} for n in (10, 2, 1)]
    document = parse_note(build_note(pages, page_keys=["10", "2", "1"]))
    assert [page.index for page in document.pages] == [1, 2, 10]
    assert document.pages[2].layer("MAINLAYER").bitmap == bytes([0x61, 10])


def test_layer_sequence_and_codec():
    """LAYERSEQ and LAYERPROTOCOL are carried through."""
    buffer = build_note(
        [{"MAINLAYER": solid_bitmap(0x61, 4, 4), "LAYER1": b"\x00\x00"}],
        layer_seq=["LAYER1,MAINLAYER"],
        codecs={"LAYER1": "PNG"},
    )
    page = parse_note(buffer).pages[0]
    assert page.render_order == ("LAYER1", "MAINLAYER")
    assert page.layer("LAYER1").codec == "PNG"


def test_header_defaults_to_offset_24():
    """Without FILE_FEATURE the header is read right after the signature."""
    document = parse_note(build_note([{}], equipment="N5", feature_tag=False))
    assert document.page_width == 1920


def test_page_address_out_of_bounds():
    """A page address past EOF aborts the parse and names the page."""
    writer = BlockWriter(NOTE_SIGNATURE)
    writer.add_tags([("APPLY_EQUIPMENT", "N6")])
    footer = writer.add_tags([("FILE_FEATURE", 24), ("PAGE1", 999_999)])
    with pytest.raises(OutOfBoundsError) as excinfo:
        parse_note(writer.finish(footer))
    assert excinfo.value.label == "page 1"


def test_bitmap_address_out_of_bounds():
    """A bitmap block running past EOF names the layer."""
    writer = BlockWriter(NOTE_SIGNATURE)
    writer.add_tags([("APPLY_EQUIPMENT", "N6")])
    layer = writer.add_tags([("LAYERBITMAP", 10**7)])
    page = writer.add_tags([("MAINLAYER", layer)])
    footer = writer.add_tags([("FILE_FEATURE", 24), ("PAGE1", page)])
    with pytest.raises(OutOfBoundsError) as excinfo:
        parse_note(writer.finish(footer))
    assert excinfo.value.label == "page 1 MAINLAYER bitmap"


def test_footer_address_out_of_bounds():
    """A garbage footer pointer is reported as an out-of-bounds footer."""
    buffer = NOTE_SIGNATURE + b"\xff\xff\xff\x7f"
    with pytest.raises(OutOfBoundsError) as excinfo:
        parse_note(buffer)
    assert excinfo.value.label == "footer"


def test_non_numeric_layer_address():
    """A layer address that is not a number raises MalformedTagError."""
    writer = BlockWriter(NOTE_SIGNATURE)
    writer.add_tags([("APPLY_EQUIPMENT", "N6")])
    page = writer.add_tags([("MAINLAYER", "abc")])
    footer = writer.add_tags([("FILE_FEATURE", 24), ("PAGE1", page)])
    with pytest.raises(MalformedTagError):
        parse_note(writer.finish(footer))


def test_document_is_immutable(minimal_note):
    """Parsed records cannot be modified."""
    document = parse_note(minimal_note)
    with pytest.raises(AttributeError):
        document.page_width = 10
