"""Tests for length-prefixed block addressing."""

import struct

import pytest

from snote.blocks import footer_address, read_block, read_uint32
from snote.errors import OutOfBoundsError


@pytest.mark.parametrize("size", [0, 1, 70_000])
def test_read_block_round_trip(size):
    """Content between a prefix and suffix comes back byte for byte."""
    content = bytes(i % 251 for i in range(size))
    prefix = b"\xAA" * 13
    buffer = prefix + struct.pack("<I", size) + content + b"\xBB" * 9
    assert read_block(buffer, len(prefix)) == content


def test_read_block_address_zero_is_absent():
    """Address 0 is the null block."""
    assert read_block(b"\x05\x00\x00\x00hello", 0) is None


def test_read_block_length_past_end():
    """A length running past EOF raises instead of truncating."""
    buffer = b"xxxx" + struct.pack("<I", 100) + b"short"
    with pytest.raises(OutOfBoundsError) as excinfo:
        read_block(buffer, 4, label="page 2")
    assert excinfo.value.label == "page 2"
    assert excinfo.value.length == 100
    assert "page 2" in str(excinfo.value)


def test_read_block_address_past_end():
    """An address whose length field does not fit raises."""
    with pytest.raises(OutOfBoundsError):
        read_block(b"\x00" * 10, 8, label="header")


def test_read_uint32_little_endian():
    """Four bytes are read little endian."""
    assert read_uint32(b"\x00\x01\x02\x00\x00", 1) == 0x0201


def test_footer_address_reads_trailing_bytes():
    """The footer address sits in the last four bytes."""
    buffer = b"junk" + struct.pack("<I", 0x1234)
    assert footer_address(buffer) == 0x1234


def test_footer_address_short_buffer():
    """Buffers shorter than an address cannot hold a footer."""
    with pytest.raises(OutOfBoundsError):
        footer_address(b"\x01\x02")
