from __future__ import annotations

import logging
import struct
from typing import Optional

from .errors import OutOfBoundsError

LOGGER = logging.getLogger(__name__)

ADDRESS_SIZE = 4
LENGTH_FIELD_SIZE = 4


def read_uint32(buffer: bytes, offset: int, *, label: str = "block") -> int:
    """Little-endian uint32 at ``offset``; raises OutOfBoundsError past EOF."""

    if offset < 0 or offset + 4 > len(buffer):
        raise OutOfBoundsError(label, offset, len(buffer))
    return struct.unpack_from("<I", buffer, offset)[0]


def footer_address(buffer: bytes) -> int:
    """The footer block is always referenced by the trailing 4 bytes."""

    return read_uint32(buffer, len(buffer) - ADDRESS_SIZE, label="footer address")


def read_block(buffer: bytes, address: int, *, label: str = "block") -> Optional[bytes]:
    """
    Return the content of the length-prefixed block stored at ``address``.

    Address 0 is the format's null pointer and yields ``None``.
    """

    if address == 0:
        return None
    length = read_uint32(buffer, address, label=label)
    start = address + LENGTH_FIELD_SIZE
    end = start + length
    if end > len(buffer):
        raise OutOfBoundsError(label, address, len(buffer), length)
    LOGGER.debug("snote.block %s addr=0x%X len=%d", label, address, length)
    return bytes(buffer[start:end])
