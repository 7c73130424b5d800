from __future__ import annotations

import logging
import zlib

LOGGER = logging.getLogger(__name__)

# zlib or gzip header, detected automatically.
AUTO_HEADER_WBITS = zlib.MAX_WBITS | 32


def maybe_inflate(blob: bytes) -> bytes:
    """
    Inflate ``blob`` when it is a zlib/gzip stream, otherwise return it as is.

    Annotation layers come both ways: some store the RLE stream raw, others
    wrap it in zlib.
    """

    try:
        payload = zlib.decompress(blob, AUTO_HEADER_WBITS)
    except zlib.error:
        LOGGER.debug("snote.inflate.raw len=%d", len(blob))
        return blob
    LOGGER.debug("snote.inflate.ok %d -> %d bytes", len(blob), len(payload))
    return payload
