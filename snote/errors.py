"""
Exception types raised while decoding Supernote .note/.mark files.

Structural problems (bad signature, unreadable blocks, garbage in address
tags) abort the whole parse.  Layer-level problems are raised by the decode
helpers but caught by the renderers so one bad layer does not cost a page.
"""

from __future__ import annotations

from typing import Optional


class DecodeError(Exception):
    """Base class for every error raised by the snote decoders."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "Unable to decode the Supernote file."


class InvalidSignatureError(DecodeError):
    """The leading 24 bytes are not a noteSN_FILE_VER_ signature."""

    @property
    def default_message(self) -> str:
        return "Invalid Supernote file: signature doesn't match."


class InvalidFormatError(DecodeError):
    """A .mark file does not start with the literal 'mark' type tag."""

    @property
    def default_message(self) -> str:
        return "Invalid .mark file: missing 'mark' file type tag."


class OutOfBoundsError(DecodeError):
    """A block address or length points outside the buffer."""

    def __init__(
        self,
        label: str,
        address: int,
        buffer_size: int,
        length: Optional[int] = None,
    ) -> None:
        self.label = label
        self.address = address
        self.buffer_size = buffer_size
        self.length = length
        if length is None:
            detail = f"length field at 0x{address:X} is outside a {buffer_size}-byte buffer"
        else:
            detail = (
                f"{length} bytes at 0x{address:X} run past the end of a "
                f"{buffer_size}-byte buffer"
            )
        super().__init__(f"{label}: {detail}")


class MalformedTagError(DecodeError):
    """A tag that must hold an integer carries something else."""

    def __init__(self, key: str, value: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Tag {key!r} is not an integer: {value!r}")


class LayerDecodeError(DecodeError):
    """A single layer bitmap could not be decoded."""

    @property
    def default_message(self) -> str:
        return "Layer bitmap could not be decoded."


class UnknownCodecError(LayerDecodeError):
    """A layer declares a bitmap protocol other than RATTA_RLE."""

    def __init__(self, layer: str, codec: str) -> None:
        self.layer = layer
        self.codec = codec
        super().__init__(f"{layer}: unsupported bitmap protocol {codec!r}")
