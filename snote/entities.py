from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from PIL import Image

DEFAULT_CODEC = "RATTA_RLE"
LAYER_NAMES = ("MAINLAYER", "LAYER1", "LAYER2", "LAYER3", "BGLAYER")


@dataclass(frozen=True)
class Layer:
    name: str
    codec: str = DEFAULT_CODEC
    bitmap: Optional[bytes] = None

    @property
    def has_bitmap(self) -> bool:
        return bool(self.bitmap)


@dataclass(frozen=True)
class Page:
    index: int
    layers: Tuple[Layer, ...]
    render_order: Tuple[str, ...] = ("MAINLAYER",)

    def layer(self, name: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None


@dataclass(frozen=True)
class NoteDocument:
    signature: str
    version: int
    page_width: int
    page_height: int
    equipment: str
    pages: Tuple[Page, ...]


@dataclass(frozen=True)
class MarkLayer:
    name: str
    codec: str = DEFAULT_CODEC
    bitmap: Optional[bytes] = None
    total_path: Optional[str] = None


@dataclass(frozen=True)
class MarkPage:
    page_number: int
    layers: Tuple[MarkLayer, ...]


@dataclass(frozen=True)
class MarkDocument:
    signature: str
    file_type: str
    equipment: str
    pages: Tuple[MarkPage, ...]


@dataclass(frozen=True)
class Raster:
    """RGBA pixels (``height x width x 4``, uint8) plus non-fatal diagnostics."""

    width: int
    height: int
    pixels: np.ndarray = field(repr=False, compare=False)
    warnings: Tuple[str, ...] = ()

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))
