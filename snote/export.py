from __future__ import annotations

import base64
import io
from pathlib import Path

from .entities import Raster


def encode_png(raster: Raster) -> bytes:
    buffer = io.BytesIO()
    raster.to_image().save(buffer, format="PNG")
    return buffer.getvalue()


def save_png(raster: Raster, destination: Path) -> Path:
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    raster.to_image().save(destination, format="PNG")
    return destination


def to_data_url(raster: Raster) -> str:
    """``data:image/png;base64,...`` for hosts that embed images inline."""

    payload = base64.b64encode(encode_png(raster)).decode("ascii")
    return f"data:image/png;base64,{payload}"
