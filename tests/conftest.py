from __future__ import annotations

from pathlib import Path

import pytest

from builders import build_mark, build_note, solid_bitmap

WHITE = 0x65
BLACK = 0x61
GRAY = 0x64


@pytest.fixture
def minimal_note() -> bytes:
    """One page, MAINLAYER only, a 2x2 white square at the top-left."""

    return build_note([{"MAINLAYER": bytes([WHITE, 0x03])}])


@pytest.fixture
def layered_note() -> bytes:
    """MAINLAYER solid black over a solid gray BGLAYER."""

    return build_note(
        [
            {
                "MAINLAYER": solid_bitmap(BLACK, 1404, 1872),
                "BGLAYER": solid_bitmap(GRAY, 1404, 1872),
            }
        ],
        layer_seq=["MAINLAYER,BGLAYER"],
    )


@pytest.fixture
def simple_mark() -> bytes:
    return build_mark(
        {
            3: [("MAINLAYER", bytes([BLACK, 0x07]), "c 0 0 4 2")],
            1: [("MAINLAYER", bytes([WHITE, 0x07]), "c 0 0 4 2")],
        }
    )


@pytest.fixture
def note_file(tmp_path: Path, minimal_note: bytes) -> Path:
    path = tmp_path / "Meeting.note"
    path.write_bytes(minimal_note)
    return path
