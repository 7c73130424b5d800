#!/usr/bin/env python3
"""
Export the annotation layers of a Supernote .mark file as transparent PNGs.

INPUT may be the .mark file itself or the annotated PDF; in the latter case
the companion ``<name>.pdf.mark`` next to it is used.

Usage:
    python mark_to_png.py Book.pdf annotations/
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from snote import (
    DecodeError,
    MarkDocument,
    list_annotated_pages,
    mark_path_for,
    parse_mark,
    render_annotation_layer,
    save_png,
)


def resolve_mark_path(path: Path) -> Path:
    if path.suffix.lower() == ".mark":
        return path
    return mark_path_for(path)


def export_annotations(mark: MarkDocument, output_dir: Path, stem: str) -> List[Path]:
    written: List[Path] = []
    for page_number in list_annotated_pages(mark):
        raster = render_annotation_layer(mark, page_number)
        if raster is None:
            continue
        for warning in raster.warnings:
            print(f"[warn] {warning}")
        destination = save_png(raster, output_dir / f"{stem}_page{page_number:03d}.png")
        print(f"[+] Annotations for page {page_number} written to {destination}")
        written.append(destination)
    return written


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export Supernote .mark annotation layers to PNG.")
    parser.add_argument("input", type=Path, help=".mark file or the PDF it annotates")
    parser.add_argument("output", type=Path, help="Destination directory for the PNG files")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    mark_path = resolve_mark_path(args.input)
    try:
        mark = parse_mark(mark_path.read_bytes())
    except (OSError, DecodeError) as exc:
        print(f"[error] {mark_path}: {exc}", file=sys.stderr)
        return 1
    written = export_annotations(mark, args.output, mark_path.with_suffix("").stem)
    if not written:
        print(f"[warn] {mark_path.name} carries no annotated pages")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
