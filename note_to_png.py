#!/usr/bin/env python3
"""
Render Supernote .note pages to PNG files without the device or its app.

Every page is written as ``<stem>_page<NNN>.png`` inside OUTPUT_DIR.  Example:

    python note_to_png.py Meeting.note out/ --pages 1,3
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from snote import DecodeError, NoteDocument, parse_note, render_page, save_png


def parse_page_list(text: str) -> List[int]:
    """``"1,3"`` -> ``[1, 3]`` (1-indexed page positions)."""

    pages: List[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        number = int(part)
        if number < 1:
            raise argparse.ArgumentTypeError(f"page numbers start at 1: {part}")
        pages.append(number)
    return pages


def render_pages(
    document: NoteDocument,
    output_dir: Path,
    stem: str,
    *,
    pages: Optional[Sequence[int]] = None,
    grayscale: bool = True,
) -> List[Path]:
    written: List[Path] = []
    numbers = pages if pages else range(1, len(document.pages) + 1)
    for number in numbers:
        raster = render_page(document, number - 1, grayscale=grayscale)
        if raster is None:
            print(f"[warn] Page {number} does not exist (document has {len(document.pages)})")
            continue
        for warning in raster.warnings:
            print(f"[warn] {warning}")
        destination = save_png(raster, output_dir / f"{stem}_page{number:03d}.png")
        print(f"[+] Page {number} written to {destination}")
        written.append(destination)
    return written


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render Supernote .note pages to PNG.")
    parser.add_argument("input", type=Path, help="Source .note file")
    parser.add_argument("output", type=Path, help="Destination directory for the PNG files")
    parser.add_argument(
        "--pages",
        type=parse_page_list,
        default=None,
        help="Comma separated 1-indexed pages to render (default: all)",
    )
    parser.add_argument(
        "--color",
        action="store_true",
        help="Keep layer colors instead of converting the page to grayscale",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    try:
        document = parse_note(args.input.read_bytes())
    except (OSError, DecodeError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    print(
        f"[+] {args.input.name}: {len(document.pages)} page(s), "
        f"{document.page_width}x{document.page_height}, equipment={document.equipment}"
    )
    render_pages(
        document,
        args.output,
        args.input.stem,
        pages=args.pages,
        grayscale=not args.color,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
