#!/usr/bin/env python3
"""
Minimal block/tag dumper for Supernote .note files.

Walks the same address chain the parser follows and prints every block it
visits:

    footer  (address in the last 4 bytes)
    header  (FILE_FEATURE)
    page N  (PAGE<N>)
    layer   (MAINLAYER, LAYER1-3, BGLAYER of each page)

With ``--runs`` the RLE stream of each layer is summarised as well, which is
handy when a bitmap renders with smeared or shifted runs.
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import Dict, Iterator, Sequence, Tuple

from snote import (
    DecodeError,
    LAYER_NAMES,
    RepeatedTag,
    footer_address,
    group_nested,
    iter_runs,
    read_block,
    read_signature,
    tag_int,
)
from snote.note import DEFAULT_HEADER_ADDRESS, page_size_for
from snote.tags import TagMap, parse_int, parse_tag_block, tag_text


def describe_tags(tags: TagMap) -> Iterator[str]:
    for key, value in tags.items():
        if isinstance(value, RepeatedTag):
            yield f"    {key} = {list(value.values)!r}"
        else:
            yield f"    {key} = {value.value!r}"


def describe_runs(bitmap: bytes, capacity: int) -> str:
    colors: Counter[int] = Counter()
    runs = 0
    pixels = 0
    for color, length in iter_runs(bitmap, capacity):
        colors[color] += length
        runs += 1
        pixels += length
    palette = ", ".join(f"0x{code:02X}:{count}" for code, count in colors.most_common(6))
    return f"    runs={runs} pixels={pixels}/{capacity} colors[{palette}]"


def walk_pages(grouped: Dict[str, Dict[str, str]]) -> Iterator[Tuple[int, int]]:
    pages = [
        (parse_int(f"PAGE{key}", key), parse_int(f"PAGE{key}", value))
        for key, value in grouped.get("PAGE", {}).items()
    ]
    yield from sorted(pages)


def dump(buffer: bytes, *, show_runs: bool = False) -> None:
    signature, version = read_signature(buffer)
    print(f"signature={signature!r} version={version} size={len(buffer)}")

    address = footer_address(buffer)
    footer = parse_tag_block(buffer, address, label="footer")
    print(f"footer @0x{address:X}")
    for line in describe_tags(footer):
        print(line)

    grouped = group_nested(footer, "_", ["PAGE"])
    feature = grouped.get("FILE", {}).get("FEATURE")
    header_address = parse_int("FILE_FEATURE", feature) if feature else DEFAULT_HEADER_ADDRESS
    header = parse_tag_block(buffer, header_address, label="header")
    print(f"header @0x{header_address:X}")
    for line in describe_tags(header):
        print(line)
    width, height = page_size_for(tag_text(header, "APPLY_EQUIPMENT", "unknown"))

    for index, page_address in walk_pages(grouped):
        page = parse_tag_block(buffer, page_address, label=f"page {index}")
        print(f"page {index} @0x{page_address:X}")
        for line in describe_tags(page):
            print(line)
        for name in LAYER_NAMES:
            layer_address = tag_int(page, name)
            if layer_address == 0:
                continue
            layer = parse_tag_block(buffer, layer_address, label=f"page {index} {name}")
            print(f"  {name} @0x{layer_address:X}")
            for line in describe_tags(layer):
                print("  " + line)
            if show_runs:
                bitmap = read_block(buffer, tag_int(layer, "LAYERBITMAP"), label=f"page {index} {name} bitmap")
                if bitmap:
                    print("  " + describe_runs(bitmap, width * height))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dump the block/tag structure of a Supernote .note file.")
    parser.add_argument("input", type=Path, help="Path to the .note file")
    parser.add_argument(
        "--runs",
        action="store_true",
        help="Summarise the RLE runs of every layer bitmap",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        dump(args.input.read_bytes(), show_runs=args.runs)
    except (OSError, DecodeError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
