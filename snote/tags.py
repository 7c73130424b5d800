"""
Helpers for the ``<KEY:value>`` metadata blocks used by Supernote files.

Every footer, header, page and layer block is plain text made of tag tokens.
A key can legitimately appear more than once, so values are modelled as a
tagged variant: ``ScalarTag`` for a single occurrence and ``RepeatedTag``
once a second occurrence shows up.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from .blocks import read_block
from .errors import MalformedTagError

LOGGER = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"<([^:<>]+):([^:<>]+)>")
INTEGER_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ScalarTag:
    value: str

    @property
    def first(self) -> str:
        return self.value


@dataclass(frozen=True)
class RepeatedTag:
    values: Tuple[str, ...]

    @property
    def first(self) -> str:
        return self.values[0]


TagValue = Union[ScalarTag, RepeatedTag]
TagMap = Dict[str, TagValue]


def decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def extract_tags(text: str) -> TagMap:
    """Collect every ``<key:value>`` token, folding repeated keys in order."""

    tags: TagMap = {}
    for match in TAG_PATTERN.finditer(text):
        key, value = match.group(1), match.group(2)
        existing = tags.get(key)
        if existing is None:
            tags[key] = ScalarTag(value)
        elif isinstance(existing, ScalarTag):
            tags[key] = RepeatedTag((existing.value, value))
        else:
            tags[key] = RepeatedTag(existing.values + (value,))
    return tags


def parse_tag_block(buffer: bytes, address: int, *, label: str = "block") -> TagMap:
    content = read_block(buffer, address, label=label)
    if content is None:
        return {}
    return extract_tags(decode_text(content))


def group_nested(
    tags: Mapping[str, TagValue],
    delimiter: str = "_",
    prefixes: Iterable[str] = (),
) -> Dict[str, Dict[str, str]]:
    """
    Split flat keys into ``{group: {subkey: value}}``.

    ``FILE_FEATURE`` becomes ``FILE -> FEATURE``; keys without the delimiter
    fall back to the first matching prefix (``PAGE12`` -> ``PAGE -> 12``).
    Only scalar values take part, repeated keys are left out.
    """

    prefixes = tuple(prefixes)
    grouped: Dict[str, Dict[str, str]] = {}
    for key, value in tags.items():
        group: Optional[str] = None
        subkey: Optional[str] = None
        idx = key.find(delimiter)
        if idx > -1:
            group, subkey = key[:idx], key[idx + len(delimiter) :]
        else:
            for prefix in prefixes:
                if key.startswith(prefix):
                    group, subkey = prefix, key[len(prefix) :]
                    break
        if not group or not subkey:
            continue
        if isinstance(value, RepeatedTag):
            LOGGER.warning(
                "snote.tags.repeated_key_dropped key=%s occurrences=%d", key, len(value.values)
            )
            continue
        grouped.setdefault(group, {})[subkey] = value.value
    return grouped


def tag_text(tags: Mapping[str, TagValue], key: str, default: Optional[str] = None) -> Optional[str]:
    value = tags.get(key)
    if value is None:
        return default
    return value.first


def tag_int(tags: Mapping[str, TagValue], key: str, default: int = 0) -> int:
    """Integer tag lookup; missing keys give ``default``, junk raises."""

    text = tag_text(tags, key)
    if text is None:
        return default
    return parse_int(key, text)


def parse_int(key: str, text: str) -> int:
    stripped = text.strip()
    if not INTEGER_PATTERN.fullmatch(stripped):
        raise MalformedTagError(key, text)
    return int(stripped)
