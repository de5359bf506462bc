"""
Parsing of the photo continuation message.

Grammar::

    <query>[//N]          search for <query>, N photos
    random[-W[-H]][//N]   random photos, W x W or W x H
"""
from __future__ import annotations

import re
from typing import Optional, Union

from ..types import MalformedReason, MalformedRequest
from .types import PhotoRequest, QueryMode, RandomMode

COUNT_SEPARATOR = "//"
RANDOM_KEYWORD = "random"
MAX_DIMENSION = 5000

_INT_RE = re.compile(r"[+-]?\d+")


def _parse_int(text: str) -> Optional[int]:
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def _parse_dimensions(query: str, default_size: int) -> Union[RandomMode, MalformedRequest]:
    first = query.find("-")
    if first == -1:
        return RandomMode(default_size, default_size)

    last = query.rfind("-")
    if first + 1 < last:
        width = _parse_int(query[first + 1:last])
        height = _parse_int(query[last + 1:])
    else:
        width = height = _parse_int(query[first + 1:])

    if width is None or height is None:
        return MalformedRequest(MalformedReason.UNPARSEABLE, f"bad size in '{query}'")
    if not (1 <= width <= MAX_DIMENSION and 1 <= height <= MAX_DIMENSION):
        return MalformedRequest(
            MalformedReason.UNPARSEABLE, f"size {width}x{height} outside 1..{MAX_DIMENSION}"
        )
    return RandomMode(width, height)


def parse_photo_request(
    text: str, group_limit: int, default_size: int
) -> Union[PhotoRequest, MalformedRequest]:
    query = text
    count = group_limit // 2

    index = query.rfind(COUNT_SEPARATOR)
    if index != -1:
        parsed = _parse_int(query[index + len(COUNT_SEPARATOR):].strip())
        if parsed is None:
            return MalformedRequest(MalformedReason.UNPARSEABLE, "photo count is not a number")
        count = parsed
        query = query[:index]

    if not 1 <= count <= group_limit:
        return MalformedRequest(MalformedReason.OUT_OF_RANGE, f"{count} not in 1..{group_limit}")

    query = query.strip()
    if query.lower().startswith(RANDOM_KEYWORD):
        mode = _parse_dimensions(query, default_size)
        if isinstance(mode, MalformedRequest):
            return mode
        return PhotoRequest(mode, count)

    if not query:
        return MalformedRequest(MalformedReason.EMPTY_QUERY)
    return PhotoRequest(QueryMode(query), count)
