# -*- coding: utf-8 -*-
""" Some generic HTTP utilities for internal use. """

from typing import List, Tuple, Union


def accepted_media_types(header: str) -> List[str]:
    """
    List the media ranges of an ``Accept`` header ordered by preference.

    Entries are sorted by decreasing quality, keeping the header order for
    entries of equal quality. Ranges with a quality of 0 are dropped.

    >>> accepted_media_types("application/json;q=0.5, text/html")
    ['text/html', 'application/json']

    >>> accepted_media_types("text/plain;q=0, */*")
    ['*/*']
    """
    entries = []  # type: List[Tuple[float, int, str]]
    for index, part in enumerate(header.split(",")):
        media_type, _, params = part.partition(";")
        media_type = media_type.strip().lower()
        if not media_type:
            continue

        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = 0.0

        if quality > 0:
            entries.append((quality, index, media_type))

    return [
        media_type
        for _, _, media_type in sorted(entries, key=lambda e: (-e[0], e[1]))
    ]


def prefers_html(header: str) -> bool:
    """
    Whether a client would rather receive HTML than JSON.

    Only explicit ``text/html`` and ``application/json`` entries are
    considered, wildcards never match.

    >>> prefers_html("text/html,application/xhtml+xml,*/*;q=0.8")
    True

    >>> prefers_html("*/*")
    False
    """
    for media_type in accepted_media_types(header):
        if media_type == "text/html":
            return True
        if media_type == "application/json":
            return False
    return False


_UNITS = {"b": 1, "kb": 1024, "mb": 1024 ** 2, "gb": 1024 ** 3}


def parse_bytes(value: Union[int, str]) -> int:
    """
    Convert a human readable size to a number of bytes.

    >>> parse_bytes("56kb")
    57344

    >>> parse_bytes(100)
    100
    """
    if isinstance(value, int):
        return value

    normalized = value.strip().lower()
    for unit in sorted(_UNITS, key=len, reverse=True):
        if normalized.endswith(unit):
            number = normalized[: -len(unit)].strip()
            return int(float(number) * _UNITS[unit])

    return int(normalized)
