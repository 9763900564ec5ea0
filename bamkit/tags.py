"""Reading auxiliary tag fields from raw BAM tag data.

Tag data is a run of fields, each a two-character name, a one-character
storage type and a value whose size depends on that type.
"""

from __future__ import annotations

import struct

FIXED_WIDTHS = {
    "A": 1,
    "c": 1,
    "C": 1,
    "s": 2,
    "S": 2,
    "f": 4,
    "i": 4,
    "I": 4,
}
STRING_TYPES = frozenset("ZH")
VALID_TYPES = frozenset(FIXED_WIDTHS) | STRING_TYPES

_INTEGER_WIDTHS = {code: width for code, width in FIXED_WIDTHS.items() if code != "f"}


class TagError(ValueError):
    """Raised for malformed tag data or a tag that cannot be read as asked."""


def _tag_key(tag: str) -> bytes:
    try:
        return tag.encode("ascii")
    except UnicodeEncodeError as exc:
        raise TagError(f"tag name must be ASCII: {tag!r}") from exc


def skip_value(data: bytes, storage_type: str, offset: int) -> int:
    """Return the offset just past a value of ``storage_type`` starting at ``offset``."""
    width = FIXED_WIDTHS.get(storage_type)
    if width is not None:
        return offset + width
    if storage_type in STRING_TYPES:
        end = data.find(b"\0", offset)
        return len(data) if end < 0 else end + 1
    raise TagError(f"unknown tag storage class encountered: [{storage_type}]")


def find_tag(data: bytes, tag: str) -> int | None:
    """Return the offset of the value of ``tag``, or None if it is absent."""
    key = _tag_key(tag)
    size = len(data)
    offset = 0
    while offset < size:
        name = bytes(data[offset:offset + 2])
        storage = data[offset + 2:offset + 3]
        offset += 3
        if not storage:
            return None
        if name == key:
            return offset
        if storage[0] == 0:
            return None
        offset = skip_value(data, chr(storage[0]), offset)
        if offset >= size or data[offset] == 0:
            return None
    return None


def _locate(data: bytes, tag: str) -> tuple[int, str] | None:
    if not data:
        return None
    offset = find_tag(data, tag)
    if offset is None:
        return None
    return offset, chr(data[offset - 1])


def get_string(data: bytes, tag: str) -> str | None:
    """Return the text stored for ``tag`` up to its terminator, or None if absent."""
    found = _locate(data, tag)
    if found is None:
        return None
    offset, _ = found
    end = data.find(b"\0", offset)
    if end < 0:
        end = len(data)
    return bytes(data[offset:end]).decode("latin-1")


def get_int(data: bytes, tag: str) -> int | None:
    """Return the raw little-endian, zero-extended integer stored for ``tag``.

    Returns None if the tag is absent; raises TagError for float, string
    or unknown storage types.
    """
    found = _locate(data, tag)
    if found is None:
        return None
    offset, storage = found
    width = _INTEGER_WIDTHS.get(storage)
    if width is None:
        if storage in VALID_TYPES:
            raise TagError(f"cannot store tag of type {storage} in integer destination")
        raise TagError(f"unknown tag storage class encountered: [{storage}]")
    return int.from_bytes(bytes(data[offset:offset + width]), "little")


def get_float(data: bytes, tag: str) -> float | None:
    """Return the value bytes of ``tag`` read as a little-endian float.

    Shorter values are zero-padded to four bytes before being read.
    Returns None if the tag is absent; raises TagError for string or
    unknown storage types.
    """
    found = _locate(data, tag)
    if found is None:
        return None
    offset, storage = found
    width = FIXED_WIDTHS.get(storage)
    if width is None:
        if storage in STRING_TYPES:
            raise TagError(f"cannot store tag of type {storage} in float destination")
        raise TagError(f"unknown tag storage class encountered: [{storage}]")
    raw = bytes(data[offset:offset + width]).ljust(4, b"\0")
    return struct.unpack("<f", raw)[0]


def get_tag_type(data: bytes, tag: str) -> str | None:
    """Return the storage type code of ``tag``, or None if it is absent."""
    found = _locate(data, tag)
    if found is None:
        return None
    _, storage = found
    if storage not in VALID_TYPES:
        raise TagError(f"unknown tag storage class encountered: [{storage}]")
    return storage