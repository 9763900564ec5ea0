"""Adding, editing and removing tag fields in raw BAM tag data.

Every function returns new tag data and leaves its input untouched.
"""

from __future__ import annotations

import struct

from bamkit.tags import STRING_TYPES, TagError, find_tag, skip_value

_INT_MIN = -(2**31)
_INT_LIMIT = 2**32


def _check_names(tag: str, tag_type: str) -> None:
    if len(tag) != 2:
        raise TagError(f"tag name must be two characters: {tag!r}")
    if len(tag_type) != 1:
        raise TagError(f"tag type must be one character: {tag_type!r}")
    if not (tag.isascii() and tag_type.isascii()):
        raise TagError("tag name and type must be ASCII")


def _encode_value(tag_type: str, value: str | int | float) -> bytes:
    if isinstance(value, str):
        if tag_type not in STRING_TYPES:
            raise TagError(f"string values need type Z or H, not {tag_type}")
        if "\0" in value:
            raise TagError("string values cannot contain NUL characters")
        return value.encode("latin-1") + b"\0"
    if isinstance(value, int):
        if tag_type == "f" or tag_type in STRING_TYPES:
            raise TagError(f"integer values cannot be stored as type {tag_type}")
        if not _INT_MIN <= value < _INT_LIMIT:
            raise TagError(f"integer value out of 32-bit range: {value}")
        return struct.pack("<I", value & 0xFFFFFFFF)
    if isinstance(value, float):
        if tag_type in STRING_TYPES:
            raise TagError(f"float values cannot be stored as type {tag_type}")
        try:
            return struct.pack("<f", value)
        except OverflowError as exc:
            raise TagError(f"float value out of range: {value}") from exc
    raise TypeError(f"unsupported tag value type: {type(value).__name__}")


def add_tag(data: bytes, tag: str, tag_type: str, value: str | int | float) -> bytes:
    """Append a new tag; raises TagError if it already exists or is invalid.

    Integer and float values always occupy four bytes.
    """
    _check_names(tag, tag_type)
    encoded = _encode_value(tag_type, value)
    if find_tag(data, tag) is not None:
        raise TagError(f"tag {tag} already exists")
    return bytes(data) + tag.encode("ascii") + tag_type.encode("ascii") + encoded


def edit_tag(data: bytes, tag: str, tag_type: str, value: str | int | float) -> bytes:
    """Replace the value of ``tag``, or add it if absent.

    An existing tag keeps its stored type code; only its value is replaced.
    """
    _check_names(tag, tag_type)
    encoded = _encode_value(tag_type, value)
    offset = find_tag(data, tag)
    if offset is None:
        return add_tag(data, tag, tag_type, value)
    after = skip_value(data, chr(data[offset - 1]), offset)
    return bytes(data[:offset]) + encoded + bytes(data[after:])


def remove_tag(data: bytes, tag: str) -> bytes:
    """Return the tag data without ``tag``; raises KeyError if it is absent."""
    offset = find_tag(data, tag) if data else None
    if offset is None:
        raise KeyError(tag)
    after = skip_value(data, chr(data[offset - 1]), offset)
    return bytes(data[:offset - 3]) + bytes(data[after:])