"""Merging the SAM header texts of several BAM files into one header."""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

_FIRST_FILE_PREFIXES = ("@HD", "@SQ")


def read_group_id(header_line: str) -> str:
    """Return the ID field of an ``@RG`` header line.

    The value runs from after ``ID:`` up to the next colon or tab.
    Returns an empty string if the line has no ID field.
    """
    for part in header_line.split("\t"):
        subtag, _, rest = part.partition(":")
        if subtag == "ID":
            return rest.split(":", 1)[0]
    return ""


def merge_header_texts(sources: Iterable[tuple[str, str]]) -> str:
    """Build one header from ``(filename, header_text)`` pairs.

    ``@HD`` and ``@SQ`` lines come from the first source only; ``@RG``
    lines come from every source, each read group ID kept once, in the
    order first seen.  A source with an empty header is skipped.  A read
    group repeated within a single source is logged as a warning.
    """
    merged: list[str] = []
    seen_groups: set[str] = set()
    for position, (filename, header_text) in enumerate(sources):
        if not header_text:
            continue
        file_groups: set[str] = set()
        for line in header_text.split("\n"):
            if not line:
                continue
            if position == 0 and line.startswith(_FIRST_FILE_PREFIXES):
                merged.append(line)
            if not line.startswith("@RG"):
                continue
            group = read_group_id(line)
            if group not in seen_groups:
                merged.append(line)
                seen_groups.add(group)
                file_groups.add(group)
            elif group in file_groups:
                logger.warning(
                    "duplicate @RG tag %s entry in header of %s", group, filename
                )
    return "".join(f"{line}\n" for line in merged)