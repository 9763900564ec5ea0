"""Locating index files that belong to a BAM file.

Two index formats are recognised: the standard BAM index (``.bai``) and
the toolkit's own index (``.bti``).
"""

from __future__ import annotations

import enum
import os
from pathlib import Path


class IndexCacheMode(enum.IntEnum):
    """How much index data to keep in memory.

    FULL keeps the whole index, LIMITED only the data for the reference
    being processed, and NONE keeps nothing and loads offsets as needed.
    """

    FULL = 0
    LIMITED = 1
    NONE = 2


class IndexType(enum.IntEnum):
    """Index file formats, each with its own file name extension."""

    BAMTOOLS = 0
    STANDARD = 1

    @property
    def extension(self) -> str:
        """The file name extension used by this index format."""
        return ".bti" if self is IndexType.BAMTOOLS else ".bai"

    def path_for(self, bam_filename: str | os.PathLike[str]) -> Path:
        """Return the index path of this format for ``bam_filename``."""
        return Path(os.fspath(bam_filename) + self.extension)


def index_for_bam(
    bam_filename: str | os.PathLike[str],
    preferred: IndexType = IndexType.BAMTOOLS,
) -> IndexType | None:
    """Return the type of index present next to ``bam_filename``.

    The preferred type is chosen whenever its file exists; otherwise any
    other existing index is used, the toolkit index before the standard one.
    Returns None if no index file exists.
    """
    preferred = IndexType(preferred)
    existing = [
        kind
        for kind in (IndexType.BAMTOOLS, IndexType.STANDARD)
        if kind.path_for(bam_filename).is_file()
    ]
    if preferred in existing:
        return preferred
    return existing[0] if existing else None


def index_type_for_filename(index_filename: str | os.PathLike[str]) -> IndexType | None:
    """Return the type of an explicitly named index file.

    Returns None if the file does not exist or its extension is not one
    of the supported index extensions.
    """
    path = Path(index_filename)
    if not path.is_file():
        return None
    name = os.fspath(index_filename)
    for kind in IndexType:
        if name.endswith(kind.extension):
            return kind
    return None