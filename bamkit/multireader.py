"""Reading several position-sorted BAM sources as one merged stream."""

from __future__ import annotations

import abc
import heapq
import itertools
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from bamkit.alignment import BamAlignment
from bamkit.headers import merge_header_texts
from bamkit.index import IndexCacheMode

logger = logging.getLogger(__name__)


class ReferenceMismatchError(ValueError):
    """Raised when sources were aligned against different reference sequences."""


@dataclass(frozen=True)
class Reference:
    """A reference sequence: its name and length."""

    name: str
    length: int


@dataclass(frozen=True)
class Region:
    """A span from a left (reference, position) to a right (reference, position)."""

    left_ref_id: int
    left_position: int
    right_ref_id: int
    right_position: int


class AlignmentSource(abc.ABC):
    """One readable, position-sorted source of alignments."""

    @property
    @abc.abstractmethod
    def filename(self) -> str:
        """Name of the file the alignments come from."""

    @property
    @abc.abstractmethod
    def header_text(self) -> str:
        """The SAM header text of the source."""

    @property
    @abc.abstractmethod
    def references(self) -> list[Reference]:
        """Reference sequences, in the order their IDs refer to."""

    @abc.abstractmethod
    def next_alignment(self, core: bool = False) -> BamAlignment | None:
        """Return the next alignment, or None at the end of data or region.

        With ``core`` set, character data need not be parsed.
        """

    @abc.abstractmethod
    def is_index_loaded(self) -> bool:
        """True if an index is available for random access."""

    @abc.abstractmethod
    def jump(self, ref_id: int, position: int) -> bool:
        """Move to ``ref_id``:``position``; False if the jump failed."""

    @abc.abstractmethod
    def set_region(self, region: Region) -> bool:
        """Limit reading to ``region``; False if there is nothing there."""

    @abc.abstractmethod
    def rewind(self) -> bool:
        """Return to the first alignment; False on failure."""

    @abc.abstractmethod
    def create_index(self, use_standard_index: bool) -> bool:
        """Build and save an index; False on failure."""

    @abc.abstractmethod
    def set_index_cache_mode(self, mode: IndexCacheMode) -> None:
        """Change how much index data is kept in memory."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the source."""


class BamMultiReader:
    """Merges alignments from several sources in (reference, position) order.

    Alignments at equal positions come out in the order they were queued.
    """

    def __init__(self) -> None:
        self.current_ref_id = 0
        self.current_left = 0
        self.region: Region | None = None
        self._readers: list[AlignmentSource] = []
        self._heap: list[tuple[int, int, int, AlignmentSource, BamAlignment]] = []
        self._counter = itertools.count()
        self._filenames: list[str] = []
        self._core_mode = False

    def __enter__(self) -> BamMultiReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[BamAlignment]:
        while (alignment := self.next_alignment()) is not None:
            yield alignment

    def _push(self, source: AlignmentSource, alignment: BamAlignment | None) -> None:
        if alignment is None:
            return
        entry = (alignment.ref_id, alignment.position, next(self._counter), source, alignment)
        heapq.heappush(self._heap, entry)

    @property
    def _first(self) -> AlignmentSource:
        if not self._readers:
            raise LookupError("no open readers")
        return self._readers[0]

    def open(self, sources: Iterable[AlignmentSource], core_mode: bool = False) -> None:
        """Add ``sources``, reading the first alignment of each.

        A source without alignments is ignored with a warning; if it is the
        only source given, ValueError is raised.  Raises
        ReferenceMismatchError if the sources' references differ.
        """
        sources = list(sources)
        self._core_mode = core_mode
        self._filenames = [source.filename for source in sources]
        for source in sources:
            first = source.next_alignment(core_mode)
            if first is None:
                logger.warning(
                    "could not read first alignment in %s, ignoring file", source.filename
                )
                if len(sources) == 1:
                    raise ValueError(f"could not read first alignment in {source.filename}")
                continue
            self._readers.append(source)
            self._push(source, first)
        if self._readers:
            self.validate_readers()

    def close(self) -> None:
        """Close every source and forget them."""
        for reader in self._readers:
            reader.close()
        self._readers.clear()
        self._heap.clear()

    def filenames(self) -> list[str]:
        """Names of the sources given to the last open()."""
        return list(self._filenames)

    def header_text(self) -> str:
        """Return one header text merged from all sources."""
        return merge_header_texts((r.filename, r.header_text) for r in self._readers)

    def has_open_readers(self) -> bool:
        """True while any source still has alignments queued."""
        return bool(self._heap)

    def next_alignment(self) -> BamAlignment | None:
        """Return the lowest-positioned pending alignment, or None when all are done."""
        if not self._heap:
            return None
        self.update_reference_id()
        _, _, _, source, alignment = heapq.heappop(self._heap)
        self._push(source, source.next_alignment(self._core_mode))
        return alignment

    def update_reference_id(self) -> None:
        """Advance ``current_ref_id`` to the reference of the lowest pending alignment."""
        if not self._heap:
            return
        lowest = self._heap[0][0]
        if lowest > self.current_ref_id:
            self.current_ref_id = lowest

    def update_alignments(self) -> None:
        """Refill the queue with the next alignment of every source."""
        self._heap.clear()
        for reader in self._readers:
            self._push(reader, reader.next_alignment(False))

    def reference_count(self) -> int:
        """Number of reference sequences, shared by all sources."""
        return len(self._first.references)

    def reference_data(self) -> list[Reference]:
        """The reference sequences shared by all sources."""
        return list(self._first.references)

    def reference_id(self, ref_name: str) -> int:
        """Return the ID of the reference named ``ref_name``; KeyError if unknown."""
        for ref_id, reference in enumerate(self._first.references):
            if reference.name == ref_name:
                return ref_id
        raise KeyError(ref_name)

    def is_index_loaded(self) -> bool:
        """True if every source has an index loaded."""
        return all([reader.is_index_loaded() for reader in self._readers])

    def jump(self, ref_id: int, position: int = 0) -> None:
        """Move every source to ``ref_id``:``position``; RuntimeError if one fails."""
        self.current_ref_id = ref_id
        self.current_left = position
        for reader in self._readers:
            if not reader.jump(ref_id, position):
                raise RuntimeError(
                    f"could not jump {reader.filename} to {ref_id}:{position}"
                )
        self.update_alignments()

    def set_region(self, region: Region) -> None:
        """Limit every source to ``region``.

        A source that cannot be set is taken to have no alignments there;
        the failure is logged and reading continues with the others.
        """
        self.region = region
        for reader in self._readers:
            if not reader.set_region(region):
                logger.error(
                    "could not jump %s to %d:%d..%d:%d",
                    reader.filename,
                    region.left_ref_id,
                    region.left_position,
                    region.right_ref_id,
                    region.right_position,
                )
        self.update_alignments()

    def rewind(self) -> bool:
        """Rewind every source; True if all succeeded."""
        return all([reader.rewind() for reader in self._readers])

    def create_indexes(self, use_standard_index: bool = True) -> bool:
        """Build an index for every source; True if all succeeded."""
        return all([reader.create_index(use_standard_index) for reader in self._readers])

    def set_index_cache_mode(self, mode: IndexCacheMode) -> None:
        """Set the index cache mode of every source."""
        for reader in self._readers:
            reader.set_index_cache_mode(mode)

    def validate_readers(self) -> None:
        """Raise ReferenceMismatchError unless all sources share identical references."""
        expected = list(self._first.references)
        for reader in self._readers:
            found = list(reader.references)
            if len(found) != len(expected):
                raise ReferenceMismatchError(
                    f"mismatched number of references in {reader.filename}: "
                    f"expected {len(expected)} reference sequences but found {len(found)}"
                )
            for want, got in zip(expected, found):
                if want.name != got.name or want.length != got.length:
                    raise ReferenceMismatchError(
                        f"mismatched references found in {reader.filename}: "
                        f"expected {[(r.name, r.length) for r in expected]}, "
                        f"found {[(r.name, r.length) for r in found]}"
                    )