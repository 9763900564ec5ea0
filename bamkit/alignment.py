"""The alignment record: core fields, flag queries and tag access."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field

from bamkit import tagedit, tags
from bamkit.tags import TagError

_REFERENCE_CONSUMING = frozenset("MDN")


@dataclass(frozen=True)
class CigarOp:
    """One CIGAR operation: an operation code and its length."""

    type: str
    length: int


class AlignmentFlag(enum.IntFlag):
    """Bits of the alignment flag field."""

    PAIRED = 1
    PROPER_PAIR = 2
    UNMAPPED = 4
    MATE_UNMAPPED = 8
    REVERSE = 16
    MATE_REVERSE = 32
    READ_1 = 64
    READ_2 = 128
    SECONDARY = 256
    QC_FAILED = 512
    DUPLICATE = 1024


@dataclass
class BamAlignment:
    """A single alignment record.

    Flag bits are set and cleared directly on ``alignment_flag``, for
    example ``aln.alignment_flag |= AlignmentFlag.DUPLICATE``.  Tag methods
    work on ``tag_data``; they are unavailable when ``has_core_only`` is set.
    """

    name: str = ""
    length: int = 0
    query_bases: str = ""
    aligned_bases: str = ""
    qualities: str = ""
    tag_data: bytes = b""
    ref_id: int = -1
    position: int = -1
    bin: int = 0
    map_quality: int = 0
    alignment_flag: AlignmentFlag = AlignmentFlag(0)
    cigar_data: list[CigarOp] = field(default_factory=list)
    mate_ref_id: int = -1
    mate_position: int = -1
    insert_size: int = 0
    has_core_only: bool = False

    def __post_init__(self) -> None:
        self.alignment_flag = AlignmentFlag(self.alignment_flag)

    # Flag queries

    def _has(self, flag: AlignmentFlag) -> bool:
        return bool(self.alignment_flag & flag)

    def is_duplicate(self) -> bool:
        """True if this read is a PCR duplicate."""
        return self._has(AlignmentFlag.DUPLICATE)

    def is_failed_qc(self) -> bool:
        """True if this read failed quality control."""
        return self._has(AlignmentFlag.QC_FAILED)

    def is_first_mate(self) -> bool:
        """True if this alignment is the first mate of its read."""
        return self._has(AlignmentFlag.READ_1)

    def is_mapped(self) -> bool:
        """True if this alignment is mapped."""
        return not self._has(AlignmentFlag.UNMAPPED)

    def is_mate_mapped(self) -> bool:
        """True if the mate of this alignment is mapped."""
        return not self._has(AlignmentFlag.MATE_UNMAPPED)

    def is_mate_reverse_strand(self) -> bool:
        """True if the mate mapped to the reverse strand."""
        return self._has(AlignmentFlag.MATE_REVERSE)

    def is_paired(self) -> bool:
        """True if this alignment is part of a paired-end read."""
        return self._has(AlignmentFlag.PAIRED)

    def is_primary_alignment(self) -> bool:
        """True if the reported position is the primary alignment."""
        return not self._has(AlignmentFlag.SECONDARY)

    def is_proper_pair(self) -> bool:
        """True if the read satisfied paired-end resolution."""
        return self._has(AlignmentFlag.PROPER_PAIR)

    def is_reverse_strand(self) -> bool:
        """True if this alignment mapped to the reverse strand."""
        return self._has(AlignmentFlag.REVERSE)

    def is_second_mate(self) -> bool:
        """True if this alignment is the second mate of its read."""
        return self._has(AlignmentFlag.READ_2)

    # Positions

    def end_position(self, use_padded: bool = False, zero_based: bool = True) -> int:
        """Return the alignment end computed from the start and CIGAR operations.

        With ``use_padded`` inserted bases are counted as well.
        """
        end = self.position + sum(
            op.length
            for op in self.cigar_data
            if op.type in _REFERENCE_CONSUMING or (use_padded and op.type == "I")
        )
        return end - 1 if zero_based else end

    # Tags

    def _require_tags(self) -> None:
        if self.has_core_only:
            raise TagError("tag data is not available for a core-only alignment")

    def add_tag(self, tag: str, tag_type: str, value: str | int | float) -> None:
        """Add a new tag; raises TagError if it exists already or is invalid."""
        self._require_tags()
        self.tag_data = tagedit.add_tag(self.tag_data, tag, tag_type, value)

    def edit_tag(self, tag: str, tag_type: str, value: str | int | float) -> None:
        """Set the value of ``tag``, adding it if absent."""
        self._require_tags()
        self.tag_data = tagedit.edit_tag(self.tag_data, tag, tag_type, value)

    def remove_tag(self, tag: str) -> None:
        """Remove ``tag``; raises KeyError if it is absent."""
        self._require_tags()
        self.tag_data = tagedit.remove_tag(self.tag_data, tag)

    def get_string_tag(self, tag: str) -> str | None:
        """Return the string value of ``tag``, or None if unavailable."""
        if self.has_core_only:
            return None
        return tags.get_string(self.tag_data, tag)

    def get_int_tag(self, tag: str) -> int | None:
        """Return the integer value of ``tag``, or None if unavailable."""
        if self.has_core_only:
            return None
        return tags.get_int(self.tag_data, tag)

    def get_float_tag(self, tag: str) -> float | None:
        """Return the float value of ``tag``, or None if unavailable."""
        if self.has_core_only:
            return None
        return tags.get_float(self.tag_data, tag)

    def get_tag_type(self, tag: str) -> str | None:
        """Return the storage type code of ``tag``, or None if unavailable."""
        if self.has_core_only:
            return None
        return tags.get_tag_type(self.tag_data, tag)

    def edit_distance(self) -> int | None:
        """Return the value of the NM tag, or None if unavailable."""
        return self.get_int_tag("NM")

    def read_group(self) -> str | None:
        """Return the value of the RG tag, or None if unavailable."""
        return self.get_string_tag("RG")

    def copy(self) -> BamAlignment:
        """Return an independent copy of this alignment."""
        return dataclasses.replace(self, cigar_data=list(self.cigar_data))