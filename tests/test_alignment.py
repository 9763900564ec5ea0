import pytest

from bamkit.alignment import AlignmentFlag, BamAlignment, CigarOp
from bamkit.tags import TagError


def test_defaults_match_unplaced_record():
    aln = BamAlignment()
    assert aln.ref_id == -1
    assert aln.position == -1
    assert aln.mate_ref_id == -1
    assert aln.mate_position == -1
    assert aln.insert_size == 0


def test_flag_bit_values_follow_format():
    assert BamAlignment(alignment_flag=1).is_paired()
    assert not BamAlignment(alignment_flag=4).is_mapped()
    assert BamAlignment(alignment_flag=1024).is_duplicate()
    assert AlignmentFlag.PAIRED == 1
    assert AlignmentFlag.UNMAPPED == 4
    assert AlignmentFlag.DUPLICATE == 1024


def test_empty_flag_queries():
    aln = BamAlignment()
    assert aln.is_mapped()
    assert aln.is_mate_mapped()
    assert aln.is_primary_alignment()
    assert not aln.is_duplicate()
    assert not aln.is_paired()
    assert not aln.is_reverse_strand()


@pytest.mark.parametrize(
    "flag, query, expected",
    [
        (AlignmentFlag.DUPLICATE, "is_duplicate", True),
        (AlignmentFlag.QC_FAILED, "is_failed_qc", True),
        (AlignmentFlag.READ_1, "is_first_mate", True),
        (AlignmentFlag.UNMAPPED, "is_mapped", False),
        (AlignmentFlag.MATE_UNMAPPED, "is_mate_mapped", False),
        (AlignmentFlag.MATE_REVERSE, "is_mate_reverse_strand", True),
        (AlignmentFlag.PAIRED, "is_paired", True),
        (AlignmentFlag.SECONDARY, "is_primary_alignment", False),
        (AlignmentFlag.PROPER_PAIR, "is_proper_pair", True),
        (AlignmentFlag.REVERSE, "is_reverse_strand", True),
        (AlignmentFlag.READ_2, "is_second_mate", True),
    ],
)
def test_flag_set_and_clear(flag, query, expected):
    aln = BamAlignment()
    aln.alignment_flag |= flag
    assert getattr(aln, query)() is expected
    aln.alignment_flag &= ~flag
    assert getattr(aln, query)() is (not expected)


def test_integer_flag_is_coerced():
    aln = BamAlignment(alignment_flag=AlignmentFlag.PAIRED | AlignmentFlag.REVERSE)
    assert aln.is_paired() and aln.is_reverse_strand()
    assert not aln.is_second_mate()


def test_end_position_empty_cigar_is_start():
    aln = BamAlignment(position=50)
    assert aln.end_position(zero_based=False) == 50


def test_end_position_zero_based_is_one_less():
    aln = BamAlignment(position=100, cigar_data=[CigarOp("M", 10), CigarOp("D", 5)])
    assert aln.end_position(zero_based=False) - aln.end_position() == 1


def test_end_position_padding_counts_insertions():
    cigar = [CigarOp("M", 10), CigarOp("I", 7), CigarOp("M", 3)]
    aln = BamAlignment(position=100, cigar_data=cigar)
    assert aln.end_position(use_padded=True) - aln.end_position() == 7


def test_end_position_ignores_clips():
    plain = BamAlignment(position=10, cigar_data=[CigarOp("M", 20)])
    clipped = BamAlignment(
        position=10,
        cigar_data=[CigarOp("S", 4), CigarOp("M", 20), CigarOp("H", 3)],
    )
    assert clipped.end_position() == plain.end_position()


def test_skipped_region_counts_like_deletion():
    with_n = BamAlignment(position=0, cigar_data=[CigarOp("M", 5), CigarOp("N", 9)])
    with_d = BamAlignment(position=0, cigar_data=[CigarOp("M", 5), CigarOp("D", 9)])
    assert with_n.end_position() == with_d.end_position()


def test_tag_round_trips():
    aln = BamAlignment()
    aln.add_tag("RG", "Z", "group1")
    aln.add_tag("NM", "i", 3)
    aln.add_tag("XS", "f", 2.5)
    assert aln.read_group() == "group1"
    assert aln.edit_distance() == 3
    assert aln.get_float_tag("XS") == 2.5
    assert aln.get_tag_type("RG") == "Z"
    assert aln.get_tag_type("NM") == "i"


def test_add_existing_tag_raises():
    aln = BamAlignment()
    aln.add_tag("NM", "i", 1)
    with pytest.raises(TagError):
        aln.add_tag("NM", "i", 2)


def test_edit_tag_replaces_and_keeps_others():
    aln = BamAlignment()
    aln.add_tag("RG", "Z", "a")
    aln.add_tag("NM", "i", 1)
    aln.edit_tag("RG", "Z", "longer-name")
    assert aln.read_group() == "longer-name"
    assert aln.edit_distance() == 1


def test_edit_tag_adds_when_missing():
    aln = BamAlignment()
    aln.edit_tag("NM", "i", 4)
    assert aln.edit_distance() == 4


def test_remove_tag():
    aln = BamAlignment()
    aln.add_tag("RG", "Z", "g")
    aln.add_tag("NM", "i", 2)
    aln.remove_tag("RG")
    assert aln.read_group() is None
    assert aln.edit_distance() == 2
    with pytest.raises(KeyError):
        aln.remove_tag("RG")


def test_missing_tags_return_none():
    aln = BamAlignment()
    assert aln.read_group() is None
    assert aln.edit_distance() is None
    assert aln.get_tag_type("XX") is None


def test_core_only_blocks_tag_access():
    aln = BamAlignment()
    aln.add_tag("NM", "i", 5)
    aln.has_core_only = True
    assert aln.edit_distance() is None
    assert aln.get_tag_type("NM") is None
    with pytest.raises(TagError):
        aln.add_tag("RG", "Z", "g")
    with pytest.raises(TagError):
        aln.edit_tag("NM", "i", 1)
    with pytest.raises(TagError):
        aln.remove_tag("NM")


def test_int_tag_rejects_float_storage():
    aln = BamAlignment()
    aln.add_tag("XS", "f", 1.0)
    with pytest.raises(TagError):
        aln.get_int_tag("XS")


def test_copy_is_independent():
    aln = BamAlignment(name="read1", position=7, cigar_data=[CigarOp("M", 4)])
    aln.add_tag("NM", "i", 1)
    dup = aln.copy()
    assert dup == aln
    dup.cigar_data.append(CigarOp("D", 2))
    dup.edit_tag("NM", "i", 9)
    assert aln.cigar_data == [CigarOp("M", 4)]
    assert aln.edit_distance() == 1
    assert dup.edit_distance() == 9